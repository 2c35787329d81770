# fleet_repairs/routes/issues.py
from statistics import mean

from flask import Blueprint, current_app, jsonify, request

from fleet_repairs.db_models import db, Comment, Issue, Media, ISSUE_STATUSES, SEVERITIES
from fleet_repairs.services import fleet_analytics, form_validation, notifications
from fleet_repairs.services.events import broadcast_update
from fleet_repairs.services.feed import MELBOURNE
from fleet_repairs.services.prioritization import (
    DRIVER_MULTIPLIERS,
    PriorityFactors,
    calculate_priority,
    route_criticality,
)
from fleet_repairs.utils.auth import current_role, current_user, login_required, staff_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import datetime_or_none, int_or_none, str_or_none, utcnow
from fleet_repairs.utils.serializers import serialize_comment, serialize_issue

issues_bp = Blueprint("issues", __name__)

MAX_LIST_LIMIT = 200
DEFAULT_LIST_LIMIT = 50
SAFE_TO_CONTINUE = {"Yes", "No", "Unsure"}

# body key -> column, for plain text fields a PATCH may touch
_EDITABLE_TEXT = {
    "category": "category",
    "description": "description",
    "location": "location",
    "fleetNumber": "fleet_number",
    "driverName": "driver_name",
    "driverPhone": "driver_phone",
}
_EDITABLE_REGOS = {"primeRego": "prime_rego", "trailerA": "trailer_a", "trailerB": "trailer_b"}


def _broadcast_issue(event_type, issue):
    broadcast_update({
        "type": event_type,
        "issueId": issue.id,
        "ticket": issue.ticket,
        "fleetNumber": issue.fleet_number,
        "severity": issue.severity,
        "status": issue.status,
    })


# -----------------------------------------------------------------------------
# GET /api/issues
# -----------------------------------------------------------------------------
@issues_bp.get("/api/issues")
def list_issues():
    q = Issue.query

    status = str_or_none(request.args.get("status"))
    if status:
        q = q.filter(Issue.status == status.upper())
    severity = str_or_none(request.args.get("severity"))
    if severity:
        q = q.filter(Issue.severity == severity.upper())
    fleet_number = str_or_none(request.args.get("fleetNumber"))
    if fleet_number:
        q = q.filter(Issue.fleet_number == fleet_number)
    category = str_or_none(request.args.get("category"))
    if category:
        q = q.filter(Issue.category == category)

    limit = int_or_none(request.args.get("limit")) or DEFAULT_LIST_LIMIT
    limit = max(1, min(limit, MAX_LIST_LIMIT))

    issues = q.order_by(Issue.created_at.desc(), Issue.id.desc()).limit(limit).all()
    return jsonify({"issues": [serialize_issue(i) for i in issues], "count": len(issues)}), 200


# -----------------------------------------------------------------------------
# POST /api/issues
# Driver issue report (public).
# -----------------------------------------------------------------------------
@issues_bp.post("/api/issues")
def create_issue():
    body, error = json_body_or_error()
    if error:
        return error

    fleet_number = str_or_none(body.get("fleetNumber"))
    category = str_or_none(body.get("category"))
    description = str_or_none(body.get("description"))
    severity = str_or_none(body.get("severity"))
    driver_phone = str_or_none(body.get("driverPhone"))
    safe_to_continue = str_or_none(body.get("safeToContinue"))

    details = []
    if not form_validation.is_valid_fleet_number(fleet_number):
        details.append(detail("fleetNumber", "fleetNumber is required"))
    if not category:
        details.append(detail("category", "category is required"))
    if not description:
        details.append(detail("description", "description is required"))
    if severity and severity.upper() not in SEVERITIES:
        details.append(detail("severity", f"severity must be one of: {', '.join(sorted(SEVERITIES))}"))
    if not form_validation.is_valid_phone(driver_phone):
        details.append(detail("driverPhone", "driverPhone must be 10 digits or +61 followed by 9 digits"))
    if safe_to_continue and safe_to_continue not in SAFE_TO_CONTINUE:
        details.append(detail(
            "safeToContinue", f"safeToContinue must be one of: {', '.join(sorted(SAFE_TO_CONTINUE))}"
        ))
    media_urls = body.get("mediaUrls") or []
    if not isinstance(media_urls, list):
        details.append(detail("mediaUrls", "mediaUrls must be a list of URLs"))
    if details:
        return validation_error(details)

    if severity:
        severity = severity.upper()
    else:
        severity = form_validation.detect_severity(description) or "LOW"

    issue = Issue(
        ticket=Issue.next_ticket(),
        status="PENDING",
        severity=severity,
        category=category,
        description=description,
        safe_to_continue=safe_to_continue,
        location=str_or_none(body.get("location")),
        preferred_from=datetime_or_none(body.get("preferredFrom")),
        preferred_to=datetime_or_none(body.get("preferredTo")),
        fleet_number=fleet_number,
        prime_rego=form_validation.format_registration(body.get("primeRego")) or None,
        trailer_a=form_validation.format_registration(body.get("trailerA")) or None,
        trailer_b=form_validation.format_registration(body.get("trailerB")) or None,
        driver_name=str_or_none(body.get("driverName")),
        driver_phone=driver_phone,
    )
    for url in media_urls:
        url = str_or_none(url)
        if url:
            issue.media.append(Media(url=url, type=_media_type(url)))

    db.session.add(issue)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create issue: %s", e)
        return jsonify({"error": "Failed to create issue"}), 500

    current_app.logger.info("Issue #%s reported for fleet %s (%s)", issue.ticket, issue.fleet_number, issue.severity)
    notifications.notify_new_issue(issue)
    _broadcast_issue("issue_created", issue)

    return jsonify(serialize_issue(issue, detail=True)), 201


def _media_type(url):
    lowered = url.lower()
    if lowered.endswith((".mp4", ".mov")):
        return "video"
    return "image"


# -----------------------------------------------------------------------------
# POST /api/issues/suggest
# Severity/category hints while the driver types.
# -----------------------------------------------------------------------------
@issues_bp.post("/api/issues/suggest")
def suggest():
    body, error = json_body_or_error()
    if error:
        return error

    description = body.get("description") if isinstance(body.get("description"), str) else ""
    return jsonify({
        "severity": form_validation.detect_severity(description),
        "category": form_validation.suggest_category(description),
        "descriptionError": form_validation.description_error(description),
    }), 200


# -----------------------------------------------------------------------------
# GET /api/issues/<id>
# -----------------------------------------------------------------------------
@issues_bp.get("/api/issues/<int:issue_id>")
def get_issue(issue_id: int):
    issue = db.session.get(Issue, issue_id)
    if not issue:
        return jsonify({"error": "Issue not found"}), 404
    return jsonify(serialize_issue(issue, detail=True)), 200


# -----------------------------------------------------------------------------
# PATCH /api/issues/<id>
# -----------------------------------------------------------------------------
@issues_bp.patch("/api/issues/<int:issue_id>")
@login_required
def update_issue(issue_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    issue = db.session.get(Issue, issue_id)
    if not issue:
        return jsonify({"error": "Issue not found"}), 404

    details = []
    status = str_or_none(body.get("status"))
    if status is not None:
        status = status.upper()
        if status not in ISSUE_STATUSES:
            details.append(detail("status", f"status must be one of: {', '.join(sorted(ISSUE_STATUSES))}"))
    severity = str_or_none(body.get("severity"))
    if severity is not None:
        severity = severity.upper()
        if severity not in SEVERITIES:
            details.append(detail("severity", f"severity must be one of: {', '.join(sorted(SEVERITIES))}"))
    if "driverPhone" in body and not form_validation.is_valid_phone(body.get("driverPhone")):
        details.append(detail("driverPhone", "driverPhone must be 10 digits or +61 followed by 9 digits"))
    for key in ("category", "description", "fleetNumber"):
        if key in body and not str_or_none(body.get(key)):
            details.append(detail(key, f"{key} cannot be empty"))
    if details:
        return validation_error(details)

    status_changed = status is not None and status != issue.status
    if status is not None:
        issue.status = status
    if severity is not None:
        issue.severity = severity
    for key, column in _EDITABLE_TEXT.items():
        if key in body:
            setattr(issue, column, str_or_none(body.get(key)))
    for key, column in _EDITABLE_REGOS.items():
        if key in body:
            setattr(issue, column, form_validation.format_registration(body.get(key)) or None)
    if "safeToContinue" in body:
        issue.safe_to_continue = str_or_none(body.get("safeToContinue"))
    if "preferredFrom" in body:
        issue.preferred_from = datetime_or_none(body.get("preferredFrom"))
    if "preferredTo" in body:
        issue.preferred_to = datetime_or_none(body.get("preferredTo"))

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update issue: %s", e)
        return jsonify({"error": "Failed to update issue"}), 500

    if status_changed:
        notifications.notify_issue_update(issue, str_or_none(body.get("updateMessage")))
        _broadcast_issue("issue_updated", issue)

    return jsonify(serialize_issue(issue, detail=True)), 200


# -----------------------------------------------------------------------------
# POST /api/issues/<id>/comment
# -----------------------------------------------------------------------------
@issues_bp.post("/api/issues/<int:issue_id>/comment")
@login_required
def add_comment(issue_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    text = str_or_none(body.get("body"))
    if not text:
        return validation_error([detail("body", "body is required")])

    issue = db.session.get(Issue, issue_id)
    if not issue:
        return jsonify({"error": "Issue not found"}), 404

    user = current_user()
    comment = Comment(
        issue_id=issue.id,
        author_id=user.id if user else None,
        author_role=current_role(),
        body=text,
    )
    db.session.add(comment)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to add comment: %s", e)
        return jsonify({"error": "Failed to add comment"}), 500

    broadcast_update({"type": "comment_added", "issueId": issue.id, "ticket": issue.ticket})
    return jsonify(serialize_comment(comment)), 201


# -----------------------------------------------------------------------------
# GET /api/issues/<id>/priority
# Smart prioritisation score for triage.
# -----------------------------------------------------------------------------
@issues_bp.get("/api/issues/<int:issue_id>/priority")
@staff_required
def issue_priority(issue_id: int):
    issue = db.session.get(Issue, issue_id)
    if not issue:
        return jsonify({"error": "Issue not found"}), 404

    driver_experience = (request.args.get("driverExperience") or "EXPERIENCED").upper()
    if driver_experience not in DRIVER_MULTIPLIERS:
        return validation_error([detail(
            "driverExperience",
            f"driverExperience must be one of: {', '.join(sorted(DRIVER_MULTIPLIERS))}",
        )])

    completed = (
        Issue.query
        .filter(Issue.category == issue.category, Issue.status == "COMPLETED")
        .order_by(Issue.updated_at.desc())
        .limit(100)
        .all()
    )
    if completed:
        repair_time = mean(fleet_analytics.repair_hours(i.created_at, i.updated_at) for i in completed)
    else:
        repair_time = fleet_analytics.base_repair_hours(issue.category, issue.severity)

    local_now = utcnow().astimezone(MELBOURNE)
    factors = PriorityFactors(
        severity=issue.severity,
        fleet_utilization=fleet_analytics.fleet_utilization(issue.fleet_number)["utilization"],
        route_criticality=route_criticality(issue.fleet_number),
        historical_repair_time=round(repair_time, 1),
        parts_available=fleet_analytics.parts_available(issue.category),
        driver_experience=driver_experience,
        hour_of_day=local_now.hour,
        day_of_week=(local_now.weekday() + 1) % 7,
    )
    result = calculate_priority(factors)

    return jsonify({
        "issueId": issue.id,
        "ticket": issue.ticket,
        **result.to_dict(),
        "factors": {
            "severity": factors.severity,
            "fleetUtilization": factors.fleet_utilization,
            "routeCriticality": factors.route_criticality,
            "historicalRepairTime": factors.historical_repair_time,
            "partsAvailable": factors.parts_available,
            "driverExperience": factors.driver_experience,
        },
    }), 200
