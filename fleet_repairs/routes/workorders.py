# fleet_repairs/routes/workorders.py
from flask import Blueprint, current_app, jsonify, request

from fleet_repairs.db_models import db, Issue, User, WorkOrder, ISSUE_STATUSES
from fleet_repairs.services import notifications
from fleet_repairs.services.events import broadcast_update
from fleet_repairs.utils.auth import login_required, staff_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import as_utc, datetime_or_none, int_or_none, str_or_none
from fleet_repairs.utils.serializers import serialize_work_order

workorders_bp = Blueprint("workorders", __name__)


# -----------------------------------------------------------------------------
# GET /api/workorders
# Calendar feed; from/to bound startAt.
# -----------------------------------------------------------------------------
@workorders_bp.get("/api/workorders")
@staff_required
def list_work_orders():
    q = WorkOrder.query

    status = str_or_none(request.args.get("status"))
    if status:
        q = q.filter(WorkOrder.status == status.upper())

    start = datetime_or_none(request.args.get("from"))
    end = datetime_or_none(request.args.get("to"))
    if request.args.get("from") and start is None:
        return validation_error([detail("from", "from must be an ISO date")])
    if request.args.get("to") and end is None:
        return validation_error([detail("to", "to must be an ISO date")])
    if start:
        q = q.filter(WorkOrder.start_at >= start)
    if end:
        q = q.filter(WorkOrder.start_at <= end)

    work_orders = q.order_by(WorkOrder.start_at.asc()).all()
    return jsonify([serialize_work_order(wo, include_issue=True) for wo in work_orders]), 200


def _assignee_or_error(raw):
    """Returns (assigned_to_id, error_detail)."""
    if raw in (None, ""):
        return None, None
    assigned_to_id = int_or_none(raw)
    if assigned_to_id is None or db.session.get(User, assigned_to_id) is None:
        return None, detail("assignedToId", "assignedToId must reference an existing user")
    return assigned_to_id, None


# -----------------------------------------------------------------------------
# POST /api/workorders
# Books a workshop slot; the issue moves to SCHEDULED.
# -----------------------------------------------------------------------------
@workorders_bp.post("/api/workorders")
@staff_required
def create_work_order():
    body, error = json_body_or_error()
    if error:
        return error

    details = []
    issue_id = int_or_none(body.get("issueId"))
    if not issue_id:
        details.append(detail("issueId", "issueId is required"))
    start_at = datetime_or_none(body.get("startAt"))
    end_at = datetime_or_none(body.get("endAt"))
    if start_at is None:
        details.append(detail("startAt", "startAt is required and must be an ISO date"))
    if end_at is None:
        details.append(detail("endAt", "endAt is required and must be an ISO date"))
    if start_at and end_at and end_at < start_at:
        details.append(detail("endAt", "endAt must not be before startAt"))
    workshop_site = str_or_none(body.get("workshopSite"))
    if not workshop_site:
        details.append(detail("workshopSite", "workshopSite is required"))
    status = (str_or_none(body.get("status")) or "SCHEDULED").upper()
    if status not in ISSUE_STATUSES:
        details.append(detail("status", f"status must be one of: {', '.join(sorted(ISSUE_STATUSES))}"))
    assigned_to_id, assignee_error = _assignee_or_error(body.get("assignedToId"))
    if assignee_error:
        details.append(assignee_error)
    if details:
        return validation_error(details)

    issue = db.session.get(Issue, issue_id)
    if not issue:
        return jsonify({"error": "Issue not found"}), 404

    work_order = WorkOrder(
        issue_id=issue.id,
        status=status,
        start_at=start_at,
        end_at=end_at,
        workshop_site=workshop_site,
        assigned_to_id=assigned_to_id,
        work_type=str_or_none(body.get("workType")),
        notes=str_or_none(body.get("notes")),
    )
    db.session.add(work_order)
    issue.status = "SCHEDULED"

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create work order: %s", e)
        return jsonify({"error": "Failed to create work order"}), 500

    current_app.logger.info("Work order %s booked for issue #%s", work_order.id, issue.ticket)
    broadcast_update({"type": "workorder_created", "workOrderId": work_order.id, "issueId": issue.id})
    return jsonify(serialize_work_order(work_order, include_issue=True)), 201


# -----------------------------------------------------------------------------
# PATCH /api/workorders/<id>
# A supplied status is mirrored onto the parent issue.
# -----------------------------------------------------------------------------
@workorders_bp.patch("/api/workorders/<int:work_order_id>")
@login_required
def update_work_order(work_order_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    work_order = db.session.get(WorkOrder, work_order_id)
    if not work_order:
        return jsonify({"error": "Work order not found"}), 404

    details = []
    status = str_or_none(body.get("status"))
    if status is not None:
        status = status.upper()
        if status not in ISSUE_STATUSES:
            details.append(detail("status", f"status must be one of: {', '.join(sorted(ISSUE_STATUSES))}"))

    start_at = work_order.start_at
    end_at = work_order.end_at
    if body.get("startAt"):
        start_at = datetime_or_none(body.get("startAt"))
        if start_at is None:
            details.append(detail("startAt", "startAt must be an ISO date"))
    if body.get("endAt"):
        end_at = datetime_or_none(body.get("endAt"))
        if end_at is None:
            details.append(detail("endAt", "endAt must be an ISO date"))
    if start_at and end_at and as_utc(end_at) < as_utc(start_at):
        details.append(detail("endAt", "endAt must not be before startAt"))

    if "workshopSite" in body and not str_or_none(body.get("workshopSite")):
        details.append(detail("workshopSite", "workshopSite cannot be empty"))
    assigned_to_id = work_order.assigned_to_id
    if "assignedToId" in body:
        assigned_to_id, assignee_error = _assignee_or_error(body.get("assignedToId"))
        if assignee_error:
            details.append(assignee_error)
    if details:
        return validation_error(details)

    work_order.start_at = start_at
    work_order.end_at = end_at
    work_order.assigned_to_id = assigned_to_id
    if "workshopSite" in body:
        work_order.workshop_site = str_or_none(body.get("workshopSite"))
    if "workType" in body:
        work_order.work_type = str_or_none(body.get("workType"))
    if "notes" in body:
        work_order.notes = str_or_none(body.get("notes"))

    issue = work_order.issue
    issue_status_changed = False
    if status is not None:
        work_order.status = status
        issue_status_changed = issue.status != status
        issue.status = status

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update work order: %s", e)
        return jsonify({"error": "Failed to update work order"}), 500

    if issue_status_changed:
        notifications.notify_issue_update(issue, f"Work order {work_order.id} is now {status}")
        broadcast_update({"type": "issue_updated", "issueId": issue.id, "status": issue.status})

    return jsonify(serialize_work_order(work_order, include_issue=True)), 200
