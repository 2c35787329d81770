# fleet_repairs/routes/analytics.py
from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func

from fleet_repairs.db_models import db, EquipmentRequest, Issue, WorkOrder, Mapping, SEVERITIES
from fleet_repairs.services import fleet_analytics, notifications, reports
from fleet_repairs.utils.auth import staff_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import (
    as_utc, datetime_or_none, int_or_none, is_email, iso, str_or_none, utcnow,
)

analytics_bp = Blueprint("analytics", __name__)

DEFAULT_HISTORY_DAYS = 90


# -----------------------------------------------------------------------------
# GET /api/analytics/repair-time?category=&severity=&fleetNumber=&days=
# -----------------------------------------------------------------------------
@analytics_bp.get("/api/analytics/repair-time")
def repair_time():
    category = str_or_none(request.args.get("category")) or "Other"
    severity = (str_or_none(request.args.get("severity")) or "MEDIUM").upper()
    fleet_number = str_or_none(request.args.get("fleetNumber"))
    days = int_or_none(request.args.get("days"))

    details = []
    if severity not in SEVERITIES:
        details.append(detail("severity", f"severity must be one of: {', '.join(sorted(SEVERITIES))}"))
    if request.args.get("days") not in (None, "") and (days is None or days < 1):
        details.append(detail("days", "days must be a positive integer"))
    if details:
        return validation_error(details, message="Invalid query parameters")

    now = utcnow()
    q = Issue.query.filter(
        Issue.status == "COMPLETED",
        Issue.category == category,
        Issue.severity == severity,
        Issue.updated_at >= now - timedelta(days=days or DEFAULT_HISTORY_DAYS),
    )
    if fleet_number:
        q = q.filter(Issue.fleet_number == fleet_number)
    samples = [(i.created_at, i.updated_at) for i in q.all()]

    stats = fleet_analytics.repair_time_stats(samples, category, severity, now)
    stats["lastUpdated"] = now.isoformat()
    if fleet_number:
        stats["fleetNumber"] = fleet_number
    return jsonify(stats), 200


# -----------------------------------------------------------------------------
# GET /api/inventory/check?category=|partNumber=|fleetNumber=
# -----------------------------------------------------------------------------
def part_inventory(part_number):
    received = (
        EquipmentRequest.query
        .filter(EquipmentRequest.part_number == part_number, EquipmentRequest.status == "RECEIVED")
        .order_by(EquipmentRequest.received_at.desc())
        .all()
    )
    on_order = (
        EquipmentRequest.query
        .filter(EquipmentRequest.part_number == part_number,
                EquipmentRequest.status.in_(("APPROVED", "ORDERED")))
        .count()
    )
    stock = sum(r.quantity or 0 for r in received)
    latest = received[0] if received else None
    return {
        "partNumber": part_number,
        "available": stock > 0,
        "stock": stock,
        "onOrder": on_order,
        "supplier": latest.supplier if latest else None,
        "itemName": latest.item_name if latest else None,
        "lastReceived": iso(latest.received_at) if latest else None,
        "orderRequired": stock == 0 and on_order == 0,
    }


@analytics_bp.get("/api/inventory/check")
def inventory_check():
    category = str_or_none(request.args.get("category"))
    part_number = str_or_none(request.args.get("partNumber"))
    fleet_number = str_or_none(request.args.get("fleetNumber"))

    inventory = fleet_analytics.category_inventory(category) if category else None
    if inventory is not None:
        return jsonify(inventory), 200
    # an unknown category falls through to the part, fleet and general lookups
    if part_number:
        return jsonify(part_inventory(part_number)), 200
    if fleet_number:
        return jsonify(fleet_analytics.fleet_inventory(fleet_number)), 200
    return jsonify(fleet_analytics.general_inventory()), 200


# -----------------------------------------------------------------------------
# GET /api/metrics
# -----------------------------------------------------------------------------
def _percent(part, whole):
    return round(part / whole * 100, 1) if whole else 0


def build_metrics(now):
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    total = Issue.query.count()
    resolved = Issue.query.filter_by(status="COMPLETED").count()
    critical = Issue.query.filter_by(severity="CRITICAL").count()
    last_7 = Issue.query.filter(Issue.created_at >= week_ago).count()
    last_30 = Issue.query.filter(Issue.created_at >= month_ago).count()

    responded = (
        Issue.query
        .filter(Issue.created_at >= month_ago, Issue.updated_at > Issue.created_at)
        .all()
    )
    response_hours = [fleet_analytics.repair_hours(i.created_at, i.updated_at) for i in responded]

    # fixed on the first visit: completed issues that needed a single work order
    completed_orders = (
        db.session.query(WorkOrder.issue_id, func.count(WorkOrder.id))
        .join(Issue, Issue.id == WorkOrder.issue_id)
        .filter(Issue.status == "COMPLETED")
        .group_by(WorkOrder.issue_id)
        .all()
    )
    first_time = sum(1 for _, n in completed_orders if n == 1)

    fleets = {m.key for m in Mapping.query.filter_by(kind="fleet").all()}
    fleets |= {f for (f,) in db.session.query(Issue.fleet_number).distinct().all()}
    down = {f for (f,) in db.session.query(Issue.fleet_number).filter(Issue.status != "COMPLETED").distinct().all()}

    top_categories = (
        db.session.query(Issue.category, func.count(Issue.id))
        .group_by(Issue.category).order_by(func.count(Issue.id).desc()).limit(5).all()
    )
    problem_fleets = (
        db.session.query(Issue.fleet_number, func.count(Issue.id))
        .group_by(Issue.fleet_number).order_by(func.count(Issue.id).desc()).limit(5).all()
    )

    return {
        "overview": {
            "totalIssues": total,
            "resolvedIssues": resolved,
            "criticalIssues": critical,
            "resolutionRate": _percent(resolved, total),
            "criticalRate": _percent(critical, total),
        },
        "trends": {
            "issuesLast7Days": last_7,
            "issuesLast30Days": last_30,
            "weeklyTrend": last_7,
            "monthlyTrend": last_30,
        },
        "performance": {
            "avgResolutionTimeHours": round(sum(response_hours) / len(response_hours), 1) if response_hours else 0,
            "responseTimeCount": len(response_hours),
            "firstTimeFixRate": _percent(first_time, len(completed_orders)),
            "fleetAvailability": _percent(len(fleets - down), len(fleets)),
        },
        "insights": {
            "topCategories": [{"category": c, "count": n} for c, n in top_categories],
            "problematicFleets": [{"fleetNumber": f, "issueCount": n} for f, n in problem_fleets],
        },
    }


@analytics_bp.get("/api/metrics")
@staff_required
def metrics():
    try:
        return jsonify(build_metrics(utcnow())), 200
    except Exception as e:
        current_app.logger.exception("Metrics API error: %s", e)
        return jsonify({"error": "Failed to fetch metrics"}), 500


# -----------------------------------------------------------------------------
# GET / POST /api/reports/summary
# -----------------------------------------------------------------------------
def summary_for(period, start=None, end=None):
    now = utcnow()
    start, end = reports.period_range(period, now, start, end)
    start, end = as_utc(start), as_utc(end)
    issues = (
        Issue.query
        .filter(Issue.created_at >= start, Issue.created_at <= end)
        .order_by(Issue.created_at.desc())
        .all()
    )
    completed = (
        Issue.query
        .filter(Issue.status == "COMPLETED", Issue.updated_at >= start, Issue.updated_at <= end)
        .all()
    )
    return reports.build_summary(period, start, end, issues, completed, now)


@analytics_bp.get("/api/reports/summary")
@staff_required
def report_summary():
    period = (str_or_none(request.args.get("period")) or "weekly").lower()
    start = datetime_or_none(request.args.get("startDate"))
    end = datetime_or_none(request.args.get("endDate"))

    details = []
    if period not in reports.PERIODS:
        details.append(detail("period", f"period must be one of: {', '.join(reports.PERIODS)}"))
    if request.args.get("startDate") and start is None:
        details.append(detail("startDate", "startDate must be an ISO datetime"))
    if request.args.get("endDate") and end is None:
        details.append(detail("endDate", "endDate must be an ISO datetime"))
    if start and end and end < start:
        details.append(detail("endDate", "endDate must be after startDate"))
    if details:
        return validation_error(details, message="Invalid parameters")

    return jsonify(summary_for(period, start, end)), 200


@analytics_bp.post("/api/reports/summary")
@staff_required
def send_report_summary():
    body, error = json_body_or_error()
    if error:
        return error

    period = (str_or_none(body.get("period")) or "").lower()
    recipients = body.get("recipients") or current_app.config.get("REPORT_RECIPIENTS", [])
    if (
        period not in reports.PERIODS
        or not isinstance(recipients, list)
        or not recipients
        or not all(is_email(r) for r in recipients)
    ):
        return jsonify({"error": "Invalid parameters"}), 400

    summary = summary_for(period)
    try:
        notifications.send_email(recipients, reports.email_subject(period), reports.email_body(summary))
    except Exception as e:
        current_app.logger.exception("Failed to send summary report: %s", e)
        return jsonify({"error": "Failed to send summary report"}), 500

    return jsonify({
        "success": True,
        "message": f"{period} summary report sent successfully",
        "summary": summary,
        "sentTo": recipients,
    }), 200
