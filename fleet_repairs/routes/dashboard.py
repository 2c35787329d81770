# fleet_repairs/routes/dashboard.py
from datetime import timedelta

from flask import Blueprint, jsonify, request
from sqlalchemy import or_

from fleet_repairs.db_models import Comment, Issue, User, WorkOrder, STAFF_ROLES
from fleet_repairs.services import dashboard as dashboard_service
from fleet_repairs.services.feed import comment_item, merge_feed, parse_limit, work_order_item
from fleet_repairs.services.fleet_analytics import repair_hours
from fleet_repairs.utils.parsing import utcnow

dashboard_bp = Blueprint("dashboard", __name__)

FEED_WINDOW = timedelta(days=7)


# -----------------------------------------------------------------------------
# GET /api/dashboard
# Headline stats and recent activity for the operations/workshop boards.
# -----------------------------------------------------------------------------
@dashboard_bp.get("/api/dashboard")
def dashboard():
    now = utcnow()
    today_start = dashboard_service.melbourne_day_start(now)

    completed_today = (
        Issue.query
        .filter(Issue.status == "COMPLETED", Issue.updated_at >= today_start)
        .all()
    )
    scheduled = WorkOrder.query.filter_by(status="SCHEDULED").count()

    stats = {
        "totalIssues": Issue.query.count(),
        "activeIssues": Issue.active().count(),
        "completedToday": len(completed_today),
        "averageRepairTime": dashboard_service.format_repair_time(
            [repair_hours(i.created_at, i.updated_at) for i in completed_today]
        ),
        "workshopCapacity": dashboard_service.workshop_capacity(scheduled),
        "urgentIssues": Issue.query.filter(
            Issue.severity.in_(("HIGH", "CRITICAL")), Issue.status != "COMPLETED"
        ).count(),
    }

    recent_issues = Issue.query.order_by(Issue.created_at.desc(), Issue.id.desc()).limit(5).all()
    recent_work_orders = WorkOrder.query.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).limit(5).all()
    activities = dashboard_service.merge_activities(
        [dashboard_service.issue_activity(i) for i in recent_issues],
        [dashboard_service.work_order_activity(wo) for wo in recent_work_orders],
    )

    return jsonify({"stats": stats, "activities": activities}), 200


# -----------------------------------------------------------------------------
# GET /api/feed?limit=
# Live feed for drivers: staff comments and recent bookings, newest first.
# -----------------------------------------------------------------------------
@dashboard_bp.get("/api/feed")
def feed():
    try:
        limit = parse_limit(request.args.get("limit"))
    except ValueError as e:
        return jsonify({
            "error": "Invalid query parameters",
            "details": [{"field": "limit", "message": str(e)}],
        }), 400

    comments = (
        Comment.query
        .outerjoin(User, Comment.author_id == User.id)
        .filter(or_(User.role.in_(STAFF_ROLES), Comment.author_role.in_(STAFF_ROLES)))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .limit(limit * 2)
        .all()
    )
    work_orders = (
        WorkOrder.query
        .filter(WorkOrder.created_at >= utcnow() - FEED_WINDOW)
        .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
        .limit(limit)
        .all()
    )

    items = merge_feed(
        (comment_item(c) for c in comments),
        (work_order_item(wo) for wo in work_orders),
        limit=limit,
    )
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200
