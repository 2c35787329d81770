# fleet_repairs/routes/admin.py
import json

from flask import Blueprint, Response, current_app, jsonify, session
from sqlalchemy import func

from fleet_repairs.db_models import db, Issue, Mapping, User, WorkOrder, ROLES
from fleet_repairs.extensions import cache
from fleet_repairs.utils.auth import admin_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import is_email, iso, str_or_none, utcnow
from fleet_repairs.utils.serializers import (
    serialize_issue,
    serialize_mapping,
    serialize_user,
    serialize_work_order,
)

admin_bp = Blueprint("admin", __name__)

DASHBOARD_CACHE_KEY = "admin:dashboard"
MIN_PASSWORD_LENGTH = 6


# -----------------------------------------------------------------------------
# GET /api/admin/users
# -----------------------------------------------------------------------------
@admin_bp.get("/api/admin/users")
@admin_required
def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([serialize_user(u) for u in users]), 200


# -----------------------------------------------------------------------------
# POST /api/admin/users
# -----------------------------------------------------------------------------
@admin_bp.post("/api/admin/users")
@admin_required
def create_user():
    body, error = json_body_or_error()
    if error:
        return error

    name = str_or_none(body.get("name"))
    email = (str_or_none(body.get("email")) or "").lower()
    password = body.get("password")
    role = (str_or_none(body.get("role")) or "").upper()

    details = []
    if not name:
        details.append(detail("name", "name is required"))
    if not is_email(email):
        details.append(detail("email", "email must be a valid email"))
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        details.append(detail("password", f"password must be at least {MIN_PASSWORD_LENGTH} characters"))
    if role not in ROLES:
        details.append(detail("role", f"role must be one of: {', '.join(sorted(ROLES))}"))
    if details:
        return validation_error(details)

    if User.query.filter_by(email=email).first():
        return jsonify({"error": "User with this email already exists"}), 400
    username = str_or_none(body.get("username"))
    if username and User.query.filter_by(username=username).first():
        return jsonify({"error": "User with this username already exists"}), 400

    user = User(name=name, email=email, username=username, role=role, phone=str_or_none(body.get("phone")))
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create user: %s", e)
        return jsonify({"error": "Failed to create user"}), 500

    current_app.logger.info("User created: %s (%s)", user.email, user.role)
    return jsonify(serialize_user(user)), 201


# -----------------------------------------------------------------------------
# DELETE /api/admin/users/<id>
# -----------------------------------------------------------------------------
@admin_bp.delete("/api/admin/users/<int:user_id>")
@admin_required
def delete_user(user_id: int):
    if session.get("user_id") == user_id:
        return jsonify({"error": "Cannot delete your own account"}), 400

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"error": "User not found"}), 404

    db.session.delete(user)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete user: %s", e)
        return jsonify({"error": "Failed to delete user"}), 500

    current_app.logger.info("User deleted: %s", user.email)
    return jsonify({"success": True}), 200


# -----------------------------------------------------------------------------
# GET /api/admin/dashboard
# -----------------------------------------------------------------------------
def _grouped(column):
    return {key: count for key, count in db.session.query(column, func.count()).group_by(column).all()}


def build_admin_dashboard():
    recent = Issue.query.order_by(Issue.created_at.desc(), Issue.id.desc()).limit(10).all()
    return {
        "totalIssues": Issue.query.count(),
        "pendingIssues": Issue.query.filter_by(status="PENDING").count(),
        "inProgressIssues": Issue.query.filter_by(status="IN_PROGRESS").count(),
        "completedIssues": Issue.query.filter_by(status="COMPLETED").count(),
        "criticalIssues": Issue.query.filter_by(severity="CRITICAL").count(),
        "totalWorkOrders": WorkOrder.query.count(),
        "scheduledWorkOrders": WorkOrder.query.filter_by(status="SCHEDULED").count(),
        "totalFleetUnits": Mapping.query.filter_by(kind="fleet").count(),
        "totalDrivers": Mapping.query.filter_by(kind="driver").count(),
        "recentIssues": [
            {
                "id": i.id,
                "ticket": i.ticket,
                "severity": i.severity,
                "category": i.category,
                "fleetNumber": i.fleet_number,
                "driverName": i.driver_name,
                "createdAt": iso(i.created_at),
                "status": i.status,
            }
            for i in recent
        ],
        "issuesByCategory": _grouped(Issue.category),
        "issuesBySeverity": _grouped(Issue.severity),
        "workOrdersByStatus": _grouped(WorkOrder.status),
    }


@admin_bp.get("/api/admin/dashboard")
@admin_required
def admin_dashboard():
    data = cache.get(DASHBOARD_CACHE_KEY)
    if data is None:
        data = build_admin_dashboard()
        cache.set(DASHBOARD_CACHE_KEY, data, timeout=60)
    return jsonify(data), 200


# -----------------------------------------------------------------------------
# GET /api/export/all
# Full JSON backup as a download.
# -----------------------------------------------------------------------------
@admin_bp.get("/api/export/all")
@admin_required
def export_all():
    issues = Issue.query.order_by(Issue.created_at.desc()).all()
    work_orders = WorkOrder.query.order_by(WorkOrder.created_at.desc()).all()
    users = User.query.order_by(User.created_at.desc()).all()
    mappings = Mapping.query.order_by(Mapping.kind, Mapping.key).all()
    now = utcnow()

    payload = {
        "exportDate": now.isoformat(),
        "summary": {
            "totalIssues": len(issues),
            "totalWorkOrders": len(work_orders),
            "totalUsers": len(users),
            "totalMappings": len(mappings),
        },
        "issues": [serialize_issue(i, detail=True) for i in issues],
        "workOrders": [serialize_work_order(wo) for wo in work_orders],
        "users": [serialize_user(u) for u in users],
        "mappings": [serialize_mapping(m) for m in mappings],
    }

    current_app.logger.info("Full data export: %d issues", len(issues))
    return Response(
        json.dumps(payload, indent=2),
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="se-repairs-export-{now:%Y-%m-%d}.json"'},
    )
