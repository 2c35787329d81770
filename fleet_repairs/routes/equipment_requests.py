# fleet_repairs/routes/equipment_requests.py
from flask import Blueprint, current_app, jsonify, request

from fleet_repairs.db_models import db, EquipmentRequest, Issue, REQUEST_PRIORITIES, REQUEST_STATUSES
from fleet_repairs.services import fleet_analytics, notifications
from fleet_repairs.utils.auth import current_role, current_user, is_admin, login_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import float_or_none, int_or_none, str_or_none, utcnow
from fleet_repairs.utils.serializers import serialize_equipment_request

equipment_requests_bp = Blueprint("equipment_requests", __name__)


def _get_request(request_id):
    return db.session.get(EquipmentRequest, request_id)


def apply_status(equipment_request, status, approved_by=None, cancellation_reason=None, now=None):
    """Set the status and stamp the matching lifecycle timestamp."""
    now = now or utcnow()
    equipment_request.status = status
    if status == "APPROVED":
        equipment_request.approved_at = now
        if approved_by:
            equipment_request.approved_by = approved_by
    elif status == "ORDERED":
        equipment_request.ordered_at = now
    elif status == "RECEIVED":
        equipment_request.received_at = now
    elif status == "CANCELLED":
        equipment_request.cancelled_at = now
        if cancellation_reason:
            equipment_request.cancellation_reason = cancellation_reason


# -----------------------------------------------------------------------------
# GET /api/equipment-requests
# URGENT first, then newest.
# -----------------------------------------------------------------------------
@equipment_requests_bp.get("/api/equipment-requests")
@login_required
def list_requests():
    q = EquipmentRequest.query
    status = str_or_none(request.args.get("status"))
    if status:
        q = q.filter(EquipmentRequest.status == status.upper())
    priority = str_or_none(request.args.get("priority"))
    if priority:
        q = q.filter(EquipmentRequest.priority == priority.upper())
    issue_id = int_or_none(request.args.get("issueId"))
    if issue_id:
        q = q.filter(EquipmentRequest.issue_id == issue_id)

    rows = q.order_by(
        EquipmentRequest.priority_rank().desc(),
        EquipmentRequest.created_at.desc(),
        EquipmentRequest.id.desc(),
    ).all()
    return jsonify({"requests": [serialize_equipment_request(r) for r in rows]}), 200


# -----------------------------------------------------------------------------
# POST /api/equipment-requests
# -----------------------------------------------------------------------------
@equipment_requests_bp.post("/api/equipment-requests")
@login_required
def create_request():
    body, error = json_body_or_error()
    if error:
        return error

    item_name = str_or_none(body.get("itemName"))
    reason = str_or_none(body.get("reason"))
    if not item_name or not reason:
        return jsonify({"error": "Item name and reason are required"}), 400

    priority = (str_or_none(body.get("priority")) or "MEDIUM").upper()
    if priority not in REQUEST_PRIORITIES:
        return validation_error([detail(
            "priority", f"priority must be one of: {', '.join(sorted(REQUEST_PRIORITIES))}"
        )])
    urgent_reason = str_or_none(body.get("urgentReason"))
    if priority == "URGENT" and not urgent_reason:
        return jsonify({"error": "Urgent reason is required for URGENT priority"}), 400

    details = []
    quantity = int_or_none(body.get("quantity"))
    if body.get("quantity") is not None and (quantity is None or quantity < 1):
        details.append(detail("quantity", "quantity must be a positive integer"))
    estimated_cost = float_or_none(body.get("estimatedCost"))
    if body.get("estimatedCost") not in (None, "") and (estimated_cost is None or estimated_cost < 0):
        details.append(detail("estimatedCost", "estimatedCost must be a non-negative number"))
    issue_id = int_or_none(body.get("issueId"))
    issue = None
    if body.get("issueId") not in (None, ""):
        issue = db.session.get(Issue, issue_id) if issue_id else None
        if issue is None:
            details.append(detail("issueId", "issueId must reference an existing issue"))
    if details:
        return validation_error(details)

    user = current_user()
    fleet_number = str_or_none(body.get("fleetNumber")) or (issue.fleet_number if issue else None)
    equipment_request = EquipmentRequest(
        issue_id=issue.id if issue else None,
        requested_by_id=user.id if user else None,
        requested_by_role=current_role(),
        item_name=item_name,
        item_description=str_or_none(body.get("itemDescription")),
        quantity=quantity or 1,
        estimated_cost=estimated_cost,
        supplier=str_or_none(body.get("supplier")),
        part_number=str_or_none(body.get("partNumber")),
        reason=reason,
        fleet_number=fleet_number,
        priority=priority,
        urgent_reason=urgent_reason,
        status="PENDING",
    )
    db.session.add(equipment_request)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create equipment request: %s", e)
        return jsonify({"error": "Failed to create equipment request"}), 500

    category = issue.category if issue else None
    inventory = fleet_analytics.category_inventory(category) if category else None
    notifications.notify_parts_needed(
        fleet_number,
        category or item_name,
        equipment_request.estimated_cost or (inventory or {}).get("estimatedCost"),
        (inventory or {}).get("leadTime"),
    )

    return jsonify({"request": serialize_equipment_request(equipment_request)}), 201


# -----------------------------------------------------------------------------
# GET / PATCH / DELETE /api/equipment-requests/<id>
# -----------------------------------------------------------------------------
@equipment_requests_bp.get("/api/equipment-requests/<int:request_id>")
@login_required
def get_request(request_id: int):
    equipment_request = _get_request(request_id)
    if not equipment_request:
        return jsonify({"error": "Equipment request not found"}), 404
    return jsonify({"request": serialize_equipment_request(equipment_request)}), 200


@equipment_requests_bp.patch("/api/equipment-requests/<int:request_id>")
@login_required
def update_request(request_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    equipment_request = _get_request(request_id)
    if not equipment_request:
        return jsonify({"error": "Equipment request not found"}), 404

    details = []
    status = str_or_none(body.get("status"))
    if status is not None:
        status = status.upper()
        if status not in REQUEST_STATUSES:
            details.append(detail("status", f"status must be one of: {', '.join(sorted(REQUEST_STATUSES))}"))
    priority = str_or_none(body.get("priority"))
    if priority is not None:
        priority = priority.upper()
        if priority not in REQUEST_PRIORITIES:
            details.append(detail("priority", f"priority must be one of: {', '.join(sorted(REQUEST_PRIORITIES))}"))
    estimated_cost = float_or_none(body.get("estimatedCost"))
    if body.get("estimatedCost") not in (None, "") and estimated_cost is None:
        details.append(detail("estimatedCost", "estimatedCost must be a number"))
    if details:
        return validation_error(details)

    if status is not None:
        user = current_user()
        apply_status(
            equipment_request,
            status,
            approved_by=str_or_none(body.get("approvedBy")) or (user.name if user else current_role()),
            cancellation_reason=str_or_none(body.get("cancellationReason")),
        )
    if priority is not None:
        equipment_request.priority = priority
    if "estimatedCost" in body:
        equipment_request.estimated_cost = estimated_cost
    for key, column in (("notes", "notes"), ("supplier", "supplier"), ("partNumber", "part_number")):
        if key in body:
            setattr(equipment_request, column, str_or_none(body.get(key)))

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update equipment request: %s", e)
        return jsonify({"error": "Failed to update equipment request"}), 500

    return jsonify({"request": serialize_equipment_request(equipment_request)}), 200


@equipment_requests_bp.delete("/api/equipment-requests/<int:request_id>")
@login_required
def delete_request(request_id: int):
    equipment_request = _get_request(request_id)
    if not equipment_request:
        return jsonify({"error": "Equipment request not found"}), 404

    user = current_user()
    is_requester = (
        (user is not None and equipment_request.requested_by_id == user.id)
        or (equipment_request.requested_by_id is None and equipment_request.requested_by_role == current_role())
    )
    if not (is_admin() or is_requester):
        return jsonify({"error": "Forbidden"}), 403

    db.session.delete(equipment_request)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete equipment request: %s", e)
        return jsonify({"error": "Failed to delete equipment request"}), 500

    return jsonify({"success": True}), 200
