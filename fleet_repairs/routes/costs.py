# fleet_repairs/routes/costs.py
import csv
import io

from flask import Blueprint, Response, current_app, jsonify, request

from fleet_repairs.db_models import db, CostRecord, Issue, MaintenanceSchedule, WorkOrder, COST_CATEGORIES
from fleet_repairs.utils.auth import staff_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import datetime_or_none, float_or_none, int_or_none, iso, str_or_none, utcnow
from fleet_repairs.utils.serializers import serialize_cost

costs_bp = Blueprint("costs", __name__)

# body key -> (column, model the id must exist in)
_LINKS = {
    "issueId": ("issue_id", Issue),
    "workOrderId": ("work_order_id", WorkOrder),
    "maintenanceScheduleId": ("maintenance_schedule_id", MaintenanceSchedule),
}

CSV_COLUMNS = (
    "id", "createdAt", "category", "description", "amount", "currency", "supplier",
    "invoiceNumber", "invoiceDate", "issueId", "workOrderId", "maintenanceScheduleId",
    "approvedBy", "approvedAt",
)


def summarize_costs(costs):
    """Per-category {count, total} plus the grand total."""
    totals = {}
    for c in costs:
        entry = totals.setdefault(c.category, {"count": 0, "total": 0.0})
        entry["count"] += 1
        entry["total"] = round(entry["total"] + c.amount, 2)
    grand_total = round(sum(c.amount for c in costs), 2)
    return totals, grand_total


def _filtered_costs():
    q = CostRecord.query
    for key, (column, _model) in _LINKS.items():
        value = int_or_none(request.args.get(key))
        if value:
            q = q.filter(getattr(CostRecord, column) == value)
    category = str_or_none(request.args.get("category"))
    if category:
        q = q.filter(CostRecord.category == category.lower())
    start = datetime_or_none(request.args.get("startDate"))
    if start:
        q = q.filter(CostRecord.created_at >= start)
    end = datetime_or_none(request.args.get("endDate"))
    if end:
        q = q.filter(CostRecord.created_at <= end)
    return q.order_by(CostRecord.created_at.desc(), CostRecord.id.desc()).all()


def _read_cost_fields(body, partial):
    values, details = {}, []

    if "category" in body or not partial:
        category = (str_or_none(body.get("category")) or "").lower()
        if category not in COST_CATEGORIES:
            details.append(detail("category", f"category must be one of: {', '.join(sorted(COST_CATEGORIES))}"))
        values["category"] = category

    if "description" in body or not partial:
        description = str_or_none(body.get("description"))
        if not description:
            details.append(detail("description", "description is required"))
        values["description"] = description

    if "amount" in body or not partial:
        amount = float_or_none(body.get("amount"))
        if amount is None or amount <= 0:
            details.append(detail("amount", "amount must be a positive number"))
        values["amount"] = amount

    if "currency" in body:
        values["currency"] = (str_or_none(body.get("currency")) or "AUD").upper()
    elif not partial:
        values["currency"] = "AUD"

    for key, column in (("supplier", "supplier"), ("invoiceNumber", "invoice_number"), ("approvedBy", "approved_by")):
        if key in body:
            values[column] = str_or_none(body.get(key))

    for key, column in (("invoiceDate", "invoice_date"), ("approvedAt", "approved_at")):
        if key in body:
            value = datetime_or_none(body.get(key))
            if body.get(key) and value is None:
                details.append(detail(key, f"{key} must be an ISO date"))
            values[column] = value

    for key, (column, model) in _LINKS.items():
        if key in body:
            raw = body.get(key)
            link_id = int_or_none(raw)
            if raw not in (None, "") and (link_id is None or db.session.get(model, link_id) is None):
                details.append(detail(key, f"{key} must reference an existing record"))
            values[column] = link_id

    return values, details


# -----------------------------------------------------------------------------
# GET /api/costs
# -----------------------------------------------------------------------------
@costs_bp.get("/api/costs")
@staff_required
def list_costs():
    costs = _filtered_costs()
    totals, grand_total = summarize_costs(costs)
    return jsonify({
        "costs": [serialize_cost(c) for c in costs],
        "totals": totals,
        "grandTotal": grand_total,
        "count": len(costs),
    }), 200


# -----------------------------------------------------------------------------
# GET /api/costs/export
# Same filters as the list, as a CSV download.
# -----------------------------------------------------------------------------
@costs_bp.get("/api/costs/export")
@staff_required
def export_costs():
    costs = _filtered_costs()

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)
    for c in costs:
        writer.writerow([
            c.id, iso(c.created_at), c.category, c.description, f"{c.amount:.2f}", c.currency,
            c.supplier or "", c.invoice_number or "", iso(c.invoice_date) or "",
            c.issue_id or "", c.work_order_id or "", c.maintenance_schedule_id or "",
            c.approved_by or "", iso(c.approved_at) or "",
        ])

    output.seek(0)
    return Response(
        output.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment;filename=costs_{utcnow():%Y%m%d}.csv"},
    )


# -----------------------------------------------------------------------------
# POST /api/costs
# -----------------------------------------------------------------------------
@costs_bp.post("/api/costs")
@staff_required
def create_cost():
    body, error = json_body_or_error()
    if error:
        return error

    values, details = _read_cost_fields(body, partial=False)
    if details:
        return validation_error(details)

    cost = CostRecord(**values)
    db.session.add(cost)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create cost record: %s", e)
        return jsonify({"error": "Failed to create cost record"}), 500

    return jsonify({"cost": serialize_cost(cost)}), 201


# -----------------------------------------------------------------------------
# GET / PUT / DELETE /api/costs/<id>
# -----------------------------------------------------------------------------
@costs_bp.get("/api/costs/<int:cost_id>")
@staff_required
def get_cost(cost_id: int):
    cost = db.session.get(CostRecord, cost_id)
    if not cost:
        return jsonify({"error": "Cost record not found"}), 404
    return jsonify({"cost": serialize_cost(cost)}), 200


@costs_bp.put("/api/costs/<int:cost_id>")
@staff_required
def update_cost(cost_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    cost = db.session.get(CostRecord, cost_id)
    if not cost:
        return jsonify({"error": "Cost record not found"}), 404

    values, details = _read_cost_fields(body, partial=True)
    if details:
        return validation_error(details)

    for column, value in values.items():
        setattr(cost, column, value)

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update cost record: %s", e)
        return jsonify({"error": "Failed to update cost record"}), 500

    return jsonify({"cost": serialize_cost(cost)}), 200


@costs_bp.delete("/api/costs/<int:cost_id>")
@staff_required
def delete_cost(cost_id: int):
    cost = db.session.get(CostRecord, cost_id)
    if not cost:
        return jsonify({"error": "Cost record not found"}), 404

    db.session.delete(cost)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete cost record: %s", e)
        return jsonify({"error": "Failed to delete cost record"}), 500

    return jsonify({"message": "Cost record deleted successfully"}), 200
