# fleet_repairs/routes/driver_performance.py
from flask import Blueprint, current_app, jsonify, request

from fleet_repairs.db_models import db, DriverPerformance
from fleet_repairs.utils.auth import staff_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import (
    as_utc,
    datetime_or_none,
    float_or_none,
    int_or_none,
    is_email,
    str_or_none,
)
from fleet_repairs.utils.serializers import serialize_driver_performance

driver_performance_bp = Blueprint("driver_performance", __name__)

_FLOAT_FIELDS = {
    "avgResponseTime": "avg_response_time",
    "safeDrivingScore": "safe_driving_score",
    "fuelEfficiency": "fuel_efficiency",
    "onTimeDeliveryRate": "on_time_delivery_rate",
}
_COUNT_FIELDS = {"issuesReported": "issues_reported", "issuesResolved": "issues_resolved"}


def _average(values):
    values = [v for v in values if v is not None]
    return round(sum(values) / len(values), 2) if values else 0


def performance_stats(records):
    return {
        "uniqueDrivers": len({r.driver_name for r in records}),
        "totalIssuesReported": sum(r.issues_reported or 0 for r in records),
        "totalIssuesResolved": sum(r.issues_resolved or 0 for r in records),
        "avgResponseTime": _average(r.avg_response_time for r in records),
        "avgSafeDrivingScore": _average(r.safe_driving_score for r in records),
        "totalRecords": len(records),
    }


def _read_fields(body, partial):
    values, details = {}, []

    if "driverName" in body or not partial:
        name = str_or_none(body.get("driverName"))
        if not name:
            details.append(detail("driverName", "driverName is required"))
        values["driver_name"] = name

    for key, column in (("periodStart", "period_start"), ("periodEnd", "period_end")):
        if key in body or not partial:
            value = datetime_or_none(body.get(key))
            if value is None:
                details.append(detail(key, f"{key} is required and must be an ISO date"))
            values[column] = value

    if "driverEmail" in body:
        email = str_or_none(body.get("driverEmail"))
        if email and not is_email(email):
            details.append(detail("driverEmail", "driverEmail must be a valid email"))
        values["driver_email"] = email

    if "fleetNumber" in body:
        values["fleet_number"] = str_or_none(body.get("fleetNumber"))
    if "notes" in body:
        values["notes"] = str_or_none(body.get("notes"))

    for key, column in _COUNT_FIELDS.items():
        if key in body:
            count = int_or_none(body.get(key))
            if count is None or count < 0:
                details.append(detail(key, f"{key} must be a non-negative integer"))
            values[column] = count or 0
        elif not partial:
            values[column] = 0

    for key, column in _FLOAT_FIELDS.items():
        if key in body:
            raw = body.get(key)
            number = float_or_none(raw)
            if raw not in (None, "") and number is None:
                details.append(detail(key, f"{key} must be a number"))
            values[column] = number

    return values, details


# -----------------------------------------------------------------------------
# GET /api/driver-performance
# -----------------------------------------------------------------------------
@driver_performance_bp.get("/api/driver-performance")
@staff_required
def list_records():
    q = DriverPerformance.query
    driver_name = str_or_none(request.args.get("driverName"))
    if driver_name:
        q = q.filter(DriverPerformance.driver_name == driver_name)
    fleet_number = str_or_none(request.args.get("fleetNumber"))
    if fleet_number:
        q = q.filter(DriverPerformance.fleet_number == fleet_number)
    start = datetime_or_none(request.args.get("startDate"))
    if start:
        q = q.filter(DriverPerformance.period_start >= start)
    end = datetime_or_none(request.args.get("endDate"))
    if end:
        q = q.filter(DriverPerformance.period_start <= end)

    records = q.order_by(DriverPerformance.period_start.desc()).all()
    return jsonify({
        "records": [serialize_driver_performance(r) for r in records],
        "stats": performance_stats(records),
    }), 200


# -----------------------------------------------------------------------------
# POST /api/driver-performance
# -----------------------------------------------------------------------------
@driver_performance_bp.post("/api/driver-performance")
@staff_required
def create_record():
    body, error = json_body_or_error()
    if error:
        return error

    values, details = _read_fields(body, partial=False)
    if not details and values["period_end"] < values["period_start"]:
        details.append(detail("periodEnd", "periodEnd must not be before periodStart"))
    if details:
        return validation_error(details)

    record = DriverPerformance(**values)
    db.session.add(record)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create driver performance record: %s", e)
        return jsonify({"error": "Failed to create driver performance record"}), 500

    return jsonify({"record": serialize_driver_performance(record)}), 201


# -----------------------------------------------------------------------------
# GET / PUT / DELETE /api/driver-performance/<id>
# -----------------------------------------------------------------------------
@driver_performance_bp.get("/api/driver-performance/<int:record_id>")
@staff_required
def get_record(record_id: int):
    record = db.session.get(DriverPerformance, record_id)
    if not record:
        return jsonify({"error": "Driver performance record not found"}), 404
    return jsonify({"record": serialize_driver_performance(record)}), 200


@driver_performance_bp.put("/api/driver-performance/<int:record_id>")
@staff_required
def update_record(record_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    record = db.session.get(DriverPerformance, record_id)
    if not record:
        return jsonify({"error": "Driver performance record not found"}), 404

    values, details = _read_fields(body, partial=True)
    if not details:
        start = values.get("period_start", record.period_start)
        end = values.get("period_end", record.period_end)
        if as_utc(end) < as_utc(start):
            details.append(detail("periodEnd", "periodEnd must not be before periodStart"))
    if details:
        return validation_error(details)

    for column, value in values.items():
        setattr(record, column, value)

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update driver performance record: %s", e)
        return jsonify({"error": "Failed to update driver performance record"}), 500

    return jsonify({"record": serialize_driver_performance(record)}), 200


@driver_performance_bp.delete("/api/driver-performance/<int:record_id>")
@staff_required
def delete_record(record_id: int):
    record = db.session.get(DriverPerformance, record_id)
    if not record:
        return jsonify({"error": "Driver performance record not found"}), 404

    db.session.delete(record)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete driver performance record: %s", e)
        return jsonify({"error": "Failed to delete driver performance record"}), 500

    return jsonify({"message": "Driver performance record deleted successfully"}), 200
