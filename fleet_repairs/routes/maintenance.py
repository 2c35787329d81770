# fleet_repairs/routes/maintenance.py
from flask import Blueprint, current_app, jsonify, request

from fleet_repairs.db_models import (
    db,
    MaintenanceSchedule,
    MaintenanceTask,
    User,
    MAINTENANCE_STATUSES,
    MAINTENANCE_TYPES,
    RECURRING_INTERVALS,
    SEVERITIES,
)
from fleet_repairs.services.recurrence import build_next_schedule_fields, next_occurrence
from fleet_repairs.utils.auth import staff_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import (
    as_utc,
    bool_or_none,
    datetime_or_none,
    float_or_none,
    int_or_none,
    str_or_none,
    utcnow,
)
from fleet_repairs.utils.serializers import serialize_schedule, serialize_task

maintenance_bp = Blueprint("maintenance", __name__)

MAINTENANCE_PRIORITIES = set(SEVERITIES)

_FLOAT_FIELDS = {"estimatedHours": "estimated_hours", "actualHours": "actual_hours", "cost": "cost"}


def _enum_detail(field, value, allowed):
    if value is not None and value not in allowed:
        return detail(field, f"{field} must be one of: {', '.join(sorted(allowed))}")
    return None


def _read_schedule_fields(body, partial):
    """
    Shared create/update parsing. Returns (values, details) where values
    only holds keys present in the body (plus defaults when not partial).
    """
    values, details = {}, []

    for key, column in (("fleetNumber", "fleet_number"), ("title", "title")):
        if key in body or not partial:
            value = str_or_none(body.get(key))
            if not value:
                details.append(detail(key, f"{key} is required"))
            values[column] = value

    if "scheduledAt" in body or not partial:
        scheduled_at = datetime_or_none(body.get("scheduledAt"))
        if scheduled_at is None:
            details.append(detail("scheduledAt", "scheduledAt is required and must be an ISO date"))
        values["scheduled_at"] = scheduled_at

    if "completedAt" in body:
        completed_at = datetime_or_none(body.get("completedAt"))
        if body.get("completedAt") and completed_at is None:
            details.append(detail("completedAt", "completedAt must be an ISO date"))
        values["completed_at"] = completed_at

    enums = (
        ("type", "type", MAINTENANCE_TYPES, "PREVENTIVE"),
        ("status", "status", MAINTENANCE_STATUSES, None),
        ("priority", "priority", MAINTENANCE_PRIORITIES, "MEDIUM"),
    )
    for key, column, allowed, default in enums:
        if key in body:
            value = str_or_none(body.get(key))
            value = value.upper() if value else default
            problem = _enum_detail(key, value, allowed)
            if problem:
                details.append(problem)
            if value is not None:
                values[column] = value
        elif not partial and default is not None:
            values[column] = default

    if "recurringInterval" in body:
        interval = str_or_none(body.get("recurringInterval"))
        interval = interval.lower() if interval else None
        problem = _enum_detail("recurringInterval", interval, RECURRING_INTERVALS)
        if problem:
            details.append(problem)
        values["recurring_interval"] = interval

    if "recurring" in body:
        recurring = bool_or_none(body.get("recurring"))
        if recurring is None:
            details.append(detail("recurring", "recurring must be a boolean"))
        values["recurring"] = bool(recurring)
    elif not partial:
        values["recurring"] = False

    for key, column in _FLOAT_FIELDS.items():
        if key in body:
            raw = body.get(key)
            number = float_or_none(raw)
            if raw not in (None, "") and (number is None or number < 0):
                details.append(detail(key, f"{key} must be a non-negative number"))
            values[column] = number

    for key, column in (("description", "description"), ("notes", "notes")):
        if key in body:
            values[column] = str_or_none(body.get(key))

    if "assignedToId" in body:
        raw = body.get("assignedToId")
        assigned_to_id = int_or_none(raw)
        if raw not in (None, "") and (assigned_to_id is None or db.session.get(User, assigned_to_id) is None):
            details.append(detail("assignedToId", "assignedToId must reference an existing user"))
        values["assigned_to_id"] = assigned_to_id

    return values, details


def _read_tasks(raw):
    if raw is None:
        return [], []
    if not isinstance(raw, list):
        return [], [detail("tasks", "tasks must be a list")]
    tasks, details = [], []
    for i, t in enumerate(raw):
        name = str_or_none(t.get("name")) if isinstance(t, dict) else None
        if not name:
            details.append(detail(f"tasks[{i}].name", "task name is required"))
            continue
        tasks.append(MaintenanceTask(name=name, description=str_or_none(t.get("description"))))
    return tasks, details


def _get_schedule(schedule_id):
    return db.session.get(MaintenanceSchedule, schedule_id)


# -----------------------------------------------------------------------------
# GET /api/maintenance
# -----------------------------------------------------------------------------
@maintenance_bp.get("/api/maintenance")
@staff_required
def list_schedules():
    q = MaintenanceSchedule.query

    fleet_number = str_or_none(request.args.get("fleetNumber"))
    if fleet_number:
        q = q.filter(MaintenanceSchedule.fleet_number == fleet_number)
    status = str_or_none(request.args.get("status"))
    if status:
        q = q.filter(MaintenanceSchedule.status == status.upper())
    type_ = str_or_none(request.args.get("type"))
    if type_:
        q = q.filter(MaintenanceSchedule.type == type_.upper())
    start = datetime_or_none(request.args.get("startDate"))
    if start:
        q = q.filter(MaintenanceSchedule.scheduled_at >= start)
    end = datetime_or_none(request.args.get("endDate"))
    if end:
        q = q.filter(MaintenanceSchedule.scheduled_at <= end)

    schedules = q.order_by(MaintenanceSchedule.scheduled_at.asc()).all()
    return jsonify({"schedules": [serialize_schedule(s) for s in schedules]}), 200


# -----------------------------------------------------------------------------
# POST /api/maintenance
# -----------------------------------------------------------------------------
@maintenance_bp.post("/api/maintenance")
@staff_required
def create_schedule():
    body, error = json_body_or_error()
    if error:
        return error

    values, details = _read_schedule_fields(body, partial=False)
    tasks, task_details = _read_tasks(body.get("tasks"))
    details.extend(task_details)
    if details:
        return validation_error(details)

    values.setdefault("status", "SCHEDULED")
    schedule = MaintenanceSchedule(**values)
    if schedule.recurring and schedule.recurring_interval:
        schedule.recurring_next_date = next_occurrence(schedule.scheduled_at, schedule.recurring_interval)
    schedule.tasks.extend(tasks)

    db.session.add(schedule)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create maintenance schedule: %s", e)
        return jsonify({"error": "Failed to create maintenance schedule"}), 500

    return jsonify({"schedule": serialize_schedule(schedule)}), 201


# -----------------------------------------------------------------------------
# GET /api/maintenance/<id>
# -----------------------------------------------------------------------------
@maintenance_bp.get("/api/maintenance/<int:schedule_id>")
@staff_required
def get_schedule(schedule_id: int):
    schedule = _get_schedule(schedule_id)
    if not schedule:
        return jsonify({"error": "Maintenance schedule not found"}), 404
    return jsonify({"schedule": serialize_schedule(schedule)}), 200


# -----------------------------------------------------------------------------
# PUT /api/maintenance/<id>
# Completing a recurring schedule books its next occurrence.
# -----------------------------------------------------------------------------
@maintenance_bp.put("/api/maintenance/<int:schedule_id>")
@staff_required
def update_schedule(schedule_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    schedule = _get_schedule(schedule_id)
    if not schedule:
        return jsonify({"error": "Maintenance schedule not found"}), 404

    values, details = _read_schedule_fields(body, partial=True)
    if details:
        return validation_error(details)

    was_completed = schedule.status == "COMPLETED"
    for column, value in values.items():
        setattr(schedule, column, value)

    if schedule.recurring and schedule.recurring_interval and (
        "scheduled_at" in values or "recurring_interval" in values or "recurring" in values
    ):
        schedule.recurring_next_date = next_occurrence(as_utc(schedule.scheduled_at), schedule.recurring_interval)
    elif not schedule.recurring:
        schedule.recurring_next_date = None

    next_schedule = None
    if schedule.status == "COMPLETED" and not was_completed:
        if schedule.completed_at is None:
            schedule.completed_at = utcnow()
        fields = build_next_schedule_fields(schedule)
        if fields:
            next_schedule = MaintenanceSchedule(status="SCHEDULED", **fields)
            next_schedule.tasks.extend(
                MaintenanceTask(name=t.name, description=t.description) for t in schedule.tasks
            )
            db.session.add(next_schedule)

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update maintenance schedule: %s", e)
        return jsonify({"error": "Failed to update maintenance schedule"}), 500

    if next_schedule is not None:
        current_app.logger.info(
            "Recurring maintenance %s completed; next occurrence %s booked",
            schedule.id, next_schedule.id,
        )

    return jsonify({
        "schedule": serialize_schedule(schedule),
        "nextSchedule": serialize_schedule(next_schedule) if next_schedule else None,
    }), 200


# -----------------------------------------------------------------------------
# DELETE /api/maintenance/<id>
# -----------------------------------------------------------------------------
@maintenance_bp.delete("/api/maintenance/<int:schedule_id>")
@staff_required
def delete_schedule(schedule_id: int):
    schedule = _get_schedule(schedule_id)
    if not schedule:
        return jsonify({"error": "Maintenance schedule not found"}), 404

    db.session.delete(schedule)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete maintenance schedule: %s", e)
        return jsonify({"error": "Failed to delete maintenance schedule"}), 500

    return jsonify({"message": "Maintenance schedule deleted successfully"}), 200


# -----------------------------------------------------------------------------
# Tasks
# -----------------------------------------------------------------------------
@maintenance_bp.get("/api/maintenance/<int:schedule_id>/tasks")
@staff_required
def list_tasks(schedule_id: int):
    schedule = _get_schedule(schedule_id)
    if not schedule:
        return jsonify({"error": "Maintenance schedule not found"}), 404
    return jsonify({"tasks": [serialize_task(t) for t in schedule.tasks]}), 200


@maintenance_bp.post("/api/maintenance/<int:schedule_id>/tasks")
@staff_required
def create_task(schedule_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    schedule = _get_schedule(schedule_id)
    if not schedule:
        return jsonify({"error": "Maintenance schedule not found"}), 404

    name = str_or_none(body.get("name"))
    if not name:
        return validation_error([detail("name", "name is required")])

    task = MaintenanceTask(
        schedule_id=schedule.id,
        name=name,
        description=str_or_none(body.get("description")),
        notes=str_or_none(body.get("notes")),
    )
    db.session.add(task)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create maintenance task: %s", e)
        return jsonify({"error": "Failed to create maintenance task"}), 500

    return jsonify({"task": serialize_task(task)}), 201


def _get_task(schedule_id, task_id):
    task = db.session.get(MaintenanceTask, task_id)
    if task is None or task.schedule_id != schedule_id:
        return None
    return task


@maintenance_bp.put("/api/maintenance/<int:schedule_id>/tasks/<int:task_id>")
@staff_required
def update_task(schedule_id: int, task_id: int):
    body, error = json_body_or_error()
    if error:
        return error

    task = _get_task(schedule_id, task_id)
    if not task:
        return jsonify({"error": "Maintenance task not found"}), 404

    if "name" in body:
        name = str_or_none(body.get("name"))
        if not name:
            return validation_error([detail("name", "name cannot be empty")])
        task.name = name
    if "description" in body:
        task.description = str_or_none(body.get("description"))
    if "notes" in body:
        task.notes = str_or_none(body.get("notes"))
    if "completed" in body:
        completed = bool_or_none(body.get("completed"))
        if completed is None:
            return validation_error([detail("completed", "completed must be a boolean")])
        task.completed = completed
        task.completed_at = utcnow() if completed else None

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update maintenance task: %s", e)
        return jsonify({"error": "Failed to update maintenance task"}), 500

    return jsonify({"task": serialize_task(task)}), 200


@maintenance_bp.delete("/api/maintenance/<int:schedule_id>/tasks/<int:task_id>")
@staff_required
def delete_task(schedule_id: int, task_id: int):
    task = _get_task(schedule_id, task_id)
    if not task:
        return jsonify({"error": "Maintenance task not found"}), 404

    db.session.delete(task)
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to delete maintenance task: %s", e)
        return jsonify({"error": "Failed to delete maintenance task"}), 500

    return jsonify({"message": "Maintenance task deleted successfully"}), 200
