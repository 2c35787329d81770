# fleet_repairs/routes/settings.py
from flask import Blueprint, current_app, jsonify

from fleet_repairs.db_models import db, SystemSetting
from fleet_repairs.services.settings import merge_settings, validate_settings
from fleet_repairs.utils.auth import admin_required
from fleet_repairs.utils.http import json_body_or_error

settings_bp = Blueprint("settings", __name__)


def load_settings_row():
    return SystemSetting.query.order_by(SystemSetting.id).first()


# -----------------------------------------------------------------------------
# GET /api/settings
# -----------------------------------------------------------------------------
@settings_bp.get("/api/settings")
def get_settings():
    row = load_settings_row()
    return jsonify(merge_settings(row.values if row else None)), 200


# -----------------------------------------------------------------------------
# PATCH /api/settings
# -----------------------------------------------------------------------------
@settings_bp.patch("/api/settings")
@admin_required
def update_settings():
    body, error = json_body_or_error()
    if error:
        return error

    clean, errors = validate_settings(body)
    if errors:
        return jsonify({"error": errors[0]["message"]}), 400

    row = load_settings_row()
    merged = merge_settings(row.values if row else None)
    merged.update(clean)
    if row is None:
        row = SystemSetting(values=merged)
        db.session.add(row)
    else:
        # reassign so the JSON column is flagged dirty
        row.values = merged

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to update settings: %s", e)
        return jsonify({"error": "Failed to update settings"}), 500

    current_app.logger.info("System settings updated: %s", merged)
    return jsonify(merged), 200
