# fleet_repairs/routes/mappings.py
import json

from flask import Blueprint, current_app, jsonify

from fleet_repairs.db_models import db, Mapping, MAPPING_KINDS
from fleet_repairs.extensions import cache
from fleet_repairs.utils.auth import admin_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.serializers import serialize_mapping

mappings_bp = Blueprint("mappings", __name__)

MAPPINGS_CACHE_KEY = "mappings:all"

# kind -> response key
_GROUPS = {"driver": "drivers", "fleet": "fleets", "trailer": "trailers"}


def load_mappings():
    grouped = {group: {} for group in _GROUPS.values()}
    for m in Mapping.query.order_by(Mapping.kind, Mapping.key).all():
        group = _GROUPS.get(m.kind)
        if group:
            grouped[group][m.key] = m.parsed_value()
    return grouped


# -----------------------------------------------------------------------------
# GET /api/mappings
# Driver phones, fleet regos and trailer details for the report form.
# -----------------------------------------------------------------------------
@mappings_bp.get("/api/mappings")
def get_mappings():
    data = cache.get(MAPPINGS_CACHE_KEY)
    if data is None:
        data = load_mappings()
        cache.set(MAPPINGS_CACHE_KEY, data, timeout=300)  # 5 minutes
    return jsonify(data), 200


# -----------------------------------------------------------------------------
# PUT /api/mappings/<kind>/<key>
# Upsert one mapping; the body is the JSON value to store.
# -----------------------------------------------------------------------------
@mappings_bp.put("/api/mappings/<kind>/<path:key>")
@admin_required
def upsert_mapping(kind: str, key: str):
    body, error = json_body_or_error()
    if error:
        return error

    if kind not in MAPPING_KINDS:
        return validation_error([detail("kind", f"kind must be one of: {', '.join(sorted(MAPPING_KINDS))}")])
    key = key.strip()
    if not key:
        return validation_error([detail("key", "key is required")])

    mapping = Mapping.query.filter_by(kind=kind, key=key).first()
    created = mapping is None
    if created:
        mapping = Mapping(kind=kind, key=key)
        db.session.add(mapping)
    mapping.value = json.dumps(body)

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to save mapping: %s", e)
        return jsonify({"error": "Failed to save mapping"}), 500

    cache.delete(MAPPINGS_CACHE_KEY)
    return jsonify(serialize_mapping(mapping)), 201 if created else 200
