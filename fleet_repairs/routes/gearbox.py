# fleet_repairs/routes/gearbox.py
from flask import Blueprint, current_app, jsonify, request

from fleet_repairs.db_models import SEVERITIES
from fleet_repairs.services.gearbox import GearboxNotConfigured, get_gearbox_client
from fleet_repairs.utils.auth import staff_required
from fleet_repairs.utils.http import json_body_or_error
from fleet_repairs.utils.parsing import str_or_none, utcnow

gearbox_bp = Blueprint("gearbox", __name__)


def _gearbox_failure(e, message):
    current_app.logger.exception("%s: %s", message, e)
    if isinstance(e, GearboxNotConfigured):
        return jsonify({"error": str(e)}), 503
    return jsonify({"error": message}), 500


# -----------------------------------------------------------------------------
# GET /api/gearbox/vehicles?filter=
# -----------------------------------------------------------------------------
@gearbox_bp.get("/api/gearbox/vehicles")
@staff_required
def vehicles():
    filter_ = str_or_none(request.args.get("filter"))
    try:
        result = get_gearbox_client().get_vehicles(filter_)
    except Exception as e:
        return _gearbox_failure(e, "Failed to fetch vehicles from Gearbox")
    return jsonify({"vehicles": result}), 200


# -----------------------------------------------------------------------------
# GET /api/gearbox/services
# -----------------------------------------------------------------------------
@gearbox_bp.get("/api/gearbox/services")
@staff_required
def services():
    try:
        result = get_gearbox_client().get_services()
    except Exception as e:
        return _gearbox_failure(e, "Failed to fetch services from Gearbox")
    return jsonify({"services": result}), 200


# -----------------------------------------------------------------------------
# POST /api/gearbox/sync-issue
# Push an issue to Gearbox as an open fault report.
# -----------------------------------------------------------------------------
@gearbox_bp.post("/api/gearbox/sync-issue")
@staff_required
def sync_issue():
    body, error = json_body_or_error()
    if error:
        return error

    issue_id = body.get("issueId")
    fleet_number = str_or_none(body.get("fleetNumber"))
    description = str_or_none(body.get("description"))
    severity = body.get("severity")
    if issue_id in (None, ""):
        return jsonify({"error": "issueId is required"}), 400
    if not fleet_number:
        return jsonify({"error": "fleetNumber is required"}), 400
    if not description:
        return jsonify({"error": "description is required"}), 400
    if severity is not None and severity not in SEVERITIES:
        return jsonify({"error": f"severity must be one of: {', '.join(SEVERITIES)}"}), 400

    try:
        fault = get_gearbox_client().create_fault_report({
            "fleet_number": fleet_number,
            "description": description,
            "report_date": utcnow().date().isoformat(),
            "severity": severity.lower() if severity else None,
            "status": "open",
        })
    except Exception as e:
        return _gearbox_failure(e, "Failed to sync issue to Gearbox")

    fault_id = (fault or {}).get("id")
    current_app.logger.info("Issue %s synced to Gearbox as fault report %s", issue_id, fault_id)
    return jsonify({"success": True, "gearboxFaultId": fault_id, "issueId": issue_id}), 200
