# fleet_repairs/routes/notifications.py
from flask import Blueprint, current_app, jsonify

from fleet_repairs.services import notifications
from fleet_repairs.utils.auth import staff_required
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import is_email, utcnow

notifications_bp = Blueprint("notifications", __name__)


def _priority(body, details):
    priority = body.get("priority") or "MEDIUM"
    if priority not in notifications.PRIORITIES:
        details.append(detail("priority", f"priority must be one of: {', '.join(notifications.PRIORITIES)}"))
    return priority


def _recipients(body, details, check=None):
    recipients = body.get("recipients")
    if not isinstance(recipients, list) or not all(isinstance(r, str) for r in recipients):
        details.append(detail("recipients", "recipients must be a list of strings"))
        return []
    if not recipients:
        details.append(detail("recipients", "at least one recipient is required"))
        return []
    if check and not all(check(r) for r in recipients):
        details.append(detail("recipients", "recipients must be valid email addresses"))
    return recipients


def _sent(message, recipients):
    return jsonify({
        "success": True,
        "message": message,
        "recipients": len(recipients),
        "timestamp": utcnow().isoformat(),
    }), 200


# -----------------------------------------------------------------------------
# POST /api/notifications/email
# -----------------------------------------------------------------------------
@notifications_bp.post("/api/notifications/email")
@staff_required
def send_email():
    body, error = json_body_or_error()
    if error:
        return error

    details = []
    recipients = _recipients(body, details, check=is_email)
    subject = body.get("subject")
    message = body.get("message")
    if not isinstance(subject, str) or not subject:
        details.append(detail("subject", "subject is required"))
    if not isinstance(message, str) or not message:
        details.append(detail("message", "message is required"))
    priority = _priority(body, details)
    if details:
        return validation_error(details, message="Invalid email data")

    try:
        notifications.send_email(recipients, subject, message, priority)
    except Exception as e:
        current_app.logger.exception("Email notification error: %s", e)
        return jsonify({"error": "Failed to send email notification"}), 500

    return _sent("Email notification sent", recipients)


# -----------------------------------------------------------------------------
# POST /api/notifications/sms
# -----------------------------------------------------------------------------
@notifications_bp.post("/api/notifications/sms")
@staff_required
def send_sms():
    body, error = json_body_or_error()
    if error:
        return error

    details = []
    recipients = _recipients(body, details)
    message = body.get("message")
    if not isinstance(message, str) or not 1 <= len(message) <= notifications.SMS_MAX_LENGTH:
        details.append(detail(
            "message", f"message must be between 1 and {notifications.SMS_MAX_LENGTH} characters"
        ))
    priority = _priority(body, details)
    if details:
        return validation_error(details, message="Invalid SMS data")

    try:
        notifications.send_sms(recipients, message, priority)
    except Exception as e:
        current_app.logger.exception("SMS notification error: %s", e)
        return jsonify({"error": "Failed to send SMS notification"}), 500

    return _sent("SMS notification sent", recipients)
