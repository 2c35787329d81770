# fleet_repairs/routes/auth.py
import hmac

from flask import Blueprint, current_app, jsonify, session
from sqlalchemy import or_

from fleet_repairs.db_models import User
from fleet_repairs.services.access_control import ACCESS_REDIRECTS
from fleet_repairs.utils.auth import current_access_level, is_authenticated
from fleet_repairs.utils.http import detail, json_body_or_error, validation_error
from fleet_repairs.utils.parsing import str_or_none
from fleet_repairs.utils.serializers import serialize_user

auth_bp = Blueprint("auth", __name__)

MIN_PASSWORD_LENGTH = 6


def _access_passwords():
    cfg = current_app.config
    return {
        "operations": cfg.get("OPERATIONS_PASSWORD"),
        "workshop": cfg.get("WORKSHOP_PASSWORD"),
        "admin": cfg.get("ADMIN_PASSWORD"),
    }


# -----------------------------------------------------------------------------
# POST /api/access
# Quick access to a staff portal with its shared password.
# -----------------------------------------------------------------------------
@auth_bp.post("/api/access")
def quick_access():
    body, error = json_body_or_error()
    if error:
        return error

    access_type = body.get("accessType")
    password = body.get("password")

    details = []
    if access_type not in ACCESS_REDIRECTS:
        details.append(detail("accessType", f"accessType must be one of: {', '.join(sorted(ACCESS_REDIRECTS))}"))
    if not isinstance(password, str) or not password:
        details.append(detail("password", "password is required"))
    if details:
        return validation_error(details)

    expected = _access_passwords().get(access_type)
    if not expected or not hmac.compare_digest(password.encode(), expected.encode()):
        current_app.logger.warning("Failed quick access attempt for %s", access_type)
        return jsonify({"error": "Invalid password"}), 401

    session.clear()
    session.permanent = True
    session["access_level"] = access_type
    current_app.logger.info("Quick access granted: %s", access_type)

    return jsonify({
        "success": True,
        "accessType": access_type,
        "redirect": ACCESS_REDIRECTS[access_type],
    })


# -----------------------------------------------------------------------------
# GET /api/auth/check
# -----------------------------------------------------------------------------
@auth_bp.get("/api/auth/check")
def auth_check():
    return jsonify({
        "authenticated": is_authenticated(),
        "accessLevel": current_access_level(),
    })


# -----------------------------------------------------------------------------
# POST /api/auth/logout
# -----------------------------------------------------------------------------
@auth_bp.post("/api/auth/logout")
def logout():
    session.clear()
    return jsonify({"success": True})


# -----------------------------------------------------------------------------
# POST /api/auth/login
# Account login for staff users; driver accounts cannot sign in.
# -----------------------------------------------------------------------------
@auth_bp.post("/api/auth/login")
def login():
    body, error = json_body_or_error()
    if error:
        return error

    email = str_or_none(body.get("email"))
    username = str_or_none(body.get("username"))
    password = body.get("password")

    details = []
    if not email and not username:
        details.append(detail("email", "email or username is required"))
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        details.append(detail("password", f"password must be at least {MIN_PASSWORD_LENGTH} characters"))
    if details:
        return validation_error(details)

    filters = []
    if email:
        filters.append(User.email == email.lower())
    if username:
        filters.append(User.username == username)
    user = User.query.filter(or_(*filters)).first()

    if not user or user.role == "DRIVER" or not user.check_password(password):
        current_app.logger.warning("Failed login for %s", email or username)
        return jsonify({"error": "Invalid credentials"}), 401

    session.clear()
    session.permanent = True
    session["user_id"] = user.id
    session["role"] = user.role
    current_app.logger.info("User %s logged in (%s)", user.email, user.role)

    return jsonify({"success": True, "user": serialize_user(user)})
