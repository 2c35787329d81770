# fleet_repairs/utils/auth.py
from functools import wraps
from flask import session, jsonify
from fleet_repairs.db_models import db, User
from fleet_repairs.services.access_control import role_from_access_level, is_staff


def current_access_level():
    return session.get("access_level")


def current_user():
    user_id = session.get("user_id")
    if user_id is None:
        return None
    return db.session.get(User, user_id)


def current_role():
    """Quick-access level wins; otherwise the logged-in account's role."""
    role = role_from_access_level(current_access_level())
    if role:
        return role
    if session.get("user_id") is not None:
        return session.get("role")
    return None


def is_authenticated():
    return current_role() is not None


def is_admin():
    return current_role() == "ADMIN"


def has_staff_access():
    return is_staff(current_role())


def _guard(check):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not check():
                return jsonify({"error": "Unauthorized"}), 401
            return f(*args, **kwargs)
        return decorated_function
    return decorator


login_required = _guard(is_authenticated)
staff_required = _guard(has_staff_access)
admin_required = _guard(is_admin)
