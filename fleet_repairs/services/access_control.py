# fleet_repairs/services/access_control.py
"""
Route gating for the staff portals.

Pure functions over (path, role) so the before_request hook in the app
factory stays a thin adapter and the rules are unit-testable.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

ACCESS_LEVEL_ROLES = {
    "operations": "OPERATIONS",
    "workshop": "WORKSHOP",
    "admin": "ADMIN",
}

ACCESS_REDIRECTS = {
    "operations": "/operations",
    "workshop": "/workshop",
    "admin": "/admin",
}

ROLE_HIERARCHY = {
    "ADMIN": 4,
    "OPERATIONS": 3,
    "WORKSHOP": 3,
    "DRIVER": 1,
}

STAFF_ROLES = frozenset({"WORKSHOP", "OPERATIONS", "ADMIN"})

# "/" is matched exactly; every other entry is a prefix.
PUBLIC_ROUTES = ("/", "/report", "/access", "/api/issues", "/api/upload",
                 "/api/mappings", "/api/access", "/api/auth")
PROTECTED_ROUTES = ("/workshop", "/operations", "/schedule", "/issues", "/admin", "/fleet")

# prefix -> roles allowed past it
ROUTE_ROLES = {
    "/admin": frozenset({"ADMIN"}),
    "/operations": frozenset({"OPERATIONS", "ADMIN"}),
    "/workshop": frozenset({"WORKSHOP", "ADMIN"}),
    "/schedule": STAFF_ROLES,
    "/issues": STAFF_ROLES,
    "/fleet": STAFF_ROLES,
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    redirect_to: Optional[str] = None
    protected: bool = False


def role_from_access_level(access_level: Optional[str]) -> Optional[str]:
    if not access_level:
        return None
    return ACCESS_LEVEL_ROLES.get(access_level)


def _matches(path: str, route: str) -> bool:
    if route == "/":
        return path == "/"
    return path == route or path.startswith(route + "/")


def is_public(path: str) -> bool:
    return any(_matches(path, r) for r in PUBLIC_ROUTES)


def is_protected(path: str) -> bool:
    return any(_matches(path, r) for r in PROTECTED_ROUTES)


def is_staff(role: Optional[str]) -> bool:
    return role in STAFF_ROLES


def evaluate(path: str, role: Optional[str]) -> AccessDecision:
    """
    Decide whether a request for `path` by `role` may proceed.

    Public routes always pass. Protected routes need a staff role
    (otherwise redirect to /access) and then the role the prefix demands
    (otherwise redirect to /).
    """
    if is_public(path):
        return AccessDecision(allowed=True)

    if not is_protected(path):
        return AccessDecision(allowed=True)

    if not is_staff(role):
        return AccessDecision(allowed=False, redirect_to="/access", protected=True)

    for prefix, roles in ROUTE_ROLES.items():
        if _matches(path, prefix) and role not in roles:
            return AccessDecision(allowed=False, redirect_to="/", protected=True)

    return AccessDecision(allowed=True, protected=True)


def can_access(role: Optional[str], path: str) -> bool:
    return evaluate(path, role).allowed


def client_key(headers) -> str:
    """Rate-limit key: first X-Forwarded-For hop, then X-Real-IP."""
    forwarded = headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return "unknown"
