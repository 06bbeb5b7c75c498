"""
Role-based route gating.

Every page of the marketplace belongs to one audience.  This module
holds the static tables describing which path prefixes each role may
open and where each role lands after login, and ``check_access`` which
turns a request path plus the two auth cookies into an admit/redirect
decision.  Nothing here keeps state; the HTTP middleware calls
``check_access`` once per request.

The role always comes from the server-side session named by the
``auth-token`` cookie (see ``horizon_ijp.sessions``).  The ``user-role``
cookie is written at login for clients to read but is never trusted
here.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

from .models import Role

AUTH_COOKIE = "auth-token"
ROLE_COOKIE = "user-role"
TOKEN_PREFIX = "mock-token-"

LOGIN_PATH = "/login"
ADMIN_PREFIX = "/admin"

# Reachable without logging in.  "/" is matched exactly, the rest by prefix.
PUBLIC_ROUTES: Tuple[str, ...] = ("/login", "/forgot-password", "/reset-password", "/summary")

# Logged-in users are bounced from these to their dashboard.
AUTH_ROUTES: Tuple[str, ...] = ("/login", "/forgot-password", "/reset-password")

# None means unrestricted.
ROUTE_PERMISSIONS: Dict[Role, Optional[Tuple[str, ...]]] = {
    Role.EMPLOYEE: ("/dashboard", "/jobs", "/applications", "/saved", "/profile", "/settings"),
    Role.HR: ("/hr/dashboard", "/hr/jobs", "/hr/applicants", "/profile", "/settings"),
    Role.CHRO: ("/chro/dashboard", "/chro/reports", "/profile", "/settings"),
    Role.ADMIN: None,
}

DASHBOARDS: Dict[Role, str] = {
    Role.EMPLOYEE: "/dashboard",
    Role.HR: "/hr/dashboard",
    Role.CHRO: "/chro/dashboard",
    Role.ADMIN: "/admin/dashboard",
}

for _table_name, _table in (("ROUTE_PERMISSIONS", ROUTE_PERMISSIONS), ("DASHBOARDS", DASHBOARDS)):
    _missing = set(Role) - set(_table)
    if _missing:
        raise RuntimeError(
            f"{_table_name} has no entry for: {', '.join(sorted(r.value for r in _missing))}"
        )


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a route check.

    Attributes:
        allowed: True when the request may proceed.
        redirect_to: Target path (with query string) when denied.
        role: The recognised role, if any, for downstream handlers.
    """

    allowed: bool
    redirect_to: Optional[str] = None
    role: Optional[Role] = None

    @classmethod
    def admit(cls, role: Optional[Role] = None) -> "AccessDecision":
        return cls(allowed=True, role=role)

    @classmethod
    def redirect(cls, target: str, role: Optional[Role] = None) -> "AccessDecision":
        return cls(allowed=False, redirect_to=target, role=role)


def parse_role(value: Optional[str]) -> Optional[Role]:
    """Return the ``Role`` named by ``value``, or None if it names none."""
    if isinstance(value, Role):
        return value
    if not value:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def issue_token() -> str:
    """Create a new opaque session token."""
    return f"{TOKEN_PREFIX}{secrets.token_urlsafe(24)}"


def validate_token(token: Optional[str]) -> bool:
    """Check that ``token`` has the shape of a token from ``issue_token``."""
    return bool(token) and token.startswith(TOKEN_PREFIX) and len(token) > len(TOKEN_PREFIX)


def is_public_route(path: str) -> bool:
    return path == "/" or any(path.startswith(route) for route in PUBLIC_ROUTES)


def is_auth_route(path: str) -> bool:
    return any(path.startswith(route) for route in AUTH_ROUTES)


def has_route_access(role: Optional[Role], path: str) -> bool:
    """Return True if ``role`` may open ``path``.

    Admins may open anything; other roles only paths starting with one
    of their configured prefixes. No role means no access.
    """
    if role is None:
        return False
    allowed = ROUTE_PERMISSIONS[role]
    if allowed is None:
        return True
    return any(path.startswith(prefix) for prefix in allowed)


def dashboard_for_role(role: Optional[Role]) -> str:
    """Landing page for ``role``; the employee dashboard when unknown."""
    if role is None:
        return DASHBOARDS[Role.EMPLOYEE]
    return DASHBOARDS[role]


def login_redirect(path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'redirect': path})}"


def check_access(path: str, token: Optional[str], role_value: Optional[str]) -> AccessDecision:
    """Decide whether a request for ``path`` may proceed.

    Args:
        path: Requested URL path (no query string).
        token: Session token, if the request carries a live one.
        role_value: The session's role (a ``Role`` or its string value).

    Returns:
        An ``AccessDecision``. Denials carry the redirect target:
        unauthenticated requests go to the login page with the original
        path as ``redirect``; authenticated requests go to the role's
        dashboard.
    """
    if path == "/":
        return AccessDecision.admit()

    role = parse_role(role_value)
    # Without a recognisable role a session cannot be routed anywhere, so
    # it is handled like no session at all.
    authenticated = validate_token(token) and role is not None

    if not authenticated:
        if is_public_route(path):
            return AccessDecision.admit()
        return AccessDecision.redirect(login_redirect(path))

    if is_auth_route(path):
        return AccessDecision.redirect(dashboard_for_role(role), role)

    if is_public_route(path):
        return AccessDecision.admit(role)

    if path.startswith(ADMIN_PREFIX) and role is not Role.ADMIN:
        return AccessDecision.redirect(dashboard_for_role(role), role)

    if not has_route_access(role, path):
        return AccessDecision.redirect(dashboard_for_role(role), role)

    return AccessDecision.admit(role)
