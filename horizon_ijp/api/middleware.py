"""
Role-based page gating middleware.

Runs ``check_access`` for every page request.  API endpoints under
``/api`` enforce authentication through route dependencies instead and
answer 401/403 rather than redirecting.
"""

import logging

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from horizon_ijp.access import AUTH_COOKIE, check_access
from horizon_ijp.api.dependencies import get_data_store, get_session_store

logger = logging.getLogger(__name__)

ROLE_HEADER = "x-user-role"

SKIPPED_PREFIXES = ("/api", "/static", "/_next")


def is_gated_path(path: str) -> bool:
    """False for API calls and static assets (anything with a file extension)."""
    if any(path.startswith(prefix) for prefix in SKIPPED_PREFIXES):
        return False
    last_segment = path.rsplit("/", 1)[-1]
    return "." not in last_segment


class RoleAccessMiddleware(BaseHTTPMiddleware):
    """Redirect page requests the current session may not open."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_gated_path(path):
            return await call_next(request)

        sessions = get_session_store()
        session = sessions.get(request.cookies.get(AUTH_COOKIE))
        if session is not None and get_data_store().get_user_by_id(session.user_id) is None:
            logger.info("Dropping session of missing user %s", session.user_id)
            sessions.revoke(session.token)
            session = None
        decision = check_access(
            path,
            session.token if session else None,
            session.role if session else None,
        )

        if not decision.allowed:
            logger.debug("Redirecting %s to %s", path, decision.redirect_to)
            return RedirectResponse(url=decision.redirect_to, status_code=307)

        response = await call_next(request)
        if decision.role is not None:
            response.headers[ROLE_HEADER] = decision.role.value
        return response
