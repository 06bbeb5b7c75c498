"""
Authentication API endpoints.

Login opens a server-side session and hands its token to the browser in
the ``auth-token`` cookie; the role is mirrored into ``user-role`` for
client-side display only.
"""

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from typing import Dict, Any, Optional

from horizon_ijp.access import AUTH_COOKIE, ROLE_COOKIE, dashboard_for_role
from horizon_ijp.api.dependencies import (
    get_data_store,
    get_current_session,
    get_session_store,
    require_user,
)
from horizon_ijp.api.schemas import LoginRequest
from horizon_ijp.models import User
from horizon_ijp.services import users as user_service
from horizon_ijp.services.errors import InvalidCredentialsError
from horizon_ijp.sessions import REMEMBER_ME_DAYS, SESSION_DAYS, Session, SessionStore
from horizon_ijp.store import DataStore

router = APIRouter(prefix="/api/auth", tags=["authentication"])

SECONDS_PER_DAY = 24 * 60 * 60


@router.post("/login", response_model=Dict[str, Any])
async def login(
    credentials: LoginRequest,
    response: Response,
    store: DataStore = Depends(get_data_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """
    Log in with email and password.

    Sets the session cookies and returns the user with the dashboard
    path for their role.
    """
    try:
        user = user_service.authenticate(store, credentials.email, credentials.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    days = REMEMBER_ME_DAYS if credentials.remember_me else SESSION_DAYS
    try:
        session = sessions.create(user, days=days)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )

    max_age = days * SECONDS_PER_DAY
    response.set_cookie(AUTH_COOKIE, session.token, max_age=max_age, httponly=True, samesite="lax")
    response.set_cookie(ROLE_COOKIE, session.role.value, max_age=max_age, samesite="lax")

    return {
        "user": user.to_public_dict(),
        "token": session.token,
        "expires_at": session.expires_at.isoformat(),
        "redirect_to": dashboard_for_role(session.role),
    }


@router.post("/logout", response_model=Dict[str, Any])
async def logout(
    response: Response,
    auth_token: Optional[str] = Cookie(None, alias=AUTH_COOKIE),
    sessions: SessionStore = Depends(get_session_store),
):
    """Log out. Succeeds even without a session."""
    sessions.revoke(auth_token)
    response.delete_cookie(AUTH_COOKIE)
    response.delete_cookie(ROLE_COOKIE)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=Dict[str, Any])
async def get_current_user_info(
    user: User = Depends(require_user),
    session: Session = Depends(get_current_session),
):
    """Get current logged-in user information."""
    return {
        "user": user.to_public_dict(),
        "role": session.role.value,
        "dashboard": dashboard_for_role(session.role),
    }
