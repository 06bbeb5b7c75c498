"""
Login sessions.

A session ties an opaque token (the ``auth-token`` cookie) to a user and
the role that user had at login.  Sessions live in process memory and
expire after a fixed number of days.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

from .access import issue_token, parse_role, validate_token
from .models import Role, User

logger = logging.getLogger(__name__)

SESSION_DAYS = 7
REMEMBER_ME_DAYS = 30


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str
    role: Role
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at


class SessionStore:
    """Token to ``Session`` registry."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def create(self, user: User, days: int = SESSION_DAYS) -> Session:
        """Open a session for ``user``.

        Raises:
            ValueError: If the user's role is not a known role.
        """
        role = parse_role(user.role)
        if role is None:
            raise ValueError(f"User {user.id} has unknown role {user.role!r}")
        now = datetime.now(timezone.utc)
        self._sweep_expired(now)
        session = Session(
            token=issue_token(),
            user_id=user.id,
            role=role,
            created_at=now,
            expires_at=now + timedelta(days=days),
        )
        self._sessions[session.token] = session
        return session

    def get(self, token: Optional[str]) -> Optional[Session]:
        """Return the live session for ``token``; expired ones are dropped."""
        if not validate_token(token):
            return None
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.is_expired():
            logger.info("Session for user %s expired", session.user_id)
            self._sessions.pop(token, None)
            return None
        return session

    def _sweep_expired(self, now: datetime) -> None:
        expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug("Dropped %d expired sessions", len(expired))

    def revoke(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self._sessions.pop(token, None) is not None

    def revoke_user(self, user_id: str) -> int:
        """End every session of ``user_id``; returns how many were open."""
        tokens = [t for t, s in self._sessions.items() if s.user_id == user_id]
        for token in tokens:
            del self._sessions[token]
        return len(tokens)

    def retain_users(self, user_ids: Iterable[str]) -> int:
        """End the sessions of users not in ``user_ids``; returns how many ended."""
        keep = set(user_ids)
        tokens = [t for t, s in self._sessions.items() if s.user_id not in keep]
        for token in tokens:
            del self._sessions[token]
        return len(tokens)

    def __len__(self) -> int:
        return len(self._sessions)
