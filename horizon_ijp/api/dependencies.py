"""
Shared dependencies for FastAPI routes.

Provides the process-wide data store and session registry, and the
authentication and role checks used across API endpoints.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Optional

from fastapi import Cookie, Depends, HTTPException, status

from horizon_ijp.access import AUTH_COOKIE
from horizon_ijp.db import SQLiteStorage
from horizon_ijp.models import Role, User
from horizon_ijp.sessions import Session, SessionStore
from horizon_ijp.store import DataStore, KeyValueStore, MemoryStorage

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_storage() -> KeyValueStore:
    """Storage backend for the data store.

    Uses the SQLite file named by ``HORIZON_DB_PATH`` when set, otherwise
    keeps everything in memory for the lifetime of the process.
    """
    db_path = os.getenv("HORIZON_DB_PATH")
    if db_path:
        logger.info("Using SQLite storage at %s", db_path)
        return SQLiteStorage(Path(db_path))
    logger.info("Using in-memory storage")
    return MemoryStorage()


@lru_cache(maxsize=1)
def get_data_store() -> DataStore:
    """The single ``DataStore`` of this process, seeded on first use."""
    store = DataStore(get_storage())
    store.initialize()
    return store


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    return SessionStore()


def split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Turn a comma-separated query parameter into a list."""
    if not value:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def get_current_session(
    auth_token: Optional[str] = Cookie(None, alias=AUTH_COOKIE),
    sessions: SessionStore = Depends(get_session_store),
) -> Optional[Session]:
    return sessions.get(auth_token)


def get_current_user(
    session: Optional[Session] = Depends(get_current_session),
    store: DataStore = Depends(get_data_store),
) -> Optional[User]:
    """Return the logged-in user, or None for anonymous requests."""
    if session is None:
        return None
    return store.get_user_by_id(session.user_id)


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    """Require authentication - raises 401 if no user is logged in."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_roles(*roles: Role) -> Callable[..., User]:
    """Build a dependency admitting only users whose session role is in ``roles``."""
    allowed = set(roles)

    def dependency(
        user: User = Depends(require_user),
        session: Optional[Session] = Depends(get_current_session),
    ) -> User:
        if session is None or session.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return dependency


def session_role(session: Optional[Session] = Depends(get_current_session)) -> Optional[Role]:
    return session.role if session else None
