"""
Admin endpoints for the demo data store.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, Any

from horizon_ijp.api.dependencies import get_data_store, get_session_store, require_roles
from horizon_ijp.models import Role, User
from horizon_ijp.sessions import SessionStore
from horizon_ijp.store import DataStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/data-store", response_model=Dict[str, Any])
async def data_store_status(
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    return {
        "available": store.available,
        "initialized": store.is_initialized(),
        "counts": store.counts(),
    }


@router.post("/data-store/reset", response_model=Dict[str, Any])
async def reset_data_store(
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """
    Discard all changes and reseed every collection from the fixtures.

    Sessions of users that do not exist in the seed data are ended.
    """
    logger.warning("Data store reset requested by %s", admin.id)
    if not store.reset():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reseed the data store"
        )
    ended = sessions.retain_users(user.id for user in store.get_users())
    if ended:
        logger.info("Ended %d sessions of users removed by the reset", ended)
    return {
        "message": "Data store reset to seed data",
        "counts": store.counts(),
    }
