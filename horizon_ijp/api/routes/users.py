"""
User directory API endpoints.

HR, CHRO and admins can browse the directory; only admins create,
edit or remove accounts.
"""

from fastapi import APIRouter, Depends, Query, HTTPException, status
from typing import Optional, Dict, Any, List

from horizon_ijp.api.dependencies import (
    get_data_store,
    get_session_store,
    require_roles,
    split_csv,
)
from horizon_ijp.api.schemas import PasswordReset, UserCreate, UserUpdate
from horizon_ijp.auth_utils import validate_password_strength
from horizon_ijp.models import Role, User, UserStatus
from horizon_ijp.services import users as user_service
from horizon_ijp.services.errors import ConflictError, NotFoundError
from horizon_ijp.sessions import SessionStore
from horizon_ijp.store import DataStore

router = APIRouter(prefix="/api/users", tags=["users"])

DIRECTORY_ROLES = (Role.HR, Role.CHRO, Role.ADMIN)


@router.get("", response_model=Dict[str, Any])
async def list_users(
    search: Optional[str] = Query(None, description="Search name, email and job title"),
    role: Optional[str] = Query(None, description="Comma-separated roles"),
    company_id: Optional[str] = Query(None, description="Comma-separated company IDs"),
    department: Optional[str] = Query(None, description="Comma-separated departments"),
    status_filter: Optional[str] = Query(None, alias="status", description="active or inactive"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    user: User = Depends(require_roles(*DIRECTORY_ROLES)),
    store: DataStore = Depends(get_data_store),
):
    filters = {
        "search": search,
        "role": split_csv(role),
        "company_id": split_csv(company_id),
        "department": split_csv(department),
        "status": split_csv(status_filter),
    }
    result = user_service.get_users(store, filters, page, page_size)
    return result.to_dict(lambda u: u.to_public_dict())


@router.get("/departments", response_model=List[str])
async def list_departments(
    user: User = Depends(require_roles(*DIRECTORY_ROLES)),
    store: DataStore = Depends(get_data_store),
):
    return user_service.get_departments(store)


@router.get("/stats", response_model=Dict[str, Any])
async def user_stats(
    user: User = Depends(require_roles(*DIRECTORY_ROLES)),
    store: DataStore = Depends(get_data_store),
):
    by_role = user_service.count_users_by_role(store)
    return {"total": sum(by_role.values()), "by_role": by_role}


@router.get("/{user_id}", response_model=Dict[str, Any])
async def get_user(
    user_id: str,
    user: User = Depends(require_roles(*DIRECTORY_ROLES)),
    store: DataStore = Depends(get_data_store),
):
    found = user_service.get_user_by_id(store, user_id)
    if not found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )
    return found.to_public_dict()


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    """
    Create a user account.

    When a password is given it must pass the strength rules; without
    one the account uses mock login like the seeded users.
    """
    if user_data.password:
        password_valid, password_error = validate_password_strength(user_data.password)
        if not password_valid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=password_error
            )

    data = user_data.model_dump(mode="json", exclude={"password"})
    try:
        created = user_service.create_user(store, data, password=user_data.password)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return created.to_public_dict()


@router.patch("/{user_id}", response_model=Dict[str, Any])
async def update_user(
    user_id: str,
    user_update: UserUpdate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """
    Update a user account.

    Changing the role or deactivating the account ends the user's open
    sessions so the change takes effect on their next request.
    """
    updates = user_update.model_dump(mode="json", exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update"
        )
    try:
        updated = user_service.update_user(store, user_id, updates)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    if "role" in updates or updates.get("status") == UserStatus.INACTIVE.value:
        sessions.revoke_user(user_id)
    return updated.to_public_dict()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """Remove a user and end their open sessions. Admins cannot remove themselves."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )
    try:
        user_service.delete_user(store, user_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    sessions.revoke_user(user_id)


@router.post("/{user_id}/password", response_model=Dict[str, Any])
async def reset_password(
    user_id: str,
    password_data: PasswordReset,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    password_valid, password_error = validate_password_strength(password_data.new_password)
    if not password_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=password_error
        )
    try:
        user_service.set_password(store, user_id, password_data.new_password)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return {"message": "Password updated"}
