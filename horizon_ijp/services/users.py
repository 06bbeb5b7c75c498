"""
User directory and login service.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional

from horizon_ijp.auth_utils import hash_password, verify_password
from horizon_ijp.filters import Membership, Page, TextSearch, query
from horizon_ijp.models import Role, User, UserStatus, utc_now_iso
from horizon_ijp.services.errors import ConflictError, InvalidCredentialsError, NotFoundError
from horizon_ijp.store import DataStore, generate_id

logger = logging.getLogger(__name__)

USER_FILTERS = {
    "search": TextSearch(("first_name", "last_name", "email", "current_job_title")),
    "role": Membership("role"),
    "company_id": Membership("company_id"),
    "department": Membership("department", ignore_case=True),
    "location": Membership("location", ignore_case=True),
    "status": Membership("status"),
}


def get_users(
    store: DataStore,
    filters: Optional[Mapping[str, Any]] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Page[User]:
    """List users in directory order; there is no user sort option."""
    return query(store.get_users(), filters, USER_FILTERS, page=page, page_size=page_size)


def get_user_by_id(store: DataStore, user_id: str) -> Optional[User]:
    return store.get_user_by_id(user_id)


def get_users_by_role(store: DataStore, role: Role) -> List[User]:
    return [user for user in store.get_users() if user.role == role.value]


def get_departments(store: DataStore) -> List[str]:
    return sorted({user.department for user in store.get_users()})


def count_users_by_role(store: DataStore) -> Dict[str, int]:
    counts = Counter(user.role for user in store.get_users())
    return {role.value: counts.get(role.value, 0) for role in Role}


def authenticate(store: DataStore, email: str, password: str) -> User:
    """Log a user in by email.

    Accounts with a password hash must present the matching password;
    seeded demo accounts have none and accept any password.

    Raises:
        InvalidCredentialsError: Unknown email, inactive account or wrong
            password.
    """
    user = store.get_user_by_email(email)
    if user is None or user.status != UserStatus.ACTIVE.value:
        raise InvalidCredentialsError("Invalid credentials")
    if user.password_hash and not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Invalid credentials")

    updated = store.update_user(user.id, {"last_login_at": utc_now_iso()})
    logger.info("User %s logged in as %s", user.id, user.role)
    return updated or user


def create_user(store: DataStore, data: Mapping[str, Any], password: Optional[str] = None) -> User:
    """Add a user to the directory.

    Raises:
        ConflictError: If the email is already registered.
        NotFoundError: If ``data["company_id"]`` names no company.
    """
    if store.get_user_by_email(data["email"]) is not None:
        raise ConflictError("Email already registered")
    company = store.get_company_by_id(data["company_id"])
    if company is None:
        raise NotFoundError(f"Company {data['company_id']} not found")

    now = utc_now_iso()
    user = User(
        id=generate_id(),
        email=data["email"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        role=data["role"],
        department=data["department"],
        company_id=company.id,
        company_name=company.name,
        current_job_title=data.get("current_job_title"),
        location=data.get("location"),
        phone=data.get("phone"),
        status=data.get("status") or UserStatus.ACTIVE.value,
        password_hash=hash_password(password) if password else None,
        created_at=now,
        updated_at=now,
    )
    return store.create_user(user)


def update_user(store: DataStore, user_id: str, updates: Mapping[str, Any]) -> User:
    user = store.update_user(user_id, dict(updates))
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def set_password(store: DataStore, user_id: str, password: str) -> User:
    return update_user(store, user_id, {"password_hash": hash_password(password)})


def delete_user(store: DataStore, user_id: str) -> None:
    """Remove a user from the directory. Their applications are kept."""
    if not store.delete_user(user_id):
        raise NotFoundError(f"User {user_id} not found")
    logger.info("Deleted user %s", user_id)
