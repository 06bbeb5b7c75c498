"""
Password hashing and strength checks for marketplace accounts.

Accounts created through the admin console get a bcrypt hash.  Seeded
demo accounts carry no hash at all; ``verify_password`` is only
consulted for accounts that have one.
"""

from __future__ import annotations

import re
from typing import Tuple

import bcrypt

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72

PASSWORD_RULES = (
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"\d", "Password must contain at least one digit"),
    (r"[!@#$%^&*()_+\-=\[\]{}|;:,.<>?]", "Password must contain at least one special character"),
)


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash ``password`` with a fresh bcrypt salt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if ``plain_password`` matches the stored bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def validate_password_strength(password: str) -> Tuple[bool, str]:
    """Check a new password against the account policy.

    At least 8 characters, at most 72 bytes, and one each of upper case,
    lower case, digit and special character.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        return False, "Password is too long (maximum 72 bytes)"
    for pattern, message in PASSWORD_RULES:
        if not re.search(pattern, password):
            return False, message
    return True, ""
