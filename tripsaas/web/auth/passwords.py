"""Password hashing with bcrypt."""

from __future__ import annotations

from functools import lru_cache

import bcrypt

from tripsaas.config.settings import get_settings


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a bcrypt hash string for storage."""
    salt = bcrypt.gensalt(rounds=rounds or get_settings().bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    """Constant-time comparison of a password against a stored hash.

    Users created through federated or magic-link sign-in have no hash and
    never verify.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage.
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("tripsaas-dummy-password")


def burn_verification(password: str) -> None:
    """Spend one bcrypt comparison so a missing user costs as much as a real one."""
    verify_password(password, _dummy_hash())
