"""Credential encoder backed by Argon2id."""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Return the Argon2id encoding of ``password``."""
    return _hasher.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    """Return ``True`` when ``password`` matches ``hashed``.

    A missing or malformed hash never verifies.
    """
    if not hashed:
        return False
    try:
        return _hasher.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed: str) -> bool:
    """Report whether ``hashed`` was produced with outdated parameters."""
    return _hasher.check_needs_rehash(hashed)
