from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

BASE_ROLE = "ROLE_USER"

_IMMUTABLE_FIELDS = frozenset({"account_id", "created_at"})


class AccountState(str, Enum):
    unconfirmed = "unconfirmed"
    active = "active"
    inactive = "inactive"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_token() -> str:
    return str(uuid.uuid4())


def effective_roles(stored: Iterable[str]) -> list[str]:
    """Return the stored roles plus ``ROLE_USER`` with duplicates removed, first occurrence wins."""
    return list(dict.fromkeys([*stored, BASE_ROLE]))


@dataclass(slots=True)
class Account:
    """Aggregate root for a user identity and its lifecycle timestamps.

    ``account_id`` and ``created_at`` are bound once at construction. The
    lifecycle state is never stored; it is derived from ``activated_at`` and
    ``deactivated_at``.
    """

    name: str
    email: str
    phone_number: str | None = None
    password_hash: str | None = None
    stored_roles: list[str] = field(default_factory=list)
    account_id: str = field(default_factory=_new_token)
    created_at: datetime = field(default_factory=_utcnow)
    activated_at: datetime | None = None
    deactivated_at: datetime | None = None
    last_seen_at: datetime | None = None
    confirmation_token: str | None = field(default_factory=_new_token)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE_FIELDS:
            try:
                object.__getattribute__(self, name)
            except AttributeError:
                pass
            else:
                raise AttributeError(f"{name} cannot be reassigned")
        object.__setattr__(self, name, value)

    @property
    def username(self) -> str:
        return self.email or ""

    @property
    def state(self) -> AccountState:
        if self.activated_at is not None:
            return AccountState.active
        if self.deactivated_at is not None:
            return AccountState.inactive
        return AccountState.unconfirmed

    def roles(self) -> list[str]:
        return effective_roles(self.stored_roles)

    def set_roles(self, roles: Iterable[str]) -> None:
        self.stored_roles = list(roles)

    def set_password(self, password_hash: str) -> None:
        """Store an already-encoded credential verbatim."""
        self.password_hash = password_hash

    def activate(self) -> None:
        self.deactivated_at = None
        self.activated_at = _utcnow()
        self.confirmation_token = None

    def deactivate(self) -> None:
        self.activated_at = None
        self.deactivated_at = _utcnow()

    def create_confirmation_token(self) -> None:
        self.confirmation_token = _new_token()

    def set_last_seen(self) -> None:
        self.last_seen_at = _utcnow()

    # UserIdentity protocol

    def identity(self) -> str:
        return self.username

    def credential_hash(self) -> str:
        return self.password_hash or ""

    def clear_transient_credentials(self) -> None:
        # only the encoded hash is ever held, nothing transient to wipe
        return None
