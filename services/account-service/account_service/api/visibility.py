"""Field-visibility profiles for the account resource.

Each profile names the attributes exposed on read or accepted on write. The
pydantic models in :mod:`.routes` must expose exactly these fields.
"""

from __future__ import annotations

from typing import Any

from ..domain.account import Account

READ_GROUP = "account:read"
WRITE_GROUP = "account:write"

FIELD_GROUPS: dict[str, tuple[str, ...]] = {
    READ_GROUP: (
        "account_id",
        "name",
        "email",
        "phone_number",
        "roles",
        "has_password",
        "state",
        "created_at",
        "activated_at",
        "deactivated_at",
        "last_seen_at",
        "confirmation_token",
    ),
    WRITE_GROUP: (
        "name",
        "email",
        "phone_number",
        "password",
    ),
}

# computed read fields; everything else is read straight off the entity
_READ_ACCESSORS = {
    "roles": lambda account: account.roles(),
    "has_password": lambda account: bool(account.password_hash),
    "state": lambda account: account.state.value,
}


def fields_for(group: str) -> tuple[str, ...]:
    try:
        return FIELD_GROUPS[group]
    except KeyError as exc:
        raise ValueError(f"unknown serialization group {group!r}") from exc


def normalize(account: Account) -> dict[str, Any]:
    """Project ``account`` onto the attributes of the read profile."""
    payload: dict[str, Any] = {}
    for name in fields_for(READ_GROUP):
        accessor = _READ_ACCESSORS.get(name)
        payload[name] = accessor(account) if accessor else getattr(account, name)
    return payload
