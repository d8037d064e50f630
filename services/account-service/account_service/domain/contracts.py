"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class UserIdentity(Protocol):
    """What the authentication layer needs to know about a principal."""

    def identity(self) -> str: ...

    def credential_hash(self) -> str: ...

    def roles(self) -> list[str]: ...

    def clear_transient_credentials(self) -> None: ...


@dataclass(slots=True)
class CreateAccountInput:
    """Validated inputs required to register an account."""

    name: str
    email: str
    password: str
    phone_number: str | None = None
    roles: list[str] = field(default_factory=list)


@dataclass(slots=True)
class UpdateAccountInput:
    """Partial update; ``None`` leaves a field untouched unless listed in ``clear``."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    phone_number: str | None = None
    clear: frozenset[str] = frozenset()
