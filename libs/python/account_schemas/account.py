"""Account lifecycle event contracts shared across services."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

LifecycleState = Literal["unconfirmed", "active", "inactive"]


class AccountRegistered(BaseModel):
    account_id: str
    email: EmailStr
    created_at: datetime
    version: str = "v1"


class AccountStateChanged(BaseModel):
    account_id: str
    previous_state: LifecycleState
    state: LifecycleState
    occurred_at: datetime
    reason: str | None = None
    version: str = "v1"


class AccountRolesChanged(BaseModel):
    account_id: str
    roles: list[str] = Field(default_factory=list)
    occurred_at: datetime
    version: str = "v1"
