"""Shared schema exports."""

from .account import AccountRegistered, AccountRolesChanged, AccountStateChanged, LifecycleState

__all__ = [
    "AccountRegistered",
    "AccountRolesChanged",
    "AccountStateChanged",
    "LifecycleState",
]
