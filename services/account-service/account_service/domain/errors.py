"""Errors raised by the account service; all are ``ValueError`` subclasses."""

from __future__ import annotations


class AccountNotFoundError(ValueError):
    def __init__(self, detail: str = "account not found") -> None:
        super().__init__(detail)


class DuplicateEmailError(ValueError):
    def __init__(self, email: str) -> None:
        super().__init__("email already registered")
        self.email = email


class InvalidCredentialsError(ValueError):
    def __init__(self) -> None:
        super().__init__("invalid credentials")


class AccountInactiveError(ValueError):
    def __init__(self, state: str) -> None:
        super().__init__(f"account is {state}")
        self.state = state


class AccountStateConflictError(ValueError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail)
