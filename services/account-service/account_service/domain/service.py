"""Account service orchestrating persistence, credentials, lifecycle, and auditing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from account_schemas import AccountRegistered, AccountRolesChanged, AccountStateChanged
from prometheus_client import Counter

from .account import Account, AccountState
from .contracts import CreateAccountInput, UpdateAccountInput
from .errors import (
    AccountInactiveError,
    AccountNotFoundError,
    AccountStateConflictError,
    DuplicateEmailError,
    InvalidCredentialsError,
)
from ..repository import AccountRepository
from ..security.passwords import hash_password, needs_rehash, verify_password
from ..security.tokens import issue_access_token

logger = logging.getLogger(__name__)

LIFECYCLE_TRANSITIONS = Counter(
    "account_lifecycle_transitions_total",
    "Account lifecycle transitions applied by the service.",
    ["transition"],
)


@dataclass(slots=True)
class AccessToken:
    """Signed bearer token handed back after a successful login."""

    access_token: str
    expires_in: int
    account: Account


class AccountService:
    """Account workflows backed by Postgres storage."""

    def __init__(self, repository: AccountRepository) -> None:
        """Store dependencies used to orchestrate persistence and credential checks."""
        self._repository = repository

    def register_account(self, payload: CreateAccountInput) -> Account:
        """Create an unconfirmed account with a hashed password and a fresh confirmation token."""
        account = Account(
            name=payload.name,
            email=payload.email,
            phone_number=payload.phone_number,
        )
        account.set_password(hash_password(payload.password))
        account.set_roles(payload.roles)
        account = self._repository.insert_account(account)

        LIFECYCLE_TRANSITIONS.labels(transition="registered").inc()
        logger.info("registered account %s", account.account_id)
        self._repository.write_audit_event(
            account_id=account.account_id,
            event_type="account.registered",
            actor=account.account_id,
            metadata=AccountRegistered(
                account_id=account.account_id,
                email=account.email,
                created_at=account.created_at,
            ).model_dump(mode="json"),
        )
        return account

    def get_account(self, account_id: str) -> Account | None:
        return self._repository.get_account(account_id)

    def require_account(self, account_id: str) -> Account:
        account = self._repository.get_account(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account

    def update_account(self, account_id: str, payload: UpdateAccountInput) -> Account:
        """Apply a partial profile update; passwords are re-encoded before storage."""
        account = self.require_account(account_id)
        if payload.name is not None:
            account.name = payload.name
        if payload.email is not None and payload.email != account.email:
            existing = self._repository.get_account_by_email(payload.email)
            if existing is not None and existing.account_id != account.account_id:
                raise DuplicateEmailError(payload.email)
            account.email = payload.email
        if payload.phone_number is not None or "phone_number" in payload.clear:
            account.phone_number = payload.phone_number
        if payload.password is not None:
            account.set_password(hash_password(payload.password))
        return self._save(account)

    def delete_account(self, account_id: str) -> None:
        account = self.require_account(account_id)
        self._repository.delete_account(account.account_id)
        logger.info("deleted account %s", account.account_id)
        self._repository.write_audit_event(
            account_id=account.account_id,
            event_type="account.deleted",
            actor=None,
        )

    def activate(self, account_id: str, *, reason: str | None = None) -> Account:
        account = self.require_account(account_id)
        return self._transition(account, "activate", reason)

    def deactivate(self, account_id: str, *, reason: str | None = None) -> Account:
        account = self.require_account(account_id)
        return self._transition(account, "deactivate", reason)

    def confirm(self, token: str) -> Account:
        """Activate the account that owns ``token``; the token is consumed by activation."""
        account = self._repository.get_account_by_confirmation_token(token)
        if account is None:
            raise AccountNotFoundError("confirmation token not found")
        if account.state is not AccountState.unconfirmed:
            logger.warning(
                "confirmation refused for %s account %s", account.state.value, account.account_id
            )
            raise AccountStateConflictError(
                f"account is {account.state.value}, not awaiting confirmation"
            )
        return self._transition(account, "activate", "confirmed")

    def regenerate_confirmation_token(self, account_id: str) -> Account:
        account = self.require_account(account_id)
        account.create_confirmation_token()
        return self._save(account)

    def set_roles(self, account_id: str, roles: Iterable[str]) -> Account:
        account = self.require_account(account_id)
        account.set_roles(roles)
        account = self._save(account)
        self._repository.write_audit_event(
            account_id=account.account_id,
            event_type="account.roles_changed",
            actor=None,
            metadata=AccountRolesChanged(
                account_id=account.account_id,
                roles=account.stored_roles,
                occurred_at=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )
        return account

    def record_activity(self, account_id: str) -> Account:
        account = self.require_account(account_id)
        account.set_last_seen()
        return self._save(account)

    def authenticate(self, email: str, password: str) -> Account:
        """Verify credentials and return the account.

        Only active accounts may authenticate. A successful login refreshes
        ``last_seen_at`` and upgrades outdated password encodings.
        """
        account = self._repository.get_account_by_email(email)
        if account is None or not verify_password(password, account.credential_hash()):
            logger.warning("failed login attempt for %s", email)
            raise InvalidCredentialsError()
        if account.state is not AccountState.active:
            logger.warning("login refused for %s account %s", account.state.value, account.account_id)
            raise AccountInactiveError(account.state.value)

        if needs_rehash(account.credential_hash()):
            account.set_password(hash_password(password))
        account.set_last_seen()
        account.clear_transient_credentials()
        return self._save(account)

    def issue_token(self, email: str, password: str) -> AccessToken:
        account = self.authenticate(email, password)
        token, expires_in = issue_access_token(subject=account.account_id, principal=account)
        self._repository.write_audit_event(
            account_id=account.account_id,
            event_type="token.issued",
            actor=account.account_id,
            metadata={"roles": account.roles()},
        )
        return AccessToken(access_token=token, expires_in=expires_in, account=account)

    def _save(self, account: Account) -> Account:
        saved = self._repository.save_account(account)
        if saved is None:
            raise AccountNotFoundError()
        return saved

    def _transition(self, account: Account, transition: str, reason: str | None) -> Account:
        previous = account.state
        if transition == "activate":
            account.activate()
        else:
            account.deactivate()
        account = self._save(account)

        LIFECYCLE_TRANSITIONS.labels(transition=transition).inc()
        logger.info(
            "account %s %s -> %s", account.account_id, previous.value, account.state.value
        )
        self._repository.write_audit_event(
            account_id=account.account_id,
            event_type=f"account.{account.state.value}",
            actor=None,
            metadata=AccountStateChanged(
                account_id=account.account_id,
                previous_state=previous.value,
                state=account.state.value,
                occurred_at=account.activated_at or account.deactivated_at,
                reason=reason,
            ).model_dump(mode="json"),
        )
        return account
