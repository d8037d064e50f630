"""Database repository for account data."""

from __future__ import annotations

import logging
from typing import Any

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg.types.json import Json
from psycopg_pool import ConnectionPool

from .db.schema import ACCOUNT_COLUMNS, EMAIL_UNIQUE_CONSTRAINT
from .domain.account import Account
from .domain.errors import DuplicateEmailError

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = ", ".join(ACCOUNT_COLUMNS)


class AccountRepository:
    """Postgres-backed account persistence."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def insert_account(self, account: Account) -> Account:
        """Persist a new account; raises ``DuplicateEmailError`` when the email is taken."""
        placeholders = ", ".join(["%s"] * len(ACCOUNT_COLUMNS))
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    cur.execute(
                        f"""
                        INSERT INTO accounts ({_SELECT_COLUMNS})
                        VALUES ({placeholders})
                        RETURNING {_SELECT_COLUMNS}
                        """,
                        self._row_values(account),
                    )
                except errors.UniqueViolation as exc:
                    conn.rollback()
                    self._raise_for_unique_violation(exc, account)
                    raise
                row = cur.fetchone()
                conn.commit()
        return self._map_record(row)

    def save_account(self, account: Account) -> Account | None:
        """Write every mutable column of ``account`` back to storage.

        Returns ``None`` when the row no longer exists.
        """
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    cur.execute(
                        f"""
                        UPDATE accounts
                        SET name = %s,
                            email = %s,
                            phone_number = %s,
                            roles = %s,
                            password_hash = %s,
                            activated_at = %s,
                            deactivated_at = %s,
                            last_seen_at = %s,
                            confirmation_token = %s
                        WHERE account_id = %s
                        RETURNING {_SELECT_COLUMNS}
                        """,
                        (
                            account.name,
                            account.email,
                            account.phone_number,
                            Json(account.stored_roles),
                            account.password_hash,
                            account.activated_at,
                            account.deactivated_at,
                            account.last_seen_at,
                            account.confirmation_token,
                            account.account_id,
                        ),
                    )
                except errors.UniqueViolation as exc:
                    conn.rollback()
                    self._raise_for_unique_violation(exc, account)
                    raise
                row = cur.fetchone()
                conn.commit()
        if row is None:
            return None
        return self._map_record(row)

    def get_account(self, account_id: str) -> Account | None:
        """Fetch an account by identifier or return ``None``."""
        return self._fetch_one("account_id = %s", account_id)

    def get_account_by_email(self, email: str) -> Account | None:
        """Fetch an account by login email, compared case-insensitively."""
        return self._fetch_one("lower(email) = lower(%s)", email)

    def get_account_by_confirmation_token(self, token: str) -> Account | None:
        return self._fetch_one("confirmation_token = %s", token)

    def delete_account(self, account_id: str) -> bool:
        """Delete the account; returns ``False`` when nothing matched."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM accounts WHERE account_id = %s", (account_id,))
                deleted = cur.rowcount > 0
                conn.commit()
        return deleted

    def write_audit_event(
        self,
        *,
        account_id: str | None,
        event_type: str,
        actor: str | None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Record an audit trail entry capturing account lifecycle activity."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO account_audit_log (account_id, event_type, actor, metadata)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (account_id, event_type, actor, Json(metadata or {})),
                )
                conn.commit()

    def _fetch_one(self, where: str, value: str) -> Account | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    cur.execute(f"SELECT {_SELECT_COLUMNS} FROM accounts WHERE {where}", (value,))
                except errors.InvalidTextRepresentation:
                    # not a UUID, so it cannot match an account_id
                    conn.rollback()
                    return None
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def _row_values(self, account: Account) -> tuple:
        return (
            account.account_id,
            account.name,
            account.email,
            account.phone_number,
            Json(account.stored_roles),
            account.password_hash,
            account.created_at,
            account.activated_at,
            account.deactivated_at,
            account.last_seen_at,
            account.confirmation_token,
        )

    def _raise_for_unique_violation(self, exc: errors.UniqueViolation, account: Account) -> None:
        """Translate a clash on the email index; other violations are left to the caller."""
        if exc.diag.constraint_name == EMAIL_UNIQUE_CONSTRAINT:
            logger.info("rejected duplicate email for account %s", account.account_id)
            raise DuplicateEmailError(account.email) from exc

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=str(row[0]),
            name=row[1],
            email=row[2],
            phone_number=row[3],
            stored_roles=list(row[4] or []),
            password_hash=row[5],
            created_at=row[6],
            activated_at=row[7],
            deactivated_at=row[8],
            last_seen_at=row[9],
            confirmation_token=row[10],
        )
