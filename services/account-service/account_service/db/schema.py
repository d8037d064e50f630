"""Postgres table definitions for account storage, kept apart from the domain model."""

from __future__ import annotations

import logging

from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)

ACCOUNT_COLUMNS: tuple[str, ...] = (
    "account_id",
    "name",
    "email",
    "phone_number",
    "roles",
    "password_hash",
    "created_at",
    "activated_at",
    "deactivated_at",
    "last_seen_at",
    "confirmation_token",
)

STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        account_id          UUID PRIMARY KEY,
        name                VARCHAR(255) NOT NULL,
        email               VARCHAR(180) NOT NULL,
        phone_number        VARCHAR(30),
        roles               JSONB NOT NULL DEFAULT '[]'::jsonb,
        password_hash       TEXT,
        created_at          TIMESTAMPTZ NOT NULL,
        activated_at        TIMESTAMPTZ,
        deactivated_at      TIMESTAMPTZ,
        last_seen_at        TIMESTAMPTZ,
        confirmation_token  VARCHAR(255),
        CONSTRAINT accounts_single_lifecycle_stamp
            CHECK (activated_at IS NULL OR deactivated_at IS NULL)
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS accounts_email_key ON accounts (lower(email))",
    """
    CREATE UNIQUE INDEX IF NOT EXISTS accounts_confirmation_token_key
        ON accounts (confirmation_token) WHERE confirmation_token IS NOT NULL
    """,
    """
    CREATE TABLE IF NOT EXISTS account_audit_log (
        audit_id    BIGSERIAL PRIMARY KEY,
        account_id  UUID,
        event_type  VARCHAR(64) NOT NULL,
        actor       VARCHAR(255),
        metadata    JSONB NOT NULL DEFAULT '{}'::jsonb,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
)

EMAIL_UNIQUE_CONSTRAINT = "accounts_email_key"


def ensure_schema(pool: ConnectionPool) -> None:
    """Create the account tables and indexes when they are missing."""
    with pool.connection() as conn:
        with conn.cursor() as cur:
            for statement in STATEMENTS:
                cur.execute(statement)
        conn.commit()
    logger.info("account schema ensured (%d statements)", len(STATEMENTS))
