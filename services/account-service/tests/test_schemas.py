"""Tests for the shared account lifecycle contracts."""

from __future__ import annotations

import importlib
import warnings
from datetime import datetime, timezone

import account_schemas.account as contracts


def test_contracts_define_without_deprecation_warnings():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        importlib.reload(contracts)


def test_state_change_dumps_to_json_ready_dict():
    event = contracts.AccountStateChanged(
        account_id="acc-1",
        previous_state="unconfirmed",
        state="active",
        occurred_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        reason="confirmed",
    )

    assert event.model_dump(mode="json") == {
        "account_id": "acc-1",
        "previous_state": "unconfirmed",
        "state": "active",
        "occurred_at": "2024-01-01T00:00:00Z",
        "reason": "confirmed",
        "version": "v1",
    }
