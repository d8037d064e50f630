from __future__ import annotations

import pytest

from account_service.api import routes
from account_service.api.visibility import READ_GROUP, WRITE_GROUP, fields_for, normalize
from account_service.domain.account import Account


def test_models_match_field_groups():
    assert set(routes.AccountResponse.model_fields) == set(fields_for(READ_GROUP))
    assert set(routes.CreateAccountRequest.model_fields) == set(fields_for(WRITE_GROUP))
    assert set(routes.UpdateAccountRequest.model_fields) == set(fields_for(WRITE_GROUP))


def test_read_profile_hides_password_hash():
    account = Account(name="Ann", email="a@example.com", password_hash="$argon2id$secret")
    payload = normalize(account)

    assert "password_hash" not in payload
    assert "password" not in payload
    assert payload["has_password"] is True
    assert "$argon2id$secret" not in payload.values()


def test_read_profile_derives_state_and_roles():
    account = Account(name="Ann", email="a@example.com")
    account.activate()
    payload = normalize(account)

    assert payload["state"] == "active"
    assert payload["roles"] == ["ROLE_USER"]
    assert payload["has_password"] is False
    assert payload["confirmation_token"] is None


def test_unknown_group_is_rejected():
    with pytest.raises(ValueError):
        fields_for("account:admin")
