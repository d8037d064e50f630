"""Tests for the account aggregate and its lifecycle."""

from __future__ import annotations

import pytest

from account_service.domain.account import Account, AccountState, effective_roles
from account_service.domain.contracts import UserIdentity


@pytest.fixture()
def account() -> Account:
    return Account(name="Ann", email="a@example.com")


def test_new_account_is_unconfirmed(account):
    assert account.account_id
    assert account.created_at is not None
    assert account.created_at.tzinfo is not None
    assert account.confirmation_token
    assert account.state is AccountState.unconfirmed
    assert account.roles() == ["ROLE_USER"]


def test_new_accounts_get_distinct_identifiers():
    first = Account(name="Ann", email="a@example.com")
    second = Account(name="Bob", email="b@example.com")
    assert first.account_id != second.account_id
    assert first.confirmation_token != second.confirmation_token


@pytest.mark.parametrize("field_name", ["account_id", "created_at"])
def test_identity_fields_are_immutable(account, field_name):
    original = getattr(account, field_name)
    with pytest.raises(AttributeError):
        setattr(account, field_name, original)
    assert getattr(account, field_name) == original


def test_activate_clears_deactivation_and_token(account):
    account.deactivate()
    account.activate()
    assert account.activated_at is not None
    assert account.deactivated_at is None
    assert account.confirmation_token is None
    assert account.state is AccountState.active


def test_activate_twice_resets_timestamp(account):
    account.activate()
    first = account.activated_at
    account.activate()
    assert account.activated_at >= first
    assert account.state is AccountState.active


def test_deactivate_from_any_state(account):
    token = account.confirmation_token
    account.deactivate()
    assert account.deactivated_at is not None
    assert account.activated_at is None
    assert account.confirmation_token == token
    assert account.state is AccountState.inactive

    account.activate()
    account.deactivate()
    assert account.activated_at is None
    assert account.state is AccountState.inactive


def test_create_confirmation_token_replaces_value(account):
    previous = account.confirmation_token
    account.create_confirmation_token()
    assert account.confirmation_token
    assert account.confirmation_token != previous


def test_set_last_seen(account):
    assert account.last_seen_at is None
    account.set_last_seen()
    assert account.last_seen_at is not None


def test_roles_always_include_base_role(account):
    account.set_roles([])
    assert account.roles() == ["ROLE_USER"]

    account.set_roles(["ROLE_USER", "ROLE_USER"])
    assert account.roles() == ["ROLE_USER"]

    account.set_roles(["ROLE_ADMIN"])
    assert set(account.roles()) == {"ROLE_ADMIN", "ROLE_USER"}
    assert account.stored_roles == ["ROLE_ADMIN"]


def test_effective_roles_is_pure():
    stored = ["ROLE_ADMIN", "ROLE_ADMIN"]
    assert effective_roles(stored) == ["ROLE_ADMIN", "ROLE_USER"]
    assert stored == ["ROLE_ADMIN", "ROLE_ADMIN"]


def test_profile_fields_are_plain_attributes(account):
    account.name = "Annabel"
    account.email = "annabel@example.com"
    account.phone_number = "+15550100"
    account.phone_number = None
    assert account.name == "Annabel"
    assert account.username == "annabel@example.com"
    assert account.phone_number is None


def test_set_password_stores_hash_verbatim(account):
    account.set_password("$argon2id$opaque")
    assert account.password_hash == "$argon2id$opaque"
    assert account.credential_hash() == "$argon2id$opaque"


def test_account_satisfies_identity_protocol(account):
    assert isinstance(account, UserIdentity)
    assert account.identity() == "a@example.com"
    account.clear_transient_credentials()
    assert account.credential_hash() == ""
