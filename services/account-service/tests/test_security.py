"""Tests for the credential encoder and token helpers."""

from __future__ import annotations

import jwt
import pytest

from account_service.domain.account import Account
from account_service.security.passwords import hash_password, needs_rehash, verify_password
from account_service.security.tokens import decode_access_token, issue_access_token


def test_hash_password_produces_salted_argon2_hash():
    first = hash_password("SecureP@ss123!")
    second = hash_password("SecureP@ss123!")
    assert first.startswith("$argon2id$")
    assert first != second
    assert not needs_rehash(first)


def test_verify_password():
    hashed = hash_password("SecureP@ss123!")
    assert verify_password("SecureP@ss123!", hashed) is True
    assert verify_password("securep@ss123!", hashed) is False


@pytest.mark.parametrize("hashed", [None, "", "not-a-hash"])
def test_verify_password_rejects_missing_or_malformed_hash(hashed):
    assert verify_password("anything", hashed) is False


def test_access_token_carries_identity_and_roles():
    account = Account(name="Ann", email="a@example.com", stored_roles=["ROLE_ADMIN"])
    token, expires_in = issue_access_token(subject=account.account_id, principal=account)

    claims = decode_access_token(token)
    assert expires_in > 0
    assert claims["sub"] == account.account_id
    assert claims["username"] == "a@example.com"
    assert claims["roles"] == ["ROLE_ADMIN", "ROLE_USER"]
    assert claims["exp"] - claims["iat"] == expires_in


def test_decode_rejects_foreign_signature():
    account = Account(name="Ann", email="a@example.com")
    token, _ = issue_access_token(subject=account.account_id, principal=account)
    forged = jwt.encode(jwt.decode(token, options={"verify_signature": False}), "other", algorithm="HS256")
    with pytest.raises(jwt.PyJWTError):
        decode_access_token(forged)
