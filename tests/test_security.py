import hashlib

import pytest

from src.services.security import (
    TokenError,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)

SECRET = "unit-test-secret"


def _token(now=1_700_000_000, ttl=3600, secret=SECRET):
    return issue_token(
        user_id="u-1",
        organization_id="org-1",
        email="a@b.org",
        role="admin",
        secret=secret,
        ttl_seconds=ttl,
        now=now,
    )


def test_hash_and_verify():
    stored = hash_password("password123", iterations=1000)
    assert stored.startswith("pbkdf2_sha512$1000$")
    assert verify_password("password123", stored)
    assert not verify_password("password124", stored)


def test_hashes_are_salted():
    assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)


def test_legacy_salt_colon_hash_still_verifies():
    salt = "a3f5b8c9d1e2f3a4b5c6d7e8f9a0b1c2"
    digest = hashlib.pbkdf2_hmac("sha512", b"password123", salt.encode(), 1000, 64).hex()
    assert verify_password("password123", f"{salt}:{digest}")
    assert not verify_password("wrong", f"{salt}:{digest}")


@pytest.mark.parametrize("stored", [None, "", "garbage", "pbkdf2_sha512$notanumber$aa$bb"])
def test_unusable_hashes_never_verify(stored):
    assert not verify_password("password123", stored)


def test_token_round_trip():
    claims = verify_token(_token(), secret=SECRET, now=1_700_000_100)
    assert claims.user_id == "u-1"
    assert claims.organization_id == "org-1"
    assert claims.role == "admin"
    assert claims.expires_at == 1_700_000_000 + 3600


def test_token_wrong_secret():
    with pytest.raises(TokenError):
        verify_token(_token(), secret="other", now=1_700_000_100)


def test_token_tampered_payload():
    body, sig = _token().split(".")
    forged = _token(ttl=10 ** 9).split(".")[0]
    assert forged != body
    with pytest.raises(TokenError):
        verify_token(f"{forged}.{sig}", secret=SECRET, now=1_700_000_100)


def test_token_expired():
    with pytest.raises(TokenError, match="expired"):
        verify_token(_token(ttl=60), secret=SECRET, now=1_700_000_061)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed_tokens(token):
    with pytest.raises(TokenError):
        verify_token(token, secret=SECRET)
