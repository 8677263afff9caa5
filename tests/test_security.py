"""
Tests for password hashing, token issuance and reset token helpers.
"""
import asyncio
import re
from datetime import datetime, timedelta, timezone

from jobboard.config import Settings
from jobboard.core.security import (
    create_access_token,
    decode_access_token,
    generate_secure_reset_token,
    get_token_expiry_time,
    hash_password,
    hash_password_async,
    hash_token,
    verify_password,
    verify_password_async,
)

settings = Settings(secret_key="unit-test-secret", access_token_expire_minutes=60 * 24)


def test_hash_is_salted_and_verifiable():
    first = hash_password("pw1")
    second = hash_password("pw1")

    assert first != "pw1"
    assert first != second
    assert verify_password("pw1", first)
    assert verify_password("pw1", second)
    assert not verify_password("pw2", first)


def test_async_hashing_matches_sync_verification():
    hashed = asyncio.run(hash_password_async("pw1"))

    assert verify_password("pw1", hashed)
    assert asyncio.run(verify_password_async("pw1", hashed))
    assert not asyncio.run(verify_password_async("nope", hashed))


def test_access_token_claims_and_default_expiry():
    token = create_access_token({"id": 7, "email": "a@example.com", "role": "employer"}, settings)

    payload = decode_access_token(token, settings)
    assert payload["id"] == 7
    assert payload["email"] == "a@example.com"
    assert payload["role"] == "employer"

    expires = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    remaining = expires - datetime.now(timezone.utc)
    assert timedelta(hours=23) < remaining <= timedelta(days=1)


def test_decode_rejects_wrong_key_and_expired_tokens():
    other = Settings(secret_key="someone-else")
    token = create_access_token({"id": 1, "email": "a@example.com", "role": "admin"}, other)
    expired = create_access_token(
        {"id": 1, "email": "a@example.com", "role": "admin"}, settings, expires_delta=timedelta(seconds=-5)
    )

    assert decode_access_token(token, settings) is None
    assert decode_access_token(expired, settings) is None
    assert decode_access_token("garbage", settings) is None


def test_reset_token_is_256_bit_hex():
    tokens = {generate_secure_reset_token() for _ in range(20)}

    assert len(tokens) == 20
    for token in tokens:
        assert re.fullmatch(r"[0-9a-f]{64}", token)


def test_hash_token_is_deterministic_sha256():
    assert hash_token("abc") == hash_token("abc")
    assert hash_token("abc") != hash_token("abd")
    assert hash_token("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_token_expiry_time():
    expiry = get_token_expiry_time(15)
    assert timedelta(minutes=14) < expiry - datetime.now(timezone.utc) <= timedelta(minutes=15)
