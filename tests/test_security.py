from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from app.utils.security import (
    BCRYPT_ROUNDS,
    HashingError,
    SigningError,
    TokenConfig,
    averify_password,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)


def test_hash_password_uses_bcrypt_work_factor():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert hashed.startswith("$2b$")
    assert hashed.split("$")[2] == str(BCRYPT_ROUNDS)


def test_hash_password_is_salted():
    assert hash_password("secret123") != hash_password("secret123")


def test_verify_password_round_trip():
    hashed = hash_password("secret123")
    assert verify_password("secret123", hashed) is True
    assert verify_password("secret124", hashed) is False
    assert verify_password("", hashed) is False


def test_hash_password_rejects_empty():
    with pytest.raises(HashingError):
        hash_password("")
    with pytest.raises(HashingError):
        hash_password(None)


def test_verify_password_with_garbage_hash_raises_hashing_error():
    with pytest.raises(HashingError):
        verify_password("secret123", "not-a-hash")


def test_async_verify():
    hashed = hash_password("secret123")

    async def _run():
        return await averify_password("secret123", hashed), await averify_password("nope", hashed)

    assert asyncio.run(_run()) == (True, False)


def test_create_token_encodes_subject_and_expiry(token_config):
    token = create_token("abc123", token_config)
    payload = decode_token(token, token_config)

    assert payload["sub"] == "abc123"
    assert payload["id"] == "abc123"
    assert payload["exp"] - payload["iat"] == int(token_config.expires_in.total_seconds())


def test_create_token_without_secret_fails():
    with pytest.raises(SigningError):
        create_token("abc123", TokenConfig(secret_key=None))
    with pytest.raises(SigningError):
        create_token("abc123", TokenConfig(secret_key=""))


def test_create_token_with_unknown_algorithm_fails():
    with pytest.raises(SigningError):
        create_token("abc123", TokenConfig(secret_key="s", algorithm="NOPE"))


def test_decode_rejects_wrong_secret(token_config):
    token = create_token("abc123", token_config)
    with pytest.raises(JWTError):
        decode_token(token, TokenConfig(secret_key="other-secret"))


def test_decode_rejects_expired_token(token_config):
    expired = token_config.model_copy(update={"expires_in": timedelta(seconds=-10)})
    token = create_token("abc123", expired)
    with pytest.raises(ExpiredSignatureError):
        decode_token(token, token_config)


def test_token_config_from_settings(jwt_settings):
    config = TokenConfig.from_settings()
    assert config.secret_key == jwt_settings.jwt_secret
    assert config.expires_in == timedelta(hours=2)
    token = create_token("abc123")
    assert jwt.get_unverified_claims(token)["sub"] == "abc123"
