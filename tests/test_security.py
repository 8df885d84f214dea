"""Tests for security utilities (password hashing, JWT creation and validation)."""

import base64
import json
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt
import pytest

from task_manager.config import settings
from task_manager.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def _flip_char(segment: str, index: int) -> str:
    replacement = "A" if segment[index] != "A" else "B"
    return segment[:index] + replacement + segment[index + 1 :]


def test_verify_password_accepts_original():
    hashed = hash_password("secret1")

    assert verify_password("secret1", hashed) is True


def test_verify_password_rejects_other_password():
    hashed = hash_password("secret1")

    assert verify_password("secret2", hashed) is False


def test_hash_password_is_salted():
    """
    GIVEN the same plaintext hashed twice
    WHEN comparing the hashes
    THEN they differ, yet each still verifies
    """
    first = hash_password("same-password")
    second = hash_password("same-password")

    assert first != second
    assert verify_password("same-password", first)
    assert verify_password("same-password", second)


def test_hash_password_records_cost_factor():
    hashed = hash_password("secret1", rounds=5)

    assert hashed.startswith("$2b$05$")


def test_verify_password_with_malformed_hash_returns_false():
    with patch("task_manager.security.logger.warning") as mock_warning:
        assert verify_password("secret1", "not-a-bcrypt-hash") is False

    mock_warning.assert_called_once()


def test_create_access_token_carries_claims_and_default_expiry():
    token = create_access_token("user-1", 3)

    decoded = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    assert decoded["user_id"] == "user-1"
    assert decoded["token_version"] == 3
    assert decoded["exp"] - decoded["iat"] == 24 * 60 * 60


def test_decode_access_token_round_trip():
    token = create_access_token("user-2", 0)

    claims = decode_access_token(token)

    assert claims is not None
    assert claims.user_id == "user-2"
    assert claims.token_version == 0
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)
    assert claims.expires_at > datetime.now(UTC)


def test_decode_access_token_expired():
    """
    GIVEN a token whose validity window has passed
    WHEN decoding it
    THEN None is returned and a debug message is logged
    """
    token = create_access_token("user-3", 0, expires_delta=timedelta(seconds=-1))

    with patch("task_manager.security.logger.debug") as mock_debug:
        claims = decode_access_token(token)

    assert claims is None
    mock_debug.assert_called_once_with("JWT token expired")


def test_decode_access_token_rejects_flipped_signature():
    token = create_access_token("user-4", 0)
    header, payload, signature = token.split(".")

    tampered = ".".join([header, payload, _flip_char(signature, 0)])

    assert decode_access_token(tampered) is None


def test_decode_access_token_rejects_modified_payload():
    token = create_access_token("user-5", 0)
    header, payload, signature = token.split(".")
    padded = payload + "=" * (-len(payload) % 4)
    claims = json.loads(base64.urlsafe_b64decode(padded))
    claims["user_id"] = "someone-else"
    forged = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()

    assert decode_access_token(".".join([header, forged, signature])) is None


def test_decode_access_token_invalid_signature():
    now = datetime.now(UTC)
    token = jwt.encode(
        {"user_id": "user-6", "token_version": 0, "iat": now, "exp": now + timedelta(hours=1)},
        "a-completely-different-secret-of-decent-length",
        algorithm="HS256",
    )

    with patch("task_manager.security.logger.warning") as mock_warning:
        claims = decode_access_token(token)

    assert claims is None
    mock_warning.assert_called_once()
    assert "JWT decode failed" in str(mock_warning.call_args)


def test_decode_access_token_rejects_unsigned_token():
    now = datetime.now(UTC)
    token = jwt.encode(
        {"user_id": "user-7", "token_version": 0, "iat": now, "exp": now + timedelta(hours=1)},
        None,
        algorithm="none",
    )

    assert decode_access_token(token) is None


def test_decode_access_token_rejects_other_algorithm():
    now = datetime.now(UTC)
    token = jwt.encode(
        {"user_id": "user-8", "token_version": 0, "iat": now, "exp": now + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm="HS512",
    )

    assert decode_access_token(token) is None


def test_decode_access_token_requires_token_version():
    now = datetime.now(UTC)
    token = jwt.encode(
        {"user_id": "user-9", "iat": now, "exp": now + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )

    assert decode_access_token(token) is None


def test_decode_access_token_rejects_negative_version():
    now = datetime.now(UTC)
    token = jwt.encode(
        {"user_id": "user-10", "token_version": -1, "iat": now, "exp": now + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )

    assert decode_access_token(token) is None


def test_decode_access_token_malformed():
    with patch("task_manager.security.logger.warning") as mock_warning:
        claims = decode_access_token("not.a.valid.jwt.token")

    assert claims is None
    mock_warning.assert_called_once()


def test_create_access_token_requires_secret(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", None)

    with pytest.raises(RuntimeError, match="JWT_SECRET is not set"):
        create_access_token("user-11", 0)


def test_create_access_token_refuses_weak_secret(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", "short")

    with pytest.raises(RuntimeError, match="at least 32 characters"):
        create_access_token("user-12", 0)
