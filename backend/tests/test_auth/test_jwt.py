"""Unit tests for JWT token creation, decoding, and validation."""

from datetime import timedelta

import pytest
from jose import JWTError, jwt

from app.auth.jwt import create_access_token, decode_token
from app.config import settings


class TestCreateAccessToken:
    """Test access token creation."""

    def test_contains_type_access(self):
        token = create_access_token({"sub": "user-123"})
        payload = decode_token(token)
        assert payload["type"] == "access"

    def test_contains_sub_claim(self):
        token = create_access_token({"sub": "user-abc"})
        payload = decode_token(token)
        assert payload["sub"] == "user-abc"

    def test_contains_iat_and_exp_claims(self):
        payload = decode_token(create_access_token({"sub": "user-123"}))
        assert "iat" in payload
        assert "exp" in payload

    def test_default_expiry_from_settings(self):
        payload = decode_token(create_access_token({"sub": "user-123"}))
        assert payload["exp"] - payload["iat"] == settings.jwt_access_token_expire_minutes * 60

    def test_custom_expiry_delta(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(hours=1))
        payload = decode_token(token)
        assert payload["exp"] - payload["iat"] == 3600

    def test_caller_payload_not_mutated(self):
        data = {"sub": "user-123"}
        create_access_token(data)
        assert data == {"sub": "user-123"}


class TestDecodeToken:
    """Test token decoding and validation."""

    def test_decode_expired_token_raises(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_decode_invalid_token_raises(self):
        with pytest.raises(JWTError):
            decode_token("not.a.valid.token")

    def test_decode_empty_string_raises(self):
        with pytest.raises(JWTError):
            decode_token("")

    def test_decode_wrong_secret_raises(self):
        token = jwt.encode({"sub": "user-123"}, "some-other-secret", algorithm=settings.jwt_algorithm)
        with pytest.raises(JWTError):
            decode_token(token)
