"""
Tests for bearer token issue/decode and password hashing.
"""
from datetime import timedelta

import jwt
import pytest

from app.config import settings
from app.core.errors import Unauthorized
from app.core.session import SessionContext
from app.services.auth.passwords import hash_password, verify_password
from app.services.auth.tokens import decode_token, issue_token


def staff_ctx():
    return SessionContext(user_type="staff", tenant_id="t1", subject="s1", staff_id="s1", phone="905321112233")


class TestTokens:
    def test_decoded_session_matches_issued(self):
        ctx = decode_token(issue_token(staff_ctx()))
        assert ctx == staff_ctx()
        assert ctx.is_staff and not ctx.is_owner and not ctx.is_customer

    def test_claims(self):
        payload = jwt.decode(issue_token(staff_ctx()), settings.jwt_secret, algorithms=["HS256"])
        assert payload["sub"] == "s1"
        assert payload["user_type"] == "staff"
        assert payload["tenant_id"] == "t1"
        assert payload["exp"] - payload["iat"] == settings.jwt_expires_days * 24 * 3600

    def test_expired_token(self):
        token = issue_token(staff_ctx(), expires_in=timedelta(seconds=-10))
        with pytest.raises(Unauthorized) as exc:
            decode_token(token)
        assert exc.value.detail == "Token expired"

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "s1", "user_type": "staff"}, "another-secret", algorithm="HS256")
        with pytest.raises(Unauthorized):
            decode_token(token)

    def test_unknown_user_type(self):
        token = jwt.encode({"sub": "x", "user_type": "admin"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(Unauthorized):
            decode_token(token)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_missing_or_foreign_hash(self):
        assert not verify_password("x", None)
        assert not verify_password("x", "plaintext")
