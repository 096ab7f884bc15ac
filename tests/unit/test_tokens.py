"""Unit tests for token issuance and verification."""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from userauth.config import Settings
from userauth.kernel.identity.jwt import TokenIssuer, TokenPurpose

TEST_SECRET = "test-secret-key-for-testing-only"


class TestTokenIssuer:
    """Tests for TokenIssuer."""

    def test_round_trip_strips_standard_claims(self, issuer: TokenIssuer):
        token = issuer.issue({"sub": "abc", "email": "a@x.com", "role": "user"}, timedelta(minutes=5))

        verified = issuer.verify(token)

        assert verified is not None
        assert verified.claims == {"email": "a@x.com", "role": "user"}
        assert verified.expires_at > verified.issued_at

    def test_session_token_sets_subject_from_id(self, issuer: TokenIssuer):
        user_id = str(uuid.uuid4())
        token = issuer.issue_session_token({"id": user_id, "email": "a@x.com"})

        raw = jwt.get_unverified_claims(token)
        assert raw["sub"] == user_id
        assert raw["exp"] - int(raw["iat"]) in (12 * 3600, 12 * 3600 - 1, 12 * 3600 + 1)
        assert issuer.verify(token).claims == {"id": user_id, "email": "a@x.com"}

    def test_purpose_token_claims(self, issuer: TokenIssuer):
        user_id = uuid.uuid4()
        token = issuer.issue_purpose_token(user_id, TokenPurpose.RESET_PASSWORD)

        verified = issuer.verify(token)

        assert verified.claims == {"user_id": str(user_id), "purpose": "reset-password"}
        assert verified.purpose == "reset-password"
        assert (verified.expires_at - verified.issued_at) <= timedelta(hours=1)

    def test_expired_token_is_invalid(self, issuer: TokenIssuer):
        token = issuer.issue({"email": "a@x.com"}, timedelta(seconds=-5))

        assert issuer.verify(token) is None

    def test_tampered_token_is_invalid(self, issuer: TokenIssuer):
        token = issuer.issue({"role": "user"}, timedelta(minutes=5))
        header, payload, signature = token.split(".")
        forged_payload = jwt.encode({"role": "admin"}, "other", algorithm="HS256").split(".")[1]

        assert issuer.verify(f"{header}.{forged_payload}.{signature}") is None

    def test_wrong_secret_is_invalid(self, issuer: TokenIssuer):
        other = TokenIssuer(secret_key="a-different-secret")
        token = other.issue({"role": "user"}, timedelta(minutes=5))

        assert issuer.verify(token) is None

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c"])
    def test_malformed_token_is_invalid(self, issuer: TokenIssuer, garbage: str):
        assert issuer.verify(garbage) is None

    def test_expired_and_forged_are_indistinguishable(self, issuer: TokenIssuer):
        expired = issuer.issue({"role": "user"}, timedelta(seconds=-5))
        forged = TokenIssuer(secret_key="x").issue({"role": "user"}, timedelta(minutes=5))

        assert issuer.verify(expired) == issuer.verify(forged)

    def test_token_without_iat_is_invalid(self, issuer: TokenIssuer):
        token = jwt.encode({"role": "user"}, TEST_SECRET, algorithm="HS256")

        assert issuer.verify(token) is None

    def test_issued_at_keeps_subsecond_precision(self, issuer: TokenIssuer):
        token = issuer.issue({}, timedelta(minutes=5))

        raw_iat = jwt.get_unverified_claims(token)["iat"]
        assert isinstance(raw_iat, float)
        assert issuer.verify(token).issued_at.timestamp() == pytest.approx(raw_iat, abs=1e-6)

    def test_from_settings(self):
        settings = Settings(
            secret_key="s3cret",
            session_token_expire_hours=2,
            purpose_token_expire_minutes=15,
        )
        issuer = TokenIssuer.from_settings(settings)

        assert issuer.secret_key == "s3cret"
        assert issuer.session_ttl == timedelta(hours=2)
        assert issuer.purpose_ttl == timedelta(minutes=15)

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenIssuer(secret_key="")
