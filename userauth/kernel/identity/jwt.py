"""
Signed, time-bounded tokens (JWT, HMAC).

Two flavours share one issuer:

- session tokens carry the sanitized user record;
- purpose tokens carry ``{user_id, purpose}`` and are accepted by exactly
  one operation.

The issuer itself does not look at ``purpose``; callers check it.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from userauth.config import Settings
from userauth.logging_config import get_logger

logger = get_logger(__name__)

# Registered claims removed from verified payloads
STANDARD_CLAIMS = ("iat", "exp", "sub")


class TokenPurpose(str, Enum):
    """Operations a purpose token may be spent on."""
    CONFIRM_ACCOUNT = "confirm-account"
    RESET_PASSWORD = "reset-password"


class VerifiedToken(BaseModel):
    """Claims of a token that passed signature and expiry checks."""

    claims: dict[str, Any]
    issued_at: datetime
    expires_at: datetime

    @property
    def purpose(self) -> Optional[str]:
        return self.claims.get("purpose")


class TokenIssuer:
    """
    JWT creation and verification over a shared secret.

    Verification failures collapse into a single ``None`` result so callers
    cannot tell an expired token from a forged one; the reason is only
    logged.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        session_ttl: timedelta = timedelta(hours=12),
        purpose_ttl: timedelta = timedelta(hours=1),
    ):
        if not secret_key:
            raise ValueError("A signing secret is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.session_ttl = session_ttl
        self.purpose_ttl = purpose_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            session_ttl=timedelta(hours=settings.session_token_expire_hours),
            purpose_ttl=timedelta(minutes=settings.purpose_token_expire_minutes),
        )

    def issue(self, claims: Mapping[str, Any], ttl: timedelta) -> str:
        """
        Sign ``claims`` with ``iat`` and ``exp`` added.

        ``iat`` keeps sub-second precision; it is compared against the
        stored credential epoch when a reset token is spent.
        """
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now.timestamp()
        payload["exp"] = now + ttl
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def issue_session_token(self, user_claims: Mapping[str, Any]) -> str:
        """Session token for a sanitized user (``id`` becomes ``sub``)."""
        claims = dict(user_claims)
        if "id" in claims:
            claims["sub"] = str(claims["id"])
        return self.issue(claims, self.session_ttl)

    def issue_purpose_token(self, user_id: Any, purpose: TokenPurpose) -> str:
        return self.issue(
            {"user_id": str(user_id), "purpose": purpose.value},
            self.purpose_ttl,
        )

    def verify(self, token: str) -> Optional[VerifiedToken]:
        """
        Check signature and expiry.

        Returns:
            VerifiedToken with iat/exp/sub stripped from ``claims``, or None
            for any failure.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.debug("Token rejected: expired")
            return None
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            return None

        if "iat" not in payload or "exp" not in payload:
            logger.debug("Token rejected: missing iat/exp")
            return None

        return VerifiedToken(
            claims={k: v for k, v in payload.items() if k not in STANDARD_CLAIMS},
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
