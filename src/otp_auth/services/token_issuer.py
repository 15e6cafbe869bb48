"""Token issuer — signs HS256 access tokens for verified phone numbers."""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable
from typing import Any

import jwt

from otp_auth.config import Settings
from otp_auth.errors import ConfigError, SigningError
from otp_auth.utils.duration import parse_duration

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def subject_for(phone_number: str, issued_at: int) -> str:
    """Pseudonymous subject: ``sha256(phone || iat)`` as hex.

    Tokens issued in different seconds for the same phone carry unrelated
    subjects.
    """
    return hashlib.sha256(f"{phone_number}{issued_at}".encode("utf-8")).hexdigest()


class TokenIssuer:
    """Builds and signs bearer tokens.

    Parameters
    ----------
    secret_key:
        HMAC secret.  Signing with an empty secret is refused.
    access_expiry:
        Token lifetime as a duration string (e.g. ``"15m"``).  Parsed on
        every call so a bad value surfaces as :class:`ConfigError`.
    clock:
        Returns the current unix time in seconds.
    """

    def __init__(
        self,
        secret_key: str,
        access_expiry: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret_key = secret_key
        self._access_expiry = access_expiry
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(settings.secret_key, settings.access_expiry)

    def lifetime_seconds(self) -> int:
        """Configured token lifetime, in whole seconds."""
        try:
            lifetime = parse_duration(self._access_expiry)
        except ValueError as exc:
            logger.error("Invalid access expiry %r: %s", self._access_expiry, exc)
            raise ConfigError(f"invalid access expiry duration: {exc}") from exc

        seconds = int(lifetime.total_seconds())
        if seconds <= 0:
            logger.error("Access expiry %r is not positive", self._access_expiry)
            raise ConfigError("access expiry must be positive")
        return seconds

    def generate_token(self, phone_number: str) -> str:
        """Return a signed token for *phone_number*."""
        lifetime = self.lifetime_seconds()
        if not self._secret_key:
            logger.error("Refusing to sign token: secret key is empty")
            raise SigningError("signing secret is not configured")

        iat = int(self._clock())
        claims = {
            "sub": subject_for(phone_number, iat),
            "iat": iat,
            "exp": iat + lifetime,
        }
        try:
            return jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            logger.error("Failed to sign token: %s", exc)
            raise SigningError(f"failed to sign token: {exc}") from exc

    def decode_token(self, token: str) -> dict[str, Any]:
        """Verify *token* and return its claims."""
        if not self._secret_key:
            raise SigningError("signing secret is not configured")
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.PyJWTError as exc:
            raise SigningError(f"invalid token: {exc}") from exc
