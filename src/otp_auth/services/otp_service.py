"""OTP service — issues and verifies one-time passcodes per phone number."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable

from otp_auth.errors import (
    GenerationError,
    InvalidOTPStateError,
    OTPMismatchError,
    OTPNotFoundError,
)
from otp_auth.services.expiring_store import ExpiringStore

logger = logging.getLogger(__name__)

OTP_DIGITS = 6
OTP_TTL_SECONDS = 120  # 2 minutes

# Exceptions the OS-backed random source may raise
_RANDOM_SOURCE_ERRORS = (OSError, NotImplementedError)


class OTPService:
    """Generates codes into an :class:`ExpiringStore` and checks them.

    The service does no throttling; callers must consult the rate limiter
    before calling :meth:`request`.
    """

    def __init__(
        self,
        store: ExpiringStore[str],
        ttl_seconds: float = OTP_TTL_SECONDS,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ) -> None:
        self._store = store
        self._ttl = ttl_seconds
        self._randbelow = randbelow

    def request(self, phone_number: str) -> str:
        """Generate a fresh code for *phone_number*, replacing any pending one."""
        try:
            value = self._randbelow(10**OTP_DIGITS)
        except _RANDOM_SOURCE_ERRORS as exc:
            logger.error("Failed to generate OTP: %s", exc)
            raise GenerationError(f"failed to generate OTP: {exc}") from exc

        code = f"{value:0{OTP_DIGITS}d}"
        self._store.set(phone_number, code, self._ttl)
        logger.debug("OTP generated for %s: %s", phone_number, code)
        return code

    def verify(self, phone_number: str, code: str) -> bool:
        """Check *code* against the pending OTP for *phone_number*.

        The record is left in place on success, so the same code keeps
        verifying until it expires.
        """
        stored, found = self._store.get(phone_number)
        if not found:
            logger.info("No pending OTP for %s", phone_number)
            raise OTPNotFoundError("OTP not found or expired")

        if not isinstance(stored, str):
            logger.error("Stored OTP for %s is not a string: %r", phone_number, stored)
            raise InvalidOTPStateError("stored OTP is not a string")

        if not secrets.compare_digest(stored.encode(), code.encode()):
            logger.info("Incorrect OTP submitted for %s", phone_number)
            raise OTPMismatchError("wrong OTP code")

        logger.info("OTP verified for %s", phone_number)
        return True
