"""Error taxonomy for the OTP authentication flow.

Every failure the core can produce has its own exception class.  The HTTP
layer classifies errors by class (see :mod:`otp_auth.api.errors`), never by
message text.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all errors raised by the authentication core."""

    def __init__(self, message: str = "") -> None:
        self.message = message or self.__class__.__doc__ or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(AuthError):
    """Malformed input, rejected before reaching the core."""


class RateLimitExceeded(AuthError):
    """Too many requests for this key within the current window."""

    def __init__(self, retry_after: int, message: str = "") -> None:
        self.retry_after = retry_after
        super().__init__(message)


class GenerationError(AuthError):
    """The secure random source failed to produce an OTP."""


class OTPNotFoundError(AuthError):
    """No live OTP record exists for this phone number."""


class InvalidOTPStateError(AuthError):
    """The stored OTP record is not a code string."""


class OTPMismatchError(AuthError):
    """The submitted code does not match the stored OTP."""


class PersistenceError(AuthError):
    """The user record could not be read or written."""


class ConfigError(AuthError):
    """Token signing configuration is missing or malformed."""


class SigningError(AuthError):
    """The token could not be signed or verified."""
