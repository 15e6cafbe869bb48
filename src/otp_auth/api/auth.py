"""Auth routes — request and verify phone-number OTPs.

Endpoints
---------
POST /send-otp     → rate-limit, then issue a fresh OTP
POST /verify-otp   → verify the OTP, register the user, return a token
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from otp_auth.api.dependencies import (
    get_otp_service,
    get_rate_limiter,
    get_token_issuer,
    get_user_registrar,
)
from otp_auth.api.schemas import (
    BasicResponse,
    ErrorResponse,
    LoginRequest,
    OTPRequest,
    TokenData,
    TokenResponse,
)
from otp_auth.errors import RateLimitExceeded
from otp_auth.services.otp_service import OTPService
from otp_auth.services.rate_limiter import SlidingWindowRateLimiter
from otp_auth.services.token_issuer import TokenIssuer
from otp_auth.services.user_registrar import UserRegistrar

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def otp_rate_limit_key(phone_number: str) -> str:
    return f"otp:{phone_number}"


@router.post(
    "/send-otp",
    response_model=BasicResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def request_otp(
    body: OTPRequest,
    request: Request,
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
    otp_service: OTPService = Depends(get_otp_service),
) -> BasicResponse:
    """Send a one-time passcode to the given phone number."""
    settings = request.app.state.settings
    decision = limiter.check(
        otp_rate_limit_key(body.phone_number),
        settings.otp_rate_limit_max,
        settings.otp_rate_limit_window_seconds,
    )
    if decision.limited:
        raise RateLimitExceeded(decision.retry_after)

    otp_service.request(body.phone_number)
    return BasicResponse(status_code=200, status="success", message="OTP sent successfully")


@router.post(
    "/verify-otp",
    response_model=TokenResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def verify_otp(
    body: LoginRequest,
    otp_service: OTPService = Depends(get_otp_service),
    registrar: UserRegistrar = Depends(get_user_registrar),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenResponse:
    """Verify the OTP and return an access token."""
    otp_service.verify(body.phone_number, body.otp)

    created = await registrar.register_user(body.phone_number)
    if created:
        logger.info("New user signed up with %s", body.phone_number)

    access_token = token_issuer.generate_token(body.phone_number)
    return TokenResponse(
        status_code=200,
        status="Ok",
        message="OTP verified successfully",
        data=TokenData(access_token=access_token),
    )
