"""FastAPI dependency providers for the shared auth components."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.database.engine import get_session
from otp_auth.services.otp_service import OTPService
from otp_auth.services.rate_limiter import SlidingWindowRateLimiter
from otp_auth.services.token_issuer import TokenIssuer
from otp_auth.services.user_registrar import UserRegistrar


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    return request.app.state.rate_limiter


def get_otp_service(request: Request) -> OTPService:
    return request.app.state.otp_service


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


async def get_user_registrar(
    session: AsyncSession = Depends(get_session),
) -> AsyncGenerator[UserRegistrar, None]:
    yield UserRegistrar(session)
