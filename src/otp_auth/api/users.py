"""User routes — read-only lookup and paginated listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.api.errors import error_response
from otp_auth.api.schemas import ErrorResponse, PaginatedResponse, UserOut
from otp_auth.database.engine import get_session
from otp_auth.database.repository import UserRepository
from otp_auth.errors import ValidationError
from otp_auth.utils import pagination

router = APIRouter(prefix="/users", tags=["users"])

# Largest id accepted by the lookup route
MAX_USER_ID = 2**31 - 1


@router.get(
    "/{user_id}",
    response_model=UserOut,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_user(user_id: str, session: AsyncSession = Depends(get_session)):
    """Retrieve a user by their unique id."""
    if not (user_id.isascii() and user_id.isdigit()) or int(user_id) > MAX_USER_ID:
        raise ValidationError("invalid user id")

    user = await UserRepository(session).find_by_id(int(user_id))
    if user is None:
        return error_response(404, "user not found")
    return UserOut.model_validate(user)


@router.get(
    "",
    response_model=PaginatedResponse[UserOut],
    response_model_exclude_none=True,
)
async def list_users(
    request: Request,
    page: str | None = Query(None),
    page_size: str | None = Query(None),
    phone_number: str | None = Query(None, description="Filter by phone number"),
    session: AsyncSession = Depends(get_session),
) -> PaginatedResponse[UserOut]:
    """List users, optionally filtered by a phone-number substring."""
    page, page_size = pagination.parse_params(page, page_size)
    users, total = await UserRepository(session).list_page(
        pagination.offset_for(page, page_size), page_size, phone_number or None
    )
    base_url = str(request.url.replace(query=""))
    return PaginatedResponse[UserOut](
        data=[UserOut.model_validate(u) for u in users],
        pagination=pagination.build_pagination(page, page_size, total, base_url),
    )
