"""User repository — data access layer for user records."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.models.user import User


class UserRepository:
    """Encapsulates all database queries related to users."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_phone(self, phone_number: str) -> User | None:
        """Look up a user by their phone number (``09XXXXXXXXX``)."""
        stmt = select(User).where(User.phone_number == phone_number)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def add(self, phone_number: str) -> User:
        """Insert a new user and flush so its id is populated."""
        user = User(phone_number=phone_number)
        self._session.add(user)
        await self._session.flush()
        return user

    async def list_page(
        self, offset: int, limit: int, phone_contains: str | None = None
    ) -> tuple[list[User], int]:
        """Return one page of users ordered by id, plus the total match count.

        *phone_contains* filters to phone numbers containing that substring.
        """
        stmt = select(User)
        count_stmt = select(func.count()).select_from(User)
        if phone_contains:
            condition = User.phone_number.contains(phone_contains, autoescape=True)
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        total = (await self._session.execute(count_stmt)).scalar_one()
        result = await self._session.execute(
            stmt.order_by(User.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total
