"""User registrar — idempotently ensures a user exists for a verified phone."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.database.repository import UserRepository
from otp_auth.errors import PersistenceError

logger = logging.getLogger(__name__)


class UserRegistrar:
    """Creates at most one user record per phone number."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repo = UserRepository(session)

    async def register_user(self, phone_number: str) -> bool:
        """Ensure a user exists for *phone_number*.

        Returns ``True`` if a record was created, ``False`` if one already
        existed.  Any database failure is raised as :class:`PersistenceError`.
        """
        try:
            if await self._repo.find_by_phone(phone_number) is not None:
                return False
            user = await self._repo.add(phone_number)
            await self._session.commit()
        except IntegrityError:
            # A concurrent request inserted the same phone number first
            await self._session.rollback()
            logger.info("User %s was registered concurrently", phone_number)
            return False
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Failed to register user %s", phone_number)
            raise PersistenceError("error creating new user") from exc

        logger.info("Registered new user %s (id=%s)", phone_number, user.id)
        return True
