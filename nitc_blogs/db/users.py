"""
NITC Blogs — Credential store

Persistence only: every state transition is decided in the auth service.
Default reads exclude soft-deleted (``active = False``) accounts.
"""
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nitc_blogs.models.user import User


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _active(self):
        return select(User).where(User.active.is_(True))

    async def get(self, user_id: str) -> User | None:
        result = await self.db.execute(self._active().where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(self._active().where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def email_registered(self, email: str) -> bool:
        # Soft-deleted accounts still hold their address.
        result = await self.db.execute(select(User.id).where(User.email == email.strip().lower()))
        return result.first() is not None

    async def get_by_signup_token(self, digest: str, now: datetime) -> User | None:
        result = await self.db.execute(
            self._active().where(User.signup_token == digest, User.signup_token_expires > now)
        )
        return result.scalar_one_or_none()

    async def get_by_reset_token(self, digest: str, now: datetime) -> User | None:
        result = await self.db.execute(
            self._active().where(
                User.password_reset_token == digest, User.password_reset_expires > now
            )
        )
        return result.scalar_one_or_none()

    async def save(self, user: User) -> User:
        self.db.add(user)
        await self.db.commit()
        return user
