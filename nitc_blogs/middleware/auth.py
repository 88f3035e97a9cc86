"""
NITC Blogs — Access control

``protect`` resolves the ``Authorization: Bearer <token>`` header to a live,
non-stale user and hands downstream handlers a typed AuthContext.
``restrict_to_admin`` and ``restrict_to_owner`` gate mutations on top of it.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from nitc_blogs.core.errors import Forbidden, Unauthenticated
from nitc_blogs.db.database import get_db
from nitc_blogs.db.users import UserRepository
from nitc_blogs.models.user import User
from nitc_blogs.services.auth import AuthService
from nitc_blogs.services.ownership import OwnershipResolver


@dataclass(frozen=True)
class AuthContext:
    user: User

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin


def get_auth_service(request: Request, db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(UserRepository(db), request.app.state.auth, request.app.state.settings)


def bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise Unauthenticated()
    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise Unauthenticated()
    return token


async def protect(request: Request, auth: AuthService = Depends(get_auth_service)) -> AuthContext:
    user = await auth.authenticate(bearer_token(request))
    return AuthContext(user=user)


async def restrict_to_admin(ctx: AuthContext = Depends(protect)) -> AuthContext:
    if not ctx.is_admin:
        raise Forbidden()
    return ctx


def restrict_to_owner(kind: str) -> Callable[..., Awaitable[Any]]:
    """Dependency factory: the ``{id}`` path resource must belong to the caller."""

    async def owned_resource(
        id: str,
        ctx: AuthContext = Depends(protect),
        db: AsyncSession = Depends(get_db),
    ) -> Any:
        return await OwnershipResolver(db).resolve(kind, id, ctx.user_id)

    return owned_resource
