"""
NITC Blogs — Resource ownership resolver
"""
from sqlalchemy.ext.asyncio import AsyncSession

from nitc_blogs.core.errors import Forbidden, NotFound
from nitc_blogs.db.database import Base
from nitc_blogs.models.blog import Blog

# resource kind → (model, owner attribute)
OWNED_RESOURCES: dict[str, tuple[type[Base], str]] = {
    "blog": (Blog, "user_id"),
}


class OwnershipResolver:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, kind: str, resource_id: str, user_id: str):
        """Load the resource and require the acting user to own it."""
        try:
            model, owner_attr = OWNED_RESOURCES[kind]
        except KeyError:
            raise ValueError(f"Unknown resource kind: {kind!r}")

        resource = await self.db.get(model, resource_id)
        if resource is None:
            raise NotFound()
        if getattr(resource, owner_attr) != user_id:
            raise Forbidden()
        return resource
