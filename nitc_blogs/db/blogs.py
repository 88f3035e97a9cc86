"""
NITC Blogs — Blog persistence and listing queries
"""
import math
from dataclasses import dataclass

from slugify import slugify
from sqlalchemy import Text, cast, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nitc_blogs.core.errors import DuplicateFieldValue
from nitc_blogs.models.blog import Blog

SORT_ORDERS = {
    "latest": (Blog.created_at.desc(),),
    "oldest": (Blog.created_at.asc(),),
    "popular": (Blog.likes_count.desc(), Blog.created_at.desc()),
}


def like_pattern(text: str) -> str:
    """Substring pattern with LIKE wildcards in the user text matched literally."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass(frozen=True)
class Page:
    items: list[Blog]
    total: int
    page: int
    per_page: int

    @property
    def number_of_pages(self) -> int:
        return math.ceil(self.total / self.per_page)


PUBLISHED = (Blog.draft.is_(False), Blog.reviewed.is_(True))


class BlogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, blog_id: str) -> Blog | None:
        return await self.db.get(Blog, blog_id)

    async def get_by_slug(self, slug: str, *, unreviewed_only: bool = False) -> Blog | None:
        query = select(Blog).where(Blog.slug == slug)
        if unreviewed_only:
            query = query.where(Blog.draft.is_(False), Blog.reviewed.is_(False))
        result = await self.db.execute(query.limit(1))
        return result.scalars().first()

    async def _commit_titled(self, title: str) -> None:
        # Two writers can both pass the title check; the unique index decides.
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateFieldValue(f"Duplicate field value: {title}. Please use another value!")

    async def _ensure_unique_title(self, title: str, exclude_id: str | None = None) -> None:
        query = select(Blog.id).where(Blog.title == title)
        if exclude_id is not None:
            query = query.where(Blog.id != exclude_id)
        if (await self.db.execute(query)).first() is not None:
            raise DuplicateFieldValue(f"Duplicate field value: {title}. Please use another value!")

    async def create(self, blog: Blog) -> Blog:
        await self._ensure_unique_title(blog.title)
        blog.slug = slugify(blog.title)
        self.db.add(blog)
        await self._commit_titled(blog.title)
        await self.db.refresh(blog, attribute_names=["user"])
        return blog

    async def update(self, blog: Blog, changes: dict) -> Blog:
        title = changes.get("title")
        if title is not None and title != blog.title:
            await self._ensure_unique_title(title, exclude_id=blog.id)
            blog.slug = slugify(title)
        for field, value in changes.items():
            setattr(blog, field, value)
        await self._commit_titled(blog.title)
        return blog

    async def delete(self, blog: Blog) -> None:
        await self.db.delete(blog)
        await self.db.commit()

    async def toggle_like(self, blog: Blog, user_id: str) -> list[str]:
        likes = list(blog.likes or [])
        if user_id in likes:
            likes = [liked for liked in likes if liked != user_id]
        else:
            likes.append(user_id)
        blog.likes = likes
        blog.likes_count = len(likes)
        await self.db.commit()
        return likes

    async def review(self, blog: Blog) -> Blog:
        blog.reviewed = True
        await self.db.commit()
        return blog

    # ─── Listings ────────────────────────────────────────────────────────────

    async def paginate(self, criteria: list, page: int, per_page: int, order=None) -> Page:
        page = max(page, 1)
        total = (await self.db.execute(select(func.count(Blog.id)).where(*criteria))).scalar_one()
        ordered = select(Blog).where(*criteria).order_by(*(order or (Blog.created_at.desc(),)))
        result = await self.db.execute(ordered.limit(per_page).offset((page - 1) * per_page))
        return Page(items=list(result.scalars().unique()), total=total, page=page, per_page=per_page)

    async def all_blogs(self, page: int, per_page: int = 4) -> Page:
        return await self.paginate([], page, per_page)

    async def latest(self, limit: int = 7) -> list[Blog]:
        result = await self.db.execute(
            select(Blog).where(*PUBLISHED).order_by(Blog.created_at.desc()).limit(limit)
        )
        return list(result.scalars().unique())

    async def random(self, limit: int = 4) -> list[Blog]:
        result = await self.db.execute(select(Blog).where(*PUBLISHED).order_by(func.random()).limit(limit))
        return list(result.scalars().unique())

    async def search(
        self,
        *,
        branch: str | None = None,
        semester: str | None = None,
        subject: str | None = None,
        text: str | None = None,
        sort: str | None = None,
        page: int = 1,
        per_page: int = 16,
    ) -> Page:
        criteria = list(PUBLISHED)
        if branch:
            criteria.append(Blog.branch_value == branch)
        if semester:
            criteria.append(Blog.semester_value == semester)
        if subject:
            criteria.append(Blog.subject_value == subject)
        if text:
            pattern = like_pattern(text)
            criteria.append(or_(
                Blog.title.ilike(pattern, escape="\\"),
                Blog.description.ilike(pattern, escape="\\"),
                func.lower(cast(Blog.tags, Text)).like(pattern.lower(), escape="\\"),
            ))
        return await self.paginate(criteria, page, per_page, SORT_ORDERS.get(sort or "latest"))

    async def by_owner(self, user_id: str, page: int, per_page: int = 5) -> Page:
        return await self.paginate([Blog.user_id == user_id], page, per_page)

    async def unreviewed(
        self, page: int, branch: str = "all", semester: str = "all", per_page: int = 20
    ) -> Page:
        criteria = [Blog.draft.is_(False), Blog.reviewed.is_(False)]
        if branch != "all":
            criteria.append(Blog.branch_value == branch)
            if semester != "all":
                criteria.append(Blog.semester_value == semester)
        return await self.paginate(criteria, page, per_page)
