"""
NITC Blogs — Blog API routes

Public reads only ever show published posts (draft=False, reviewed=True),
except the plain paginated index. Mutations go through protect, and
update/delete additionally through restrict_to_owner("blog").
"""
import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nitc_blogs.core.errors import NotFound
from nitc_blogs.db.blogs import BlogRepository, Page
from nitc_blogs.db.database import get_db
from nitc_blogs.middleware.auth import AuthContext, protect, restrict_to_admin, restrict_to_owner
from nitc_blogs.models.blog import Blog
from nitc_blogs.schemas.blog import (
    BlogCreate,
    BlogOut,
    BlogOwner,
    BlogPage,
    BlogResponse,
    BlogSummary,
    BlogUpdate,
    LatestBlogs,
    LikesResponse,
    RandomBlog,
    RandomBlogs,
    UnreviewedPage,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/blogs", tags=["blogs"])


def get_blogs(db: AsyncSession = Depends(get_db)) -> BlogRepository:
    return BlogRepository(db)


def to_page(page: Page) -> BlogPage:
    return BlogPage(
        data=[BlogSummary.from_blog(b) for b in page.items],
        current_page=page.page,
        number_of_pages=page.number_of_pages,
        total_blogs=page.total,
        current_blogs_count=len(page.items),
    )


async def find_blog(blogs: BlogRepository, blog_id: str) -> Blog:
    blog = await blogs.get(blog_id)
    if blog is None:
        raise NotFound("No blog with that id")
    return blog


# ── Public reads ──────────────────────────────────────────────────────────────

@router.get("", response_model=BlogPage)
async def get_all_blogs(page: int = Query(1, ge=1), blogs: BlogRepository = Depends(get_blogs)):
    return to_page(await blogs.all_blogs(page))


@router.get("/latest", response_model=LatestBlogs)
async def get_latest_blogs(blogs: BlogRepository = Depends(get_blogs)):
    latest = await blogs.latest()
    return LatestBlogs(data=[BlogSummary.from_blog(b) for b in latest], current_blogs_count=len(latest))


@router.get("/random", response_model=RandomBlogs)
async def get_random_blogs(blogs: BlogRepository = Depends(get_blogs)):
    picked = await blogs.random()
    return RandomBlogs(data=[
        RandomBlog(
            id=b.id,
            title=b.title,
            slug=b.slug,
            featured_image=b.featured_image,
            user=BlogOwner(id=b.user.id, name=b.user.name, photo=b.user.photo),
        )
        for b in picked
    ])


@router.get("/search", response_model=BlogPage)
async def search_blogs(
    branch: str | None = None,
    semester: str | None = None,
    subject: str | None = None,
    search: str | None = Query(None, max_length=200),
    sort: Literal["latest", "oldest", "popular"] | None = None,
    page: int = Query(1, ge=1),
    blogs: BlogRepository = Depends(get_blogs),
):
    result = await blogs.search(
        branch=branch, semester=semester, subject=subject, text=search, sort=sort, page=page
    )
    return to_page(result)


@router.get("/slug/{slug}", response_model=BlogResponse)
async def get_blog_by_slug(slug: str, blogs: BlogRepository = Depends(get_blogs)):
    blog = await blogs.get_by_slug(slug)
    if blog is None:
        raise NotFound()
    return BlogResponse(data=BlogOut.from_blog(blog))


# ── Likes ─────────────────────────────────────────────────────────────────────

@router.get("/like/{id}", response_model=LikesResponse)
async def fetch_likes(id: str, blogs: BlogRepository = Depends(get_blogs)):
    blog = await find_blog(blogs, id)
    return LikesResponse(likes=list(blog.likes or []))


@router.patch("/like/{id}", response_model=LikesResponse)
async def like_blog(
    id: str, ctx: AuthContext = Depends(protect), blogs: BlogRepository = Depends(get_blogs)
):
    """Toggle the caller's like on a blog."""
    blog = await find_blog(blogs, id)
    return LikesResponse(likes=await blogs.toggle_like(blog, ctx.user_id))


# ── Moderation (admins only) ──────────────────────────────────────────────────

@router.get("/admin", response_model=UnreviewedPage)
async def get_unreviewed_blogs(
    page: int = Query(1, ge=1),
    ctx: AuthContext = Depends(restrict_to_admin),
    blogs: BlogRepository = Depends(get_blogs),
):
    result = await blogs.unreviewed(
        page, branch=ctx.user.admin_branch or "all", semester=ctx.user.admin_semester or "all"
    )
    return UnreviewedPage(
        data=[BlogSummary.from_blog(b) for b in result.items],
        current_page=result.page,
        number_of_pages=result.number_of_pages,
    )


@router.get("/admin/slug/{slug}", response_model=BlogResponse)
async def get_unreviewed_blog_by_slug(
    slug: str,
    ctx: AuthContext = Depends(restrict_to_admin),
    blogs: BlogRepository = Depends(get_blogs),
):
    blog = await blogs.get_by_slug(slug, unreviewed_only=True)
    if blog is None:
        raise NotFound("Either the blog does not exist or it has been reviewed")
    return BlogResponse(data=BlogOut.from_blog(blog))


@router.patch("/admin/{id}", response_model=BlogResponse)
async def review_blog(
    id: str,
    ctx: AuthContext = Depends(restrict_to_admin),
    blogs: BlogRepository = Depends(get_blogs),
):
    blog = await blogs.review(await find_blog(blogs, id))
    logger.info("Blog %s reviewed by %s", blog.id, ctx.user_id)
    return BlogResponse(data=BlogOut.from_blog(blog))


# ── Authoring ─────────────────────────────────────────────────────────────────

@router.post("", response_model=BlogResponse, status_code=status.HTTP_201_CREATED)
async def create_blog(
    payload: BlogCreate,
    ctx: AuthContext = Depends(protect),
    blogs: BlogRepository = Depends(get_blogs),
):
    blog = Blog(
        title=payload.title,
        description=payload.description,
        featured_image=payload.featured_image,
        content=payload.content,
        branch_value=payload.branch.value,
        branch_label=payload.branch.label,
        semester_value=payload.semester.value,
        semester_label=payload.semester.label,
        subject_value=payload.subject.value,
        subject_label=payload.subject.label,
        tags=payload.tags,
        likes=[],
        likes_count=0,
        draft=payload.draft,
        reviewed=False,
        user_id=ctx.user_id,
    )
    blog = await blogs.create(blog)
    return BlogResponse(data=BlogOut.from_blog(blog))


@router.patch("/{id}", response_model=BlogResponse)
async def update_blog(
    payload: BlogUpdate,
    blog: Blog = Depends(restrict_to_owner("blog")),
    blogs: BlogRepository = Depends(get_blogs),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"branch"})
    if payload.branch is not None:
        changes.update(branch_value=payload.branch.value, branch_label=payload.branch.label)
    blog = await blogs.update(blog, changes)
    return BlogResponse(data=BlogOut.from_blog(blog))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blog(
    blog: Blog = Depends(restrict_to_owner("blog")),
    blogs: BlogRepository = Depends(get_blogs),
):
    await blogs.delete(blog)
