"""
NITC Blogs — Profile routes (all protected)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nitc_blogs.db.blogs import BlogRepository
from nitc_blogs.db.database import get_db
from nitc_blogs.db.users import UserRepository
from nitc_blogs.middleware.auth import AuthContext, get_auth_service, protect
from nitc_blogs.schemas.auth import (
    ProfileUpdateRequest,
    ProfileUser,
    ProfileUserData,
    ProfileUserResponse,
)
from nitc_blogs.schemas.blog import BlogSummary, ProfileData, ProfileResponse
from nitc_blogs.services.auth import AuthService

router = APIRouter(prefix="/api/v1/users", tags=["users"])

# Only these profile fields may be changed through editProfile.
EDITABLE_FIELDS = ("name", "photo", "bio")


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    page: int = Query(1, ge=1),
    ctx: AuthContext = Depends(protect),
    db: AsyncSession = Depends(get_db),
):
    """The caller's profile plus their own blogs, newest first."""
    blogs = await BlogRepository(db).by_owner(ctx.user_id, page)
    return ProfileResponse(data=ProfileData(
        user=ProfileUser.model_validate(ctx.user),
        blogs=[BlogSummary.from_blog(b) for b in blogs.items],
        total_blogs=blogs.total,
        blogs_count=len(blogs.items),
    ))


@router.get("/editProfile", response_model=ProfileUserResponse)
async def get_edit_profile(ctx: AuthContext = Depends(protect)):
    return ProfileUserResponse(data=ProfileUserData(user=ProfileUser.model_validate(ctx.user)))


@router.patch("/editProfile", response_model=ProfileUserResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    ctx: AuthContext = Depends(protect),
    db: AsyncSession = Depends(get_db),
):
    changes = payload.model_dump(include=set(EDITABLE_FIELDS), exclude_unset=True)
    for field, value in changes.items():
        if value is not None:
            setattr(ctx.user, field, value)
    await UserRepository(db).save(ctx.user)
    return ProfileUserResponse(data=ProfileUserData(user=ProfileUser.model_validate(ctx.user)))


@router.delete("/deleteMe", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    ctx: AuthContext = Depends(protect), auth: AuthService = Depends(get_auth_service)
):
    await auth.deactivate(ctx.user)
