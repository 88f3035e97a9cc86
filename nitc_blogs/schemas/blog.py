"""
NITC Blogs — Blog schemas
"""
import json
from datetime import datetime

from pydantic import Field, field_validator

from nitc_blogs.models.blog import Blog
from nitc_blogs.schemas.auth import ProfileUser
from nitc_blogs.schemas.common import CamelModel


class Option(CamelModel):
    value: str = ""
    label: str = ""


def _parse_tags(value):
    # Clients historically post tags as the string "['a', 'b']".
    if isinstance(value, str):
        try:
            parsed = json.loads(value.replace("'", '"'))
        except ValueError:
            parsed = [part.strip() for part in value.split(",")]
        return [str(tag) for tag in parsed if str(tag).strip()] if isinstance(parsed, list) else [str(parsed)]
    return value


class BlogCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=2000)
    featured_image: str = Field("", max_length=512)
    branch: Option = Option()
    semester: Option = Option()
    subject: Option = Option()
    tags: list[str] = Field(default_factory=list, max_length=20)
    content: str = Field(..., min_length=1)
    draft: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, value):
        return _parse_tags(value)


class BlogUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    featured_image: str | None = Field(None, max_length=512)
    content: str | None = Field(None, min_length=1)
    tags: list[str] | None = Field(None, max_length=20)
    branch: Option | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, value):
        return _parse_tags(value)


class BlogOwner(CamelModel):
    id: str
    name: str
    photo: str | None = None


class BlogSummary(CamelModel):
    id: str
    title: str
    slug: str
    description: str
    featured_image: str
    branch: Option
    tags: list[str]
    likes: list[str]
    user: BlogOwner
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_blog(cls, blog: Blog) -> "BlogSummary":
        return cls.model_validate(_flatten(blog))


class BlogOut(BlogSummary):
    semester: Option
    subject: Option
    content: str
    draft: bool
    reviewed: bool

    @classmethod
    def from_blog(cls, blog: Blog) -> "BlogOut":
        return cls.model_validate(_flatten(blog))


class RandomBlog(CamelModel):
    id: str
    title: str
    slug: str
    featured_image: str
    user: BlogOwner


def _flatten(blog: Blog) -> dict:
    return {
        "id": blog.id,
        "title": blog.title,
        "slug": blog.slug,
        "description": blog.description,
        "featured_image": blog.featured_image,
        "branch": Option(value=blog.branch_value, label=blog.branch_label),
        "semester": Option(value=blog.semester_value, label=blog.semester_label),
        "subject": Option(value=blog.subject_value, label=blog.subject_label),
        "tags": list(blog.tags or []),
        "likes": list(blog.likes or []),
        "content": blog.content,
        "user": BlogOwner(id=blog.user.id, name=blog.user.name, photo=blog.user.photo),
        "draft": blog.draft,
        "reviewed": blog.reviewed,
        "created_at": blog.created_at,
        "updated_at": blog.updated_at,
    }


class BlogResponse(CamelModel):
    status: str = "success"
    data: BlogOut


class BlogPage(CamelModel):
    data: list[BlogSummary]
    current_page: int
    number_of_pages: int
    total_blogs: int
    current_blogs_count: int


class LatestBlogs(CamelModel):
    data: list[BlogSummary]
    current_blogs_count: int


class RandomBlogs(CamelModel):
    status: str = "success"
    data: list[RandomBlog]


class UnreviewedPage(CamelModel):
    status: str = "success"
    data: list[BlogSummary]
    current_page: int
    number_of_pages: int


class LikesResponse(CamelModel):
    status: str = "success"
    likes: list[str]


class ProfileData(CamelModel):
    user: ProfileUser
    blogs: list[BlogSummary]
    total_blogs: int
    blogs_count: int


class ProfileResponse(CamelModel):
    status: str = "success"
    data: ProfileData
