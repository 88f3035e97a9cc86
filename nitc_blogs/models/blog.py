"""
NITC Blogs — Blog Model

A blog is owned by exactly one user (``user_id``). Moderation state is the
pair (draft, reviewed); only ``draft=False, reviewed=True`` posts are public.
"""
import uuid
from datetime import datetime
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from nitc_blogs.core.clock import utcnow
from nitc_blogs.db.database import Base
from nitc_blogs.models.user import User


class Blog(Base):
    __tablename__ = "blogs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    featured_image: Mapped[str] = mapped_column(String(512), default="", nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # {value, label} selectors
    branch_value: Mapped[str] = mapped_column(String(64), default="", index=True, nullable=False)
    branch_label: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    semester_value: Mapped[str] = mapped_column(String(64), default="", index=True, nullable=False)
    semester_label: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    subject_value: Mapped[str] = mapped_column(String(64), default="", index=True, nullable=False)
    subject_label: Mapped[str] = mapped_column(String(128), default="", nullable=False)

    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    likes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    likes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    user: Mapped[User] = relationship(lazy="joined")

    draft: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reviewed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Blog slug={self.slug} draft={self.draft} reviewed={self.reviewed}>"
