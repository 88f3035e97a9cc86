"""
NITC Blogs — User Model (identity + credential record)
"""
import uuid
from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from nitc_blogs.core.clock import utcnow
from nitc_blogs.db.database import Base


class User(Base):
    """
    Credential store row. ``password_hash`` and the token digests are never
    serialized to clients; ``active = False`` marks a soft-deleted account.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    photo: Mapped[str | None] = mapped_column(String(512), nullable=True)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Role descriptor
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    admin_branch: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    admin_semester: Mapped[str] = mapped_column(String(64), default="", nullable=False)

    password_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    signup_token: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    signup_token_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    password_reset_token: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    password_reset_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    @property
    def role(self) -> dict:
        return {
            "isAdmin": self.is_admin,
            "adminBranch": self.admin_branch,
            "adminSemester": self.admin_semester,
        }

    def clear_signup_token(self) -> None:
        self.signup_token = None
        self.signup_token_expires = None

    def clear_password_reset_token(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None

    def __repr__(self) -> str:
        return f"<User email={self.email} verified={self.is_verified} admin={self.is_admin}>"
