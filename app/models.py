from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.config import settings
from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------
class Post(Base):
    __tablename__ = "posts"

    __table_args__ = (
        # Author dashboard: a user's posts, most recently edited first
        Index("ix_posts_user_id_updated_at", "user_id", "updated_at"),
        # Category pages
        Index("ix_posts_category_updated_at", "category", "updated_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Identifier issued by the external user service; not a local FK.
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(
        String(1000), default=lambda: settings.DEFAULT_POST_IMAGE, nullable=False
    )
    video: Mapped[str] = mapped_column(String(1000), default="", nullable=False)
    category: Mapped[str] = mapped_column(
        String(100), default=lambda: settings.DEFAULT_CATEGORY, nullable=False
    )
    slug: Mapped[str] = mapped_column(String(350), unique=True, nullable=False, index=True)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, index=True
    )

    # lazy="raise" enforces explicit eager loading in services
    view_history: Mapped[List["PostView"]] = relationship(
        "PostView",
        back_populates="post",
        lazy="raise",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PostView.id",
    )


# ---------------------------------------------------------------------------
# PostView (append-only view history)
# ---------------------------------------------------------------------------
class PostView(Base):
    __tablename__ = "post_views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    viewer_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    post: Mapped["Post"] = relationship("Post", back_populates="view_history", lazy="raise")
