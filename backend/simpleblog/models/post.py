"""
SimpleBlog Backend — Post SQLAlchemy Model
============================================

What:  ORM model representing the `posts` table.
Who:   Used by PostStore for CRUD and by Alembic for schema management.

Table Design:
    - seq: auto-increment insertion sequence. Internal only; breaks ties
      between posts with the same published_date (earliest insert first).
    - id: UUID assigned on insert; the public, immutable identifier used
      in URLs.
    - published_date: supplied by the author, never auto-generated; the
      homepage sort key.
    - featured_image: path relative to the public root ("images/<file>"),
      or "" when the post has no image.

    Index on (published_date DESC, seq):
        Matches the homepage query ORDER BY published_date DESC, seq ASC
        LIMIT 20.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from simpleblog.database import Base


class Post(Base):
    """
    A blog post.

    Lifecycle:
        1. Created by POST /posts (or bulk-inserted by the seed loader)
        2. Fully replaced (all fields except id) by PUT /posts/{id}
        3. Hard-deleted by DELETE /posts/{id}; no soft delete, no history
    """

    __tablename__ = "posts"

    seq: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Insertion order; tie-break for equal published_date",
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        unique=True,
        nullable=False,
        default=uuid.uuid4,
        comment="Public identifier, assigned on insert and never reassigned",
    )

    headline: Mapped[str] = mapped_column(Text, nullable=False, default="")

    author: Mapped[str] = mapped_column(Text, nullable=False, default="")

    published_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Author-supplied publication timestamp (UTC)",
    )

    featured_image: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        default="",
        comment="Path relative to the public root, or empty string",
    )

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        Index("idx_posts_published_date", published_date.desc(), seq),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, headline='{self.headline}', "
            f"published_date='{self.published_date}')>"
        )
