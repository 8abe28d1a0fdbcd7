"""
SimpleBlog Backend — Post Store Adapter
=========================================

What:  The only component that talks to the `posts` table.
How:   Wraps one AsyncSession (one per request, injected by FastAPI). Each
       write commits on success and rolls back on failure, so a call either
       fully applies or leaves the table untouched.
Who:   PostService, the seed loader, the /seeds route, tests.

Operation contract:
    create_many(records)           → int inserted          | StoreWriteError
    create(record)                 → Post (with id)        | StoreWriteError
    list_sorted_by_date_desc(n)    → [Post] (≤ n)          | StoreReadError
    get_by_id(id)                  → Post                  | PostNotFound, InvalidIdentifier, StoreReadError
    update_by_id(id, record)       → WriteOutcome          | InvalidIdentifier, StoreWriteError
    delete_by_id(id)               → WriteOutcome          | InvalidIdentifier, StoreWriteError

Ordering:
    ORDER BY published_date DESC, seq ASC. Posts sharing a published_date
    come out in insertion order.

Concurrency:
    No optimistic-concurrency check. Two concurrent updates of the same post
    are last-writer-wins.
"""

import enum
import logging
import uuid
from typing import Iterable, List, Union

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from simpleblog.exceptions import (
    InvalidIdentifier,
    PostNotFound,
    StoreReadError,
    StoreWriteError,
)
from simpleblog.models.post import Post
from simpleblog.schemas.post import PostRecord

logger = logging.getLogger(__name__)


class WriteOutcome(str, enum.Enum):
    """Result of update_by_id / delete_by_id."""

    APPLIED = "applied"
    NOT_FOUND_NOOP = "not_found_noop"


def parse_post_id(raw_id: Union[str, uuid.UUID]) -> uuid.UUID:
    """Parse a URL id into a UUID, raising InvalidIdentifier when malformed."""
    if isinstance(raw_id, uuid.UUID):
        return raw_id
    try:
        return uuid.UUID(str(raw_id).strip())
    except (ValueError, AttributeError, TypeError):
        raise InvalidIdentifier(str(raw_id)) from None


class PostStore:
    """Async CRUD adapter over the posts table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_many(self, records: Iterable[PostRecord]) -> int:
        """Bulk-insert records in the given order. Used for seeding only."""
        posts = [Post(**record.model_dump()) for record in records]
        if not posts:
            return 0
        try:
            self.session.add_all(posts)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Bulk insert of %d posts failed: %s", len(posts), str(e))
            raise StoreWriteError(context={"operation": "create_many", "count": len(posts)}) from e
        logger.info("Inserted %d posts", len(posts))
        return len(posts)

    async def create(self, record: PostRecord) -> Post:
        post = Post(**record.model_dump())
        try:
            self.session.add(post)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Insert of post '%s' failed: %s", record.headline, str(e))
            raise StoreWriteError(context={"operation": "create"}) from e
        logger.info("Post created: %s", post.id)
        return post

    async def update_by_id(
        self, post_id: Union[str, uuid.UUID], record: PostRecord
    ) -> WriteOutcome:
        """
        Replace every field except id.

        A missing id is not an error: the statement matches nothing and the
        call returns NOT_FOUND_NOOP.
        """
        pid = parse_post_id(post_id)
        try:
            result = await self.session.execute(
                update(Post).where(Post.id == pid).values(**record.model_dump())
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Update of post %s failed: %s", pid, str(e))
            raise StoreWriteError(context={"operation": "update", "post_id": str(pid)}) from e

        if result.rowcount == 0:
            logger.info("Update of post %s matched nothing (no-op)", pid)
            return WriteOutcome.NOT_FOUND_NOOP
        logger.info("Post updated: %s", pid)
        return WriteOutcome.APPLIED

    async def delete_by_id(self, post_id: Union[str, uuid.UUID]) -> WriteOutcome:
        pid = parse_post_id(post_id)
        try:
            result = await self.session.execute(delete(Post).where(Post.id == pid))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Delete of post %s failed: %s", pid, str(e))
            raise StoreWriteError(context={"operation": "delete", "post_id": str(pid)}) from e

        if result.rowcount == 0:
            logger.info("Delete of post %s matched nothing (no-op)", pid)
            return WriteOutcome.NOT_FOUND_NOOP
        logger.info("Post deleted: %s", pid)
        return WriteOutcome.APPLIED

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_sorted_by_date_desc(self, limit: int) -> List[Post]:
        """Up to `limit` posts, newest published_date first."""
        try:
            result = await self.session.execute(
                select(Post)
                .order_by(Post.published_date.desc(), Post.seq.asc())
                .limit(limit)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Listing posts failed: %s", str(e))
            raise StoreReadError(context={"operation": "list", "limit": limit}) from e

    async def get_by_id(self, post_id: Union[str, uuid.UUID]) -> Post:
        pid = parse_post_id(post_id)
        try:
            result = await self.session.execute(select(Post).where(Post.id == pid))
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Fetching post %s failed: %s", pid, str(e))
            raise StoreReadError(context={"operation": "get", "post_id": str(pid)}) from e

        if post is None:
            raise PostNotFound(str(pid))
        return post
