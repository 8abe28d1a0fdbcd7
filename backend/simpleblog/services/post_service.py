"""
SimpleBlog Backend — Post Service (Request Orchestration)
===========================================================

What:  Turns submitted forms into post records and drives the store and the
       upload service for every route.
How:   Receives a PostStore (bound to the request's session) and the app's
       UploadService through FastAPI dependencies; holds no state of its own.
Who:   Called by the route handlers in routes/posts.py.

Create / update flow:
    ┌───────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ PostForm  │───▶│ PostRecord   │───▶│ UploadService│───▶│ PostStore│
    │ (strings) │    │ (validated)  │    │ (optional)   │    │ (commit) │
    └───────────┘    └──────────────┘    └──────────────┘    └──────────┘

    Validation runs before the upload is written, so a rejected form leaves
    nothing on disk. If the store write fails after the upload was written,
    the file is removed again.
"""

import logging
import uuid
from typing import Optional, Union

import pydantic
from fastapi import UploadFile

from simpleblog.exceptions import StoreError, ValidationError
from simpleblog.models.post import Post
from simpleblog.schemas.post import HomepageContext, PostForm, PostRecord
from simpleblog.services.post_store import PostStore, WriteOutcome, parse_post_id
from simpleblog.services.upload_service import UploadService

logger = logging.getLogger(__name__)

# Form field names as submitted by the templates, keyed by record field.
FORM_FIELD_NAMES = {"published_date": "publishedDate", "featured_image": "featuredImage"}


def build_record(form: PostForm, featured_image: str = "") -> PostRecord:
    """
    Validate a submitted form into a PostRecord.

    Raises:
        ValidationError: naming the first offending form field
    """
    try:
        return PostRecord(
            headline=form.headline,
            author=form.author,
            published_date=form.published_date,
            featured_image=featured_image,
            content=form.content,
        )
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else None
        error = first.get("ctx", {}).get("error")
        message = str(error) if error else first["msg"]
        raise ValidationError(
            message=message,
            field=FORM_FIELD_NAMES.get(field, field),
            context={"errors": len(e.errors())},
        ) from None


class PostService:
    """Per-request orchestration over PostStore and UploadService."""

    def __init__(self, store: PostStore, uploads: UploadService, list_limit: int = 20):
        self.store = store
        self.uploads = uploads
        self.list_limit = list_limit

    async def homepage(
        self, success: Optional[str] = None, action: Optional[str] = None
    ) -> HomepageContext:
        """Latest posts split into the highlighted one and the rest."""
        posts = await self.store.list_sorted_by_date_desc(self.list_limit)
        return HomepageContext(
            most_recent_post=posts[0] if posts else None,
            next_recent_posts=posts[1:],
            success=success,
            action=action,
        )

    async def get_post(self, post_id: Union[str, uuid.UUID]) -> Post:
        return await self.store.get_by_id(post_id)

    async def create_post(self, form: PostForm, upload: Optional[UploadFile] = None) -> Post:
        record = build_record(form)
        image_path = await self.uploads.store_upload(upload)
        record = record.model_copy(update={"featured_image": image_path})
        try:
            return await self.store.create(record)
        except StoreError:
            await self.uploads.remove(image_path)
            raise

    async def update_post(
        self,
        post_id: Union[str, uuid.UUID],
        form: PostForm,
        upload: Optional[UploadFile] = None,
    ) -> WriteOutcome:
        """
        Replace every field of the post except its id.

        featured_image is replaced too: without a new upload it becomes "".
        The previous image file stays on disk.
        """
        pid = parse_post_id(post_id)
        record = build_record(form)
        image_path = await self.uploads.store_upload(upload)
        record = record.model_copy(update={"featured_image": image_path})
        try:
            outcome = await self.store.update_by_id(pid, record)
        except StoreError:
            await self.uploads.remove(image_path)
            raise
        if outcome is WriteOutcome.NOT_FOUND_NOOP:
            await self.uploads.remove(image_path)
        return outcome

    async def delete_post(self, post_id: Union[str, uuid.UUID]) -> WriteOutcome:
        return await self.store.delete_by_id(post_id)
