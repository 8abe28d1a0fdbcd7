"""
SimpleBlog Backend — Post Service Unit Tests
===============================================

What:  PostService orchestration with a mocked PostStore and a real
       UploadService on a temporary public root.

What we test:
    ✅ Form validation messages and field names
    ✅ Rejected forms write no upload
    ✅ Upload path is recorded on the post; absent upload → ""
    ✅ A failed store write removes the upload it just wrote
    ✅ Update without a new upload clears featured_image
    ✅ Homepage splits the most recent post from the rest
"""

import io
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import UploadFile

from simpleblog.exceptions import InvalidIdentifier, StoreWriteError, ValidationError
from simpleblog.schemas.post import PostForm
from simpleblog.services.post_service import PostService, build_record
from simpleblog.services.post_store import WriteOutcome


def make_form(**fields) -> PostForm:
    values = {
        "headline": "hot day today",
        "author": "Jason",
        "published_date": "2021-08-14T06:02",
        "content": "Rainy weather, so nice",
    }
    values.update(fields)
    return PostForm(**values)


def make_upload(data: bytes, filename: str = "beach.jpg") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename, size=len(data))


@pytest.fixture
def mock_store():
    store = MagicMock()
    store.create = AsyncMock(side_effect=lambda record: MagicMock(id=uuid.uuid4(), **record.model_dump()))
    store.update_by_id = AsyncMock(return_value=WriteOutcome.APPLIED)
    store.delete_by_id = AsyncMock(return_value=WriteOutcome.APPLIED)
    store.list_sorted_by_date_desc = AsyncMock(return_value=[])
    store.get_by_id = AsyncMock()
    return store


@pytest.fixture
def service(mock_store, upload_service):
    return PostService(store=mock_store, uploads=upload_service, list_limit=20)


class TestBuildRecord:

    def test_date_only_is_midnight_utc(self):
        record = build_record(make_form(published_date="2021-08-14"))
        assert record.published_date == datetime(2021, 8, 14, tzinfo=timezone.utc)

    def test_zulu_timestamp(self):
        record = build_record(make_form(published_date="2021-08-14T06:02:52.570Z"))
        assert record.published_date == datetime(2021, 8, 14, 6, 2, 52, 570000, tzinfo=timezone.utc)

    def test_unparseable_date(self):
        with pytest.raises(ValidationError, match="not a valid date") as exc_info:
            build_record(make_form(published_date="yesterday"))
        assert exc_info.value.field == "publishedDate"

    def test_missing_date(self):
        with pytest.raises(ValidationError, match="Published date is required"):
            build_record(make_form(published_date=""))

    def test_blank_headline_accepted(self):
        record = build_record(make_form(headline="   "))
        assert record.headline == ""

    def test_long_headline_and_author_accepted(self):
        record = build_record(make_form(headline="h" * 300, author="a" * 300))
        assert len(record.headline) == 300
        assert len(record.author) == 300

    def test_empty_author_and_content_allowed(self):
        record = build_record(make_form(author="", content=""))
        assert record.author == ""
        assert record.content == ""


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_create_with_upload_records_path(self, service, mock_store, sample_image_bytes):
        post = await service.create_post(make_form(), make_upload(sample_image_bytes))

        record = mock_store.create.await_args.args[0]
        assert record.featured_image.startswith("images/")
        assert record.featured_image.endswith("_beach.jpg")
        assert post.featured_image == record.featured_image

    @pytest.mark.asyncio
    async def test_create_without_upload(self, service, mock_store):
        await service.create_post(make_form(), None)

        record = mock_store.create.await_args.args[0]
        assert record.featured_image == ""

    @pytest.mark.asyncio
    async def test_invalid_form_writes_nothing(self, service, mock_store, upload_service, sample_image_bytes):
        with pytest.raises(ValidationError):
            await service.create_post(
                make_form(published_date="14/08/2021"), make_upload(sample_image_bytes)
            )

        mock_store.create.assert_not_awaited()
        assert list(upload_service.images_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_store_failure_removes_upload(self, service, mock_store, upload_service, sample_image_bytes):
        mock_store.create = AsyncMock(side_effect=StoreWriteError())

        with pytest.raises(StoreWriteError):
            await service.create_post(make_form(), make_upload(sample_image_bytes))

        assert list(upload_service.images_root.iterdir()) == []


class TestUpdatePost:

    @pytest.mark.asyncio
    async def test_update_without_upload_clears_image(self, service, mock_store):
        pid = uuid.uuid4()

        outcome = await service.update_post(str(pid), make_form(headline="cold day"), None)

        assert outcome is WriteOutcome.APPLIED
        called_id, record = mock_store.update_by_id.await_args.args
        assert called_id == pid
        assert record.headline == "cold day"
        assert record.featured_image == ""

    @pytest.mark.asyncio
    async def test_update_missing_post_discards_new_upload(
        self, service, mock_store, upload_service, sample_image_bytes
    ):
        mock_store.update_by_id = AsyncMock(return_value=WriteOutcome.NOT_FOUND_NOOP)

        outcome = await service.update_post(
            uuid.uuid4(), make_form(), make_upload(sample_image_bytes)
        )

        assert outcome is WriteOutcome.NOT_FOUND_NOOP
        assert list(upload_service.images_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_update_malformed_id_checked_first(self, service, mock_store):
        with pytest.raises(InvalidIdentifier):
            await service.update_post("nope", make_form(published_date="bad"), None)
        mock_store.update_by_id.assert_not_awaited()


class TestHomepage:

    @pytest.mark.asyncio
    async def test_empty(self, service):
        context = await service.homepage()
        assert context.most_recent_post is None
        assert context.next_recent_posts == []

    @pytest.mark.asyncio
    async def test_splits_most_recent(self, service, mock_store):
        posts = [MagicMock(headline=h) for h in ("a", "b", "c")]
        mock_store.list_sorted_by_date_desc = AsyncMock(return_value=posts)

        context = await service.homepage(success="true", action="create")

        mock_store.list_sorted_by_date_desc.assert_awaited_once_with(20)
        assert context.most_recent_post is posts[0]
        assert context.next_recent_posts == posts[1:]
        assert context.action == "create"
