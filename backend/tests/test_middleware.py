"""
SimpleBlog Backend — Middleware Tests
=======================================

What:  Method override, request ids and the store-failure error page.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from simpleblog.exceptions import StoreReadError
from simpleblog.middleware.request_id import REQUEST_ID_HEADER


class TestMethodOverride:

    @pytest.mark.asyncio
    async def test_unknown_override_is_ignored(self, test_client):
        # stays a POST, which /posts/{id} does not accept
        response = await test_client.post(f"/posts/{uuid.uuid4()}?_method=TRACE")
        assert response.status_code == 405

    @pytest.mark.asyncio
    async def test_override_only_applies_to_post(self, test_client):
        response = await test_client.get("/?_method=DELETE")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_lowercase_override(self, test_client):
        response = await test_client.post(f"/posts/{uuid.uuid4()}?_method=delete")
        assert response.status_code == 303


class TestRequestID:

    @pytest.mark.asyncio
    async def test_generated(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers[REQUEST_ID_HEADER]) == 8

    @pytest.mark.asyncio
    async def test_propagated(self, test_client):
        response = await test_client.get("/health", headers={REQUEST_ID_HEADER: "abc123"})
        assert response.headers[REQUEST_ID_HEADER] == "abc123"


class TestStoreFailurePage:

    @pytest.mark.asyncio
    async def test_store_error_renders_503(self, test_client):
        with patch(
            "simpleblog.services.post_store.PostStore.list_sorted_by_date_desc",
            AsyncMock(side_effect=StoreReadError(context={"operation": "list"})),
        ):
            response = await test_client.get("/", headers={REQUEST_ID_HEADER: "req42"})

        assert response.status_code == 503
        assert "temporarily unavailable" in response.text
        assert "req42" in response.text
