"""
SimpleBlog Backend — Development Seed Route
=============================================

GET /seeds bulk-inserts the demo posts from services/seed.py.

Only registered by create_app() when SEED_ROUTE_ENABLED is true. Never
expose it on a public deployment; `python -m simpleblog seed` does the
same from the command line.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from simpleblog.dependencies import get_post_store
from simpleblog.services.post_store import PostStore
from simpleblog.services.seed import seed_posts

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Development"], include_in_schema=False)


@router.get("/seeds", response_class=PlainTextResponse)
async def seed(store: PostStore = Depends(get_post_store)) -> str:
    count = await seed_posts(store)
    logger.warning("Seed route inserted %d demo posts", count)
    return f"Inserted {count} posts"
