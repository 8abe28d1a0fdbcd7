"""
SimpleBlog Backend — Development Seed Fixtures
================================================

What:  Six fixed demo posts dated 2021-08-09 .. 2021-08-14 and the loader
       that bulk-inserts them.
Who:   `python -m simpleblog seed`, the opt-in GET /seeds route, tests.

Two fixtures share 2021-08-14T06:02:52.570Z. "hot day today" is inserted
first, so it is the homepage's most recent post.
"""

from datetime import datetime, timezone
from typing import List

from simpleblog.schemas.post import PostRecord
from simpleblog.services.post_store import PostStore

SEED_POSTS = [
    ("great day today", "2021-08-12T06:02:52.570Z", "Sunny weather, so nice"),
    ("super day today", "2021-08-11T06:02:52.570Z", "Rainy weather, so nice"),
    ("hot day today", "2021-08-14T06:02:52.570Z", "Rainy weather, so nice"),
    ("warm day today", "2021-08-10T06:02:52.570Z", "Rainy weather, so nice"),
    ("snowy day today", "2021-08-09T06:02:52.570Z", "Rainy weather, so nice"),
    ("dry day today", "2021-08-14T06:02:52.570Z", "Rainy weather, so nice"),
]


def seed_records() -> List[PostRecord]:
    return [
        PostRecord(
            headline=headline,
            author="Jason",
            published_date=datetime.fromisoformat(published).astimezone(timezone.utc),
            featured_image="",
            content=content,
        )
        for headline, published, content in SEED_POSTS
    ]


async def seed_posts(store: PostStore) -> int:
    """Insert the demo posts. Not idempotent: every call adds six more."""
    return await store.create_many(seed_records())
