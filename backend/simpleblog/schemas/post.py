"""
SimpleBlog Backend — Pydantic Schemas
=======================================

What:  Validated shapes that cross layer boundaries.
         PostRecord      — a complete post minus its id (create/update/seed)
         HomepageContext — the data the homepage view renders
         HealthResponse  — GET /health payload
How:   PostService builds a PostRecord from submitted form fields; pydantic
       errors are translated into the application's ValidationError there.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_published_date(value: Any) -> datetime:
    """
    Coerce a submitted publishedDate into an aware UTC datetime.

    Accepts ISO 8601 strings as produced by <input type="date"> and
    <input type="datetime-local"> ("2021-08-14", "2021-08-14T06:02"), full
    timestamps with offsets or a trailing "Z", and datetime objects. Naive
    values are taken as UTC. Anything else raises ValueError.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("Published date is required")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            raise ValueError(
                f"'{raw}' is not a valid date. Use the format YYYY-MM-DD or YYYY-MM-DDTHH:MM."
            ) from None
    else:
        raise ValueError("Published date is required")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class PostRecord(BaseModel):
    """Every field of a post except its store-assigned id."""

    model_config = ConfigDict(str_strip_whitespace=True)

    headline: str = ""
    author: str = ""
    published_date: datetime
    featured_image: str = Field(default="", max_length=512)
    content: str = ""

    @field_validator("published_date", mode="before")
    @classmethod
    def validate_published_date(cls, v: Any) -> datetime:
        return parse_published_date(v)


class HomepageContext(BaseModel):
    """Most recent post highlighted, the rest listed below it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    most_recent_post: Optional[Any] = None
    next_recent_posts: List[Any] = Field(default_factory=list)
    success: Optional[str] = None
    action: Optional[str] = None


class HealthResponse(BaseModel):
    """GET /health payload."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class PostForm(BaseModel):
    """
    Raw fields of the create/edit form, exactly as submitted.

    Kept as strings so a rejected submission can be re-rendered with the
    author's input intact.
    """

    model_config = ConfigDict(populate_by_name=True)

    headline: str = ""
    author: str = ""
    published_date: str = Field(default="", alias="publishedDate")
    content: str = ""
