"""
SimpleBlog Backend — Request Dependencies
===========================================

What:  FastAPI dependency providers wiring per-request collaborators.
How:   Everything long-lived (session factory, UploadService, templates,
       settings) lives on `app.state`, created by create_app(). Handlers
       receive explicit instances instead of module-level globals.
"""

from fastapi import Depends
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from simpleblog.config import Settings
from simpleblog.database import get_db_session
from simpleblog.services.post_service import PostService
from simpleblog.services.post_store import PostStore
from simpleblog.services.upload_service import UploadService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_post_store(db: AsyncSession = Depends(get_db_session)) -> PostStore:
    return PostStore(db)


def get_post_service(
    store: PostStore = Depends(get_post_store),
    uploads: UploadService = Depends(get_upload_service),
    settings: Settings = Depends(get_settings),
) -> PostService:
    return PostService(store=store, uploads=uploads, list_limit=settings.list_limit)
