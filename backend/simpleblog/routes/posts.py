"""
SimpleBlog Backend — Post Route Handlers
==========================================

What:  The HTML surface of the blog.

    GET    /                   homepage (latest posts, status banner)
    GET    /posts/new          creation form
    GET    /posts/{id}         detail view (status banner)
    POST   /posts              create       → 303 /?success=true&action=create
    GET    /posts/{id}/edit    edit form
    PUT    /posts/{id}         update       → 303 /posts/{id}?success=true&action=update
    DELETE /posts/{id}         delete       → 303 /?success=true&action=delete

How:   Handlers stay thin. PostService does the work; missing posts and
       store failures propagate to the global exception handlers, which
       render the not-found and error pages. Rejected form input is the one
       case handled here: the form is re-rendered with the message and the
       submitted values.

HTML forms reach PUT and DELETE through MethodOverrideMiddleware
(`POST /posts/{id}?_method=PUT`).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.requests import Request

from simpleblog.dependencies import get_post_service, get_templates
from simpleblog.exceptions import ValidationError
from simpleblog.schemas.post import PostForm
from simpleblog.services.post_service import PostService
from simpleblog.services.post_store import WriteOutcome, parse_post_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])


def redirect_with_status(url: str, action: str) -> RedirectResponse:
    """303 so the browser follows with GET after a POST/PUT/DELETE."""
    return RedirectResponse(url=f"{url}?success=true&action={action}", status_code=303)


def post_form(
    headline: str = Form(""),
    author: str = Form(""),
    published_date: str = Form("", alias="publishedDate"),
    content: str = Form(""),
) -> PostForm:
    return PostForm(
        headline=headline,
        author=author,
        published_date=published_date,
        content=content,
    )


@router.get("/", response_class=HTMLResponse, summary="Homepage")
async def homepage(
    request: Request,
    success: Optional[str] = Query(default=None),
    action: Optional[str] = Query(default=None),
    service: PostService = Depends(get_post_service),
    templates: Jinja2Templates = Depends(get_templates),
):
    context = await service.homepage(success=success, action=action)
    return templates.TemplateResponse(request, "homepage.html", dict(context))


@router.get("/posts/new", response_class=HTMLResponse, summary="New post form")
async def new_post_form(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
):
    return templates.TemplateResponse(
        request, "posts/new.html", {"form": PostForm(), "error": None}
    )


@router.get("/posts/{post_id}", response_class=HTMLResponse, summary="Show a post")
async def show_post(
    request: Request,
    post_id: str,
    success: Optional[str] = Query(default=None),
    action: Optional[str] = Query(default=None),
    service: PostService = Depends(get_post_service),
    templates: Jinja2Templates = Depends(get_templates),
):
    post = await service.get_post(post_id)
    return templates.TemplateResponse(
        request,
        "posts/show.html",
        {"post": post, "success": success, "action": action},
    )


@router.post("/posts", response_class=HTMLResponse, summary="Create a post")
async def create_post(
    request: Request,
    form: PostForm = Depends(post_form),
    featured_image: Optional[UploadFile] = File(default=None, alias="featuredImage"),
    service: PostService = Depends(get_post_service),
    templates: Jinja2Templates = Depends(get_templates),
):
    try:
        post = await service.create_post(form, featured_image)
    except ValidationError as e:
        logger.info("Rejected new post: %s", e.message)
        return templates.TemplateResponse(
            request,
            "posts/new.html",
            {"form": form, "error": e.message},
            status_code=400,
        )
    logger.info("Created post %s", post.id)
    return redirect_with_status("/", "create")


@router.get("/posts/{post_id}/edit", response_class=HTMLResponse, summary="Edit form")
async def edit_post_form(
    request: Request,
    post_id: str,
    service: PostService = Depends(get_post_service),
    templates: Jinja2Templates = Depends(get_templates),
):
    post = await service.get_post(post_id)
    return templates.TemplateResponse(
        request, "posts/edit.html", {"post": post, "form": None, "error": None}
    )


@router.put("/posts/{post_id}", response_class=HTMLResponse, summary="Update a post")
async def update_post(
    request: Request,
    post_id: str,
    form: PostForm = Depends(post_form),
    featured_image: Optional[UploadFile] = File(default=None, alias="featuredImage"),
    service: PostService = Depends(get_post_service),
    templates: Jinja2Templates = Depends(get_templates),
):
    pid = parse_post_id(post_id)
    try:
        outcome = await service.update_post(pid, form, featured_image)
    except ValidationError as e:
        logger.info("Rejected update of post %s: %s", pid, e.message)
        return templates.TemplateResponse(
            request,
            "posts/edit.html",
            {"post": {"id": pid}, "form": form, "error": e.message},
            status_code=400,
        )
    if outcome is WriteOutcome.NOT_FOUND_NOOP:
        logger.warning("Update requested for missing post %s", pid)
    return redirect_with_status(f"/posts/{pid}", "update")


@router.delete("/posts/{post_id}", summary="Delete a post")
async def delete_post(
    post_id: str,
    service: PostService = Depends(get_post_service),
):
    outcome = await service.delete_post(post_id)
    if outcome is WriteOutcome.NOT_FOUND_NOOP:
        logger.warning("Delete requested for missing post %s", post_id)
    return redirect_with_status("/", "delete")
