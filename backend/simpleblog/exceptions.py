"""
SimpleBlog Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the blog's failure modes.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) render them
       as HTML pages with the matching HTTP status code.
Who:   Raised by PostStore, UploadService and PostService.

Exception Hierarchy:
    SimpleBlogError (base)
    ├── ValidationError          → 400 Bad Request (form input, uploads)
    │   └── InvalidIdentifier    → 404 Not Found page (malformed post id)
    ├── NotFoundError            → 404 Not Found
    │   └── PostNotFound
    ├── StoreError               → 503 Service Unavailable
    │   ├── StoreReadError
    │   └── StoreWriteError
    └── UploadError              → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class SimpleBlogError(Exception):
    """
    Base exception for all SimpleBlog application errors.

    Attributes:
        message:  User-facing error description (safe to render)
        context:  Additional debug info (logged, never rendered)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SimpleBlogError):
    """
    Raised when client input fails validation.

    When:    Unparseable publishedDate, unsupported upload
             type, oversized upload.
    HTTP:    400 Bad Request (create/update re-render the form instead)
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidIdentifier(ValidationError):
    """Raised when a post id in the URL is not a well-formed identifier."""

    def __init__(self, raw_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["raw_id"] = raw_id
        super().__init__(
            message=f"'{raw_id}' is not a valid post identifier",
            field="id",
            context=ctx,
        )
        self.raw_id = raw_id


class NotFoundError(SimpleBlogError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found

    The store returns None for missing rows; services convert that into
    this exception so handlers never render a view around a None.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class PostNotFound(NotFoundError):
    """No post matches the requested id."""

    def __init__(self, post_id: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(resource="post", resource_id=post_id, context=context)


class StoreError(SimpleBlogError):
    """
    Raised when the post store cannot be reached or a statement fails.

    HTTP:    503 Service Unavailable

    The rendered message is always generic. Driver details (SQL, host
    names) go to the server log only.
    """

    def __init__(
        self,
        message: str = "The post store is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreReadError(StoreError):
    """A read (list, get) against the post store failed."""


class StoreWriteError(StoreError):
    """A write (create, update, delete) against the post store failed."""


class UploadError(SimpleBlogError):
    """
    Raised when an uploaded file cannot be written to disk.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Failed to save the uploaded image. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
