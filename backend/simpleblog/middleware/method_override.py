"""
SimpleBlog Backend — Method Override Middleware
=================================================

What:  Lets HTML forms issue PUT and DELETE.
How:   A POST carrying `?_method=put` or `?_method=delete` (any case) has its
       scope method rewritten before routing:

           POST /posts/<id>?_method=PUT     →  PUT /posts/<id>
           POST /posts/<id>?_method=DELETE  →  DELETE /posts/<id>

       Only POST requests are rewritten, and only to the allowed verbs.
       Everything else passes through untouched.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

OVERRIDE_PARAM = "_method"
ALLOWED_OVERRIDES = {"PUT", "PATCH", "DELETE"}


class MethodOverrideMiddleware(BaseHTTPMiddleware):
    """Rewrites POST + `_method` query flag into the logical HTTP verb."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "POST":
            override = request.query_params.get(OVERRIDE_PARAM, "").upper()
            if override in ALLOWED_OVERRIDES:
                # The scope dict is shared with the downstream app, so the
                # router sees the rewritten method.
                request.scope["method"] = override
                logger.debug("Method override: POST → %s %s", override, request.url.path)
        return await call_next(request)
