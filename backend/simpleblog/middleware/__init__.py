# Middleware package init
"""
SimpleBlog Backend — Middleware Package
========================================

What:  Boundary concerns applied to every request before routing.

Middleware Chain (outermost first):
    Request → [Request ID] → [Method Override] → [Access Log] → [GZip]
            → [Session] → Router

    - Request ID tags the request so every log line can be correlated.
    - Method Override rewrites POST ?_method=put|delete into PUT/DELETE;
      handlers only ever see the logical verb.
    - Access Log records method, path, status and duration after the
      override, so the logged method is the one that was routed.
"""
