"""
SimpleBlog Backend — Application Package Initializer
=====================================================

What: Marks the `simpleblog` directory as a Python package.
Who:  Imported by uvicorn (`simpleblog.main:app`), Alembic, the CLI and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │      Routes (HTML request layer)    │  ← forms, redirects, views
    ├─────────────────────────────────────┤
    │   Services (PostService, uploads)   │  ← record building, orchestration
    ├─────────────────────────────────────┤
    │   PostStore (persistence adapter)   │  ← one async session per request
    ├─────────────────────────────────────┤
    │        Database (engine/session)    │  ← owned by the app lifespan
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
