"""
SimpleBlog command line.

    python -m simpleblog serve     run the web server (uvicorn)
    python -m simpleblog seed      insert the six demo posts
    python -m simpleblog init-db   create tables directly (sqlite / local dev)

Server databases are migrated with `alembic upgrade head` instead of
init-db.
"""

import argparse
import asyncio
import logging

import uvicorn

from simpleblog.config import settings
from simpleblog.database import create_engine, create_session_factory, create_tables, dispose_engine
from simpleblog.main import setup_logging
from simpleblog.services.post_store import PostStore
from simpleblog.services.seed import seed_posts

logger = logging.getLogger("simpleblog.cli")


async def run_seed() -> int:
    engine = create_engine(settings)
    try:
        async with create_session_factory(engine)() as session:
            return await seed_posts(PostStore(session))
    finally:
        await dispose_engine(engine)


async def run_init_db() -> None:
    engine = create_engine(settings)
    try:
        await create_tables(engine)
    finally:
        await dispose_engine(engine)


def handle_serve(args: argparse.Namespace) -> None:
    # uvicorn owns SIGINT/SIGTERM: it stops accepting connections, lets
    # in-flight requests finish, then runs the app's lifespan shutdown.
    uvicorn.run(
        "simpleblog.main:app",
        host=args.host or settings.backend_host,
        port=args.port or settings.backend_port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


def handle_seed(args: argparse.Namespace) -> None:
    count = asyncio.run(run_seed())
    logger.info("Inserted %d demo posts", count)


def handle_init_db(args: argparse.Namespace) -> None:
    asyncio.run(run_init_db())
    logger.info("Tables created")


def main() -> None:
    parser = argparse.ArgumentParser(prog="simpleblog", description="SimpleBlog CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the web server")
    serve_parser.add_argument("--host", default=None, help="Bind address (BACKEND_HOST)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (BACKEND_PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve_parser.set_defaults(handler=handle_serve)

    seed_parser = subparsers.add_parser("seed", help="Insert the demo posts (development only)")
    seed_parser.set_defaults(handler=handle_seed)

    init_parser = subparsers.add_parser("init-db", help="Create tables without Alembic")
    init_parser.set_defaults(handler=handle_init_db)

    args = parser.parse_args()
    setup_logging(settings.log_level)
    args.handler(args)


if __name__ == "__main__":
    main()
