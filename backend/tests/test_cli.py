"""
SimpleBlog Backend — Command Line Tests
"""

import asyncio
import sys
from unittest.mock import patch

import pytest

from simpleblog import __main__ as cli
from simpleblog.database import create_engine, create_session_factory, dispose_engine
from simpleblog.services.post_store import PostStore


class TestServe:

    def test_serve_uses_settings(self):
        with patch.object(sys, "argv", ["simpleblog", "serve", "--port", "8080"]), \
             patch("simpleblog.__main__.uvicorn.run") as mock_run:
            cli.main()

        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args == ("simpleblog.main:app",)
        assert kwargs["port"] == 8080
        assert kwargs["host"] == cli.settings.backend_host

    def test_command_required(self):
        with patch.object(sys, "argv", ["simpleblog"]):
            with pytest.raises(SystemExit):
                cli.main()


class TestSeedAndInit:

    def test_init_db_then_seed(self, test_settings):
        with patch.object(cli, "settings", test_settings):
            with patch.object(sys, "argv", ["simpleblog", "init-db"]):
                cli.main()
            with patch.object(sys, "argv", ["simpleblog", "seed"]):
                cli.main()

        assert _count_posts(test_settings) == 6


def _count_posts(settings) -> int:
    async def count():
        engine = create_engine(settings)
        try:
            async with create_session_factory(engine)() as session:
                return len(await PostStore(session).list_sorted_by_date_desc(20))
        finally:
            await dispose_engine(engine)

    return asyncio.run(count())
