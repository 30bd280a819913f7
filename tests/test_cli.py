"""Tests for rss_pages.cli module."""

import os
from unittest.mock import AsyncMock, patch

from rss_pages.cli import main
from rss_pages.core import CycleResult


class TestMain:
    @patch.dict(os.environ, {"FEEDS": "https://a.test/rss"}, clear=True)
    @patch("rss_pages.cli.IngestionCycle")
    def test_once_runs_single_cycle(self, mock_cycle, capsys) -> None:
        mock_cycle.return_value.run = AsyncMock(return_value=CycleResult(total_articles=3))
        assert main(["once"]) == 0
        mock_cycle.return_value.run.assert_awaited_once()
        settings = mock_cycle.call_args[0][0]
        assert settings.feeds == ("https://a.test/rss",)
        assert "0 new articles, 3 stored, 0 feeds failed" in capsys.readouterr().out

    @patch.dict(os.environ, {"PORT": "http"}, clear=True)
    def test_config_error_exit_code(self, capsys) -> None:
        assert main(["once"]) == 2
        assert "PORT" in capsys.readouterr().err
