"""CLI entry point: `rss-pages once` or `rss-pages run`."""

import argparse
import asyncio
import logging
import signal
import sys

from rss_pages.config import Settings
from rss_pages.core import IngestionCycle
from rss_pages.exceptions import ConfigError
from rss_pages.scheduler import Scheduler

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run_once(settings: Settings) -> int:
    result = await IngestionCycle(settings).run()
    print(
        f"{len(result.new_articles)} new articles, {result.total_articles} stored, "
        f"{len(result.failed_feeds)} feeds failed"
    )
    return 0


async def run_forever(settings: Settings) -> int:
    cycle = IngestionCycle(settings)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # pragma: no cover - Windows
            pass

    async with Scheduler(cycle.run, settings.schedule_minutes * 60):
        await stop.wait()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="rss-pages")
    parser.add_argument("command", nargs="?", default="run", choices=["run", "once"])
    parser.add_argument("--log-level", default=None, help="overrides LOG_LEVEL")
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging((args.log_level or settings.log_level).upper())
    logger.info("Using %d feeds, data in %s", len(settings.feeds), settings.data_dir)

    runner = run_once if args.command == "once" else run_forever
    try:
        return asyncio.run(runner(settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
