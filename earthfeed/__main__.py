"""Command-line entry point: fetch the latest EPIC Earth image once.

Usage::

    python -m earthfeed [--api-key KEY] [--log-level LEVEL] [--json-logs]

Prints the capture date and archive URL of the newest image.  Exits 1
when every attempt failed and 2 on invalid configuration.

This module is only wiring: configuration, logging, and a console
presenter around ``SessionController``.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import TYPE_CHECKING

from earthfeed import __version__
from earthfeed.acquisition.network import HttpxNetworkClient
from earthfeed.core.config import ConfigValidationError, FeedConfig
from earthfeed.core.log_config import configure_logging
from earthfeed.models.feed import Mode
from earthfeed.session.controller import SessionController

if TYPE_CHECKING:
    from collections.abc import Sequence

    from earthfeed.models.epic import EarthImage

logger = logging.getLogger("earthfeed.cli")


class ConsolePresenter:
    """Collects the outcome of one acquisition and signals completion."""

    def __init__(self, done: asyncio.Event) -> None:
        self._done = done
        self.image: EarthImage | None = None
        self.error: dict[str, object] | None = None

    def on_success(self, result: EarthImage) -> None:
        self.image = result
        self._done.set()

    def on_error(self, error: dict[str, object]) -> None:
        self.error = error
        self._done.set()

    def on_status_update(self, text: str) -> None:
        logger.info("status | %s", text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="earthfeed",
        description="Fetch the latest NASA EPIC image of Earth.",
    )
    parser.add_argument("--api-key", help="api.nasa.gov key (default: $EPIC_API_KEY or DEMO_KEY)")
    parser.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="emit logs as JSON lines")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def fetch_latest(config: FeedConfig, network: HttpxNetworkClient) -> ConsolePresenter:
    """Run one image acquisition through a fresh controller."""
    done = asyncio.Event()
    presenter = ConsolePresenter(done)
    controller = SessionController.build(config, presenter, network=network)
    controller.acquire(Mode.IMAGE)
    try:
        await done.wait()
    finally:
        controller.close()
    return presenter


async def _run(config: FeedConfig) -> int:
    async with HttpxNetworkClient() as network:
        presenter = await fetch_latest(config, network)

    if presenter.image is None:
        message = presenter.error.get("message") if presenter.error else "unknown error"
        print(f"error: {message}", file=sys.stderr)
        return 1

    image = presenter.image
    print(f"{image.display_date}  {image.image_url}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs)

    try:
        config = FeedConfig.from_env()
        if args.api_key:
            config = dataclasses.replace(config, api_key=args.api_key)
    except (ConfigValidationError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    return asyncio.run(_run(config))


if __name__ == "__main__":
    sys.exit(main())
