"""Command-line entry point for the weekly inbox digest."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from dotenv import find_dotenv, load_dotenv

from .config import Settings
from .errors import AuthError, ConfigError, FetchError
from .pipeline import DigestPipeline

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarise unread Outlook mail with Azure OpenAI and send a digest."
    )
    parser.add_argument("--max-messages", type=positive_int, help="Limit how many unread messages to classify")
    parser.add_argument(
        "--mark-read",
        action="store_true",
        default=None,
        help="Mark summarised messages as read (best effort)",
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL for this run")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))

    try:
        settings = Settings.load()
    except ConfigError as exc:
        configure_logging(args.log_level or "INFO")
        logger.error("%s", exc)
        return EXIT_CONFIG
    configure_logging(args.log_level or settings.log_level)

    pipeline = DigestPipeline(settings)
    try:
        pipeline.run(max_messages=args.max_messages, mark_read=args.mark_read)
    except (AuthError, FetchError) as exc:
        logger.error("Run aborted: %s", exc)
        return EXIT_FAILED
    except Exception:
        logger.exception("Run failed unexpectedly")
        return EXIT_FAILED
    return EXIT_OK


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
