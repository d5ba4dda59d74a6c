"""Command-line interface for the feedwall application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pprint
from pathlib import Path
from typing import List, Optional

from .config import AppConfig, parse_app_config
from .models import AggregationStatus
from .runner import OUTPUT_FORMATS, RunConfig, execute

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Aggregate the configured feeds and render them."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional path to a configuration XML file. Built-in feeds are used otherwise.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="json",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write the rendered output to PATH instead of stdout.",
    )
    parser.add_argument(
        "--select",
        metavar="FEED:ENTRY",
        help="Open the entry at the given zero-based position in the modal.",
    )
    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Send feedwall logs to stderr and, when given, to ``log_file``."""
    log_level = logging.getLevelName(level_name.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
    logger.debug(
        "Logging at %s to %s",
        level_name.upper(),
        log_file or "console only",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config) if args.config else AppConfig()

        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file
        configure_logging(log_level, log_file)

        config = RunConfig(
            sources=app_config.sources,
            limit=app_config.limit,
            concurrency=app_config.concurrency,
            timeout=app_config.timeout,
            endpoint=app_config.endpoint,
            callback=app_config.callback,
            order=app_config.order,
            output_format=args.format,
            output_path=args.output,
            select_entry=args.select,
        )
        logger.info(
            "Active Configuration:\n%s", pprint.pformat(dataclasses.asdict(config))
        )

        result = execute(config)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    if not args.output:
        print(result.output_text)
    return 0 if result.status is AggregationStatus.COMPLETE else 1
