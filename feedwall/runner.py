"""High-level orchestration for the feedwall application."""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .aggregator import ORDER_COMPLETION, FeedAggregator
from .config import DEFAULT_FEED_SOURCES
from .home import HomePage
from .images import resolve_image
from .loader import DEFAULT_CALLBACK, DEFAULT_ENDPOINT, DEFAULT_ENTRY_LIMIT, FeedLoader
from .models import AggregationStatus, Feed, FeedEntry, FeedSource
from .renderers import build_page_html

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("json", "html")


@dataclass
class RunConfig:
    """Runtime options for executing the application."""

    sources: List[FeedSource] = field(
        default_factory=lambda: list(DEFAULT_FEED_SOURCES)
    )
    limit: int = DEFAULT_ENTRY_LIMIT
    concurrency: Optional[int] = None
    timeout: Optional[float] = 10.0
    endpoint: str = DEFAULT_ENDPOINT
    callback: Optional[str] = DEFAULT_CALLBACK
    order: str = ORDER_COMPLETION
    output_format: str = "json"
    output_path: Optional[str] = None
    select_entry: Optional[str] = None


@dataclass
class RunResult:
    """Returned data after executing the app."""

    output_text: str
    status: AggregationStatus
    page: HomePage


def parse_selection(value: str) -> Tuple[int, int]:
    """Parse ``"feed:entry"`` into a pair of zero-based indices."""
    try:
        feed_text, entry_text = value.split(":", 1)
        feed_index, entry_index = int(feed_text), int(entry_text)
    except ValueError:
        raise ValueError(f"Selection must look like FEED:ENTRY, got {value!r}")
    if feed_index < 0 or entry_index < 0:
        raise ValueError(f"Selection indices must not be negative, got {value!r}")
    return feed_index, entry_index


def _find_entry(feeds: List[Feed], selection: str) -> FeedEntry:
    feed_index, entry_index = parse_selection(selection)
    try:
        return feeds[feed_index].entries[entry_index]
    except IndexError:
        raise ValueError(f"No entry at position {selection}")


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _feed_payload(feed: Feed) -> dict:
    payload = dataclasses.asdict(feed)
    for entry, raw in zip(feed.entries, payload["entries"]):
        raw["image"] = resolve_image(entry)
    return payload


def build_json_output(page: HomePage) -> str:
    payload: dict = {
        "status": page.status.value,
        "feeds": [_feed_payload(feed) for feed in page.feeds or []],
    }
    if page.error is not None:
        payload["failed_sources"] = [
            {"url": outcome.source.url, "error": outcome.error}
            for outcome in page.error.outcomes
            if outcome.error is not None
        ]
    if page.selected_entry is not None:
        payload["selected"] = dataclasses.asdict(page.selected_entry)
    return json.dumps(payload, indent=2, ensure_ascii=False, default=_json_default)


def _write_output(path: str, text: str) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(text, encoding="utf-8")
    logger.info("Wrote output to %s", location)


def build_aggregator(config: RunConfig) -> FeedAggregator:
    loader = FeedLoader(
        endpoint=config.endpoint, callback=config.callback, timeout=config.timeout
    )
    return FeedAggregator(
        loader,
        config.sources,
        limit=config.limit,
        concurrency=config.concurrency,
        order=config.order,
    )


def execute(config: RunConfig, aggregator: Optional[FeedAggregator] = None) -> RunResult:
    """Run the application logic and return the result payload."""
    if config.output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format: {config.output_format}")

    page = HomePage(aggregator or build_aggregator(config))
    feeds = page.load()

    if feeds is not None and config.select_entry:
        page.on_entry_selected(_find_entry(feeds, config.select_entry))

    if config.output_format == "html":
        output_text = build_page_html(page)
    else:
        output_text = build_json_output(page)

    if config.output_path:
        _write_output(config.output_path, output_text)

    return RunResult(output_text=output_text, status=page.status, page=page)
