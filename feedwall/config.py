"""Feed source list and application configuration loading."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from xml.etree import ElementTree as ET

from .aggregator import ORDER_COMPLETION, ORDERS
from .loader import DEFAULT_CALLBACK, DEFAULT_ENDPOINT, DEFAULT_ENTRY_LIMIT
from .models import FeedSource

logger = logging.getLogger(__name__)

DEFAULT_FEED_SOURCES = (
    FeedSource(url="http://feeds.feedburner.com/TechCrunch/"),
    FeedSource(url="http://feeds.arstechnica.com/arstechnica/index"),
    FeedSource(url="http://feeds.feedburner.com/GoogleEarthBlog"),
    FeedSource(url="http://feeds.gawker.com/gizmodo/full"),
)


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    sources: List[FeedSource] = field(
        default_factory=lambda: list(DEFAULT_FEED_SOURCES)
    )
    limit: int = DEFAULT_ENTRY_LIMIT
    concurrency: Optional[int] = None
    timeout: Optional[float] = 10.0
    endpoint: str = DEFAULT_ENDPOINT
    callback: Optional[str] = DEFAULT_CALLBACK
    order: str = ORDER_COMPLETION
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_feeds_config(path: str) -> List[FeedSource]:
    """Parse an OPML file and return the feed sources it lists."""
    logger.info("Loading feed configuration from %s", path)
    tree = ET.parse(path)
    body = tree.getroot().find("body")
    if body is None:
        raise ValueError("Feed list is missing the <body> section.")

    sources: List[FeedSource] = []

    def walk(outline: ET.Element) -> None:
        feed_url = outline.attrib.get("xmlUrl")
        if outline.attrib.get("type") == "rss" and feed_url:
            title = outline.attrib.get("title") or outline.attrib.get("text")
            sources.append(FeedSource(url=feed_url, title=title))
            logger.debug("Registered feed source %s", feed_url)
            return
        for child in outline.findall("outline"):
            walk(child)

    for outline in body.findall("outline"):
        walk(outline)

    logger.info("Loaded %d feed sources from configuration", len(sources))
    return sources


def _config_relative(config_path: Path, text: str) -> str:
    """Paths inside the config file are relative to the file itself."""
    return str((config_path.parent / text.strip()).resolve())


def _positive_int(text: str, name: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise ValueError(f"<{name}> must be an integer, got {text!r}")
    if value <= 0:
        raise ValueError(f"<{name}> must be positive.")
    return value


def _timeout_seconds(text: str) -> Optional[float]:
    if text.lower() == "none":
        return None
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"<timeout> must be a number of seconds or none, got {text!r}")
    if not math.isfinite(value) or value <= 0:
        raise ValueError("<timeout> must be a positive, finite number of seconds.")
    return value


def parse_app_config(path: str) -> AppConfig:
    """Parse the application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    root = ET.parse(config_path).getroot()
    config = AppConfig()

    feeds_text = root.findtext("feeds")
    if feeds_text and feeds_text.strip():
        sources = parse_feeds_config(_config_relative(config_path, feeds_text))
        if not sources:
            raise ValueError("Feed list contains no rss outlines.")
        config.sources = sources

    limit_text = root.findtext("limit")
    if limit_text:
        config.limit = _positive_int(limit_text.strip(), "limit")

    concurrency_text = root.findtext("concurrency")
    if concurrency_text:
        config.concurrency = _positive_int(concurrency_text.strip(), "concurrency")

    timeout_text = root.findtext("timeout")
    if timeout_text and timeout_text.strip():
        config.timeout = _timeout_seconds(timeout_text.strip())

    endpoint = root.findtext("endpoint")
    if endpoint and endpoint.strip():
        config.endpoint = endpoint.strip()

    callback_node = root.find("callback")
    if callback_node is not None:
        config.callback = (callback_node.text or "").strip() or None

    order = root.findtext("order")
    if order:
        order = order.strip()
        if order not in ORDERS:
            raise ValueError(f"<order> must be one of {', '.join(ORDERS)}")
        config.order = order

    log_node = root.find("logging")
    if log_node is not None:
        config.logging.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            config.logging.file = _config_relative(config_path, log_file)

    return config
