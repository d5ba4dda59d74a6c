"""Adapter around the hosted feed-conversion API."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional

import requests

from .dates import parse_date
from .errors import FeedLoadError
from .models import Feed, FeedEntry, MediaContent, MediaGroup

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://ajax.googleapis.com/ajax/services/feed/load"
DEFAULT_CALLBACK = "feedwall_callback"
API_VERSION = "1.0"
DEFAULT_ENTRY_LIMIT = 10

_JSONP_PATTERN = re.compile(
    r"^\s*(?:/\*\*/\s*)?[A-Za-z_$][\w$.]*\s*\((?P<body>.*)\)\s*;?\s*$", re.DOTALL
)


def unwrap_jsonp(text: str) -> str:
    """Strip a ``callback(...)`` wrapper if present; plain JSON passes through."""
    match = _JSONP_PATTERN.match(text)
    if match:
        return match.group("body")
    return text


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _parse_media_groups(raw: Any) -> Optional[List[MediaGroup]]:
    if not isinstance(raw, list):
        return None
    groups: List[MediaGroup] = []
    for group in raw:
        contents = group.get("contents") if isinstance(group, dict) else None
        items = [
            MediaContent(url=item["url"])
            for item in contents or []
            if isinstance(item, dict) and item.get("url")
        ]
        groups.append(MediaGroup(contents=items))
    return groups


def _parse_entry(raw: dict) -> FeedEntry:
    categories = raw.get("categories")
    return FeedEntry(
        title=_text(raw.get("title")),
        link=_text(raw.get("link")),
        content=_text(raw.get("content")),
        content_snippet=_text(raw.get("contentSnippet")),
        published_date=parse_date(raw.get("publishedDate")),
        media_groups=_parse_media_groups(raw.get("mediaGroups")),
        author=raw.get("author") or None,
        categories=[str(c) for c in categories] if isinstance(categories, list) else [],
    )


def parse_feed_payload(source_url: str, payload: Any) -> Feed:
    """Convert a decoded API response into a Feed or raise FeedLoadError."""
    if not isinstance(payload, dict):
        raise FeedLoadError(source_url, "response is not a JSON object")

    status = payload.get("responseStatus", 200)
    if status != 200:
        details = payload.get("responseDetails") or "no details"
        raise FeedLoadError(source_url, f"API status {status}: {details}")

    response_data = payload.get("responseData")
    feed = response_data.get("feed") if isinstance(response_data, dict) else None
    if not isinstance(feed, dict):
        raise FeedLoadError(source_url, "response is missing responseData.feed")

    raw_entries = feed.get("entries")
    if not isinstance(raw_entries, list):
        raise FeedLoadError(source_url, "feed has no entries list")

    entries = [_parse_entry(item) for item in raw_entries if isinstance(item, dict)]
    return Feed(
        title=_text(feed.get("title")),
        entries=entries,
        feed_url=feed.get("feedUrl") or source_url,
        link=feed.get("link") or None,
        description=feed.get("description") or None,
    )


class FeedLoader:
    """Translate one feed URL into a Feed via the conversion endpoint.

    No retries: any failure surfaces as FeedLoadError.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        callback: Optional[str] = DEFAULT_CALLBACK,
        timeout: Optional[float] = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.callback = callback
        self.timeout = timeout
        self.session = session

    def build_params(self, source_url: str, limit: int) -> dict:
        params = {"v": API_VERSION, "q": source_url, "num": limit}
        if self.callback:
            params["callback"] = self.callback
        return params

    def fetch(self, source_url: str, limit: int = DEFAULT_ENTRY_LIMIT) -> Feed:
        """Fetch up to ``limit`` entries for ``source_url``."""
        logger.info("Requesting feed %s (limit %d)", source_url, limit)
        try:
            http = self.session or requests
            response = http.get(
                self.endpoint,
                params=self.build_params(source_url, limit),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Request for feed %s failed: %s", source_url, exc)
            raise FeedLoadError(source_url, str(exc)) from exc

        try:
            payload = json.loads(unwrap_jsonp(response.text))
        except json.JSONDecodeError as exc:
            logger.warning("Feed %s returned invalid JSON: %s", source_url, exc)
            raise FeedLoadError(source_url, "response is not valid JSON") from exc

        feed = parse_feed_payload(source_url, payload)
        logger.info(
            "Loaded feed '%s' with %d entries from %s",
            feed.title,
            len(feed.entries),
            source_url,
        )
        return feed
