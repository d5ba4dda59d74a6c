import threading
import time
from datetime import datetime, timezone

import pytest
import requests

from feedwall.models import Feed, FeedEntry, FeedSource


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    """Records GET calls and replays a canned response or exception."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class FakeLoader:
    """Loader double keyed by source URL.

    Each behaviour is ``(delay, result)``; ``result`` is a Feed, an
    exception to raise, or a threading.Event to block on before returning
    a feed titled after the URL.
    """

    def __init__(self, behaviours):
        self.behaviours = behaviours
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, source_url, limit=10):
        with self._lock:
            self.calls.append((source_url, limit))
        delay, result = self.behaviours[source_url]
        if delay:
            time.sleep(delay)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, threading.Event):
            result.wait()
            return Feed(title=source_url)
        return result


def make_entry(**overrides):
    values = {
        "title": "Entry",
        "link": "https://example.com/entry",
        "content": "<p>Body</p>",
        "content_snippet": "Body",
        "published_date": datetime(2013, 10, 17, 14, 5, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return FeedEntry(**values)


@pytest.fixture
def sources():
    return [FeedSource(url=f"http://feeds.example.com/{i}") for i in range(4)]


@pytest.fixture
def entry_factory():
    return make_entry
