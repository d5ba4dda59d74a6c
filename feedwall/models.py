"""Shared data models for feedwall."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class FeedSource:
    """A configured feed URL to aggregate."""

    url: str
    title: Optional[str] = None

    @property
    def label(self) -> str:
        return self.title or self.url


@dataclass(frozen=True)
class MediaContent:
    url: str


@dataclass(frozen=True)
class MediaGroup:
    contents: List[MediaContent] = field(default_factory=list)


@dataclass(frozen=True)
class FeedEntry:
    """Single entry as delivered by the feed-conversion API."""

    title: str
    link: str
    content: str = ""
    content_snippet: str = ""
    published_date: Optional[datetime] = None
    media_groups: Optional[List[MediaGroup]] = None
    author: Optional[str] = None
    categories: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Feed:
    """One converted feed: a title and its entries in API order."""

    title: str
    entries: List[FeedEntry] = field(default_factory=list)
    feed_url: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None


class SourceState(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AggregationStatus(str, Enum):
    LOADING = "loading"
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class SourceOutcome:
    """Per-source record kept by the aggregator."""

    source: FeedSource
    position: int
    state: SourceState = SourceState.PENDING
    feed: Optional[Feed] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class AggregationReport:
    """Snapshot of an aggregation.

    ``feeds`` holds the feeds received so far; it only equals the final
    result when ``status`` is ``COMPLETE``.
    """

    status: AggregationStatus
    feeds: List[Feed]
    outcomes: List[SourceOutcome]

    @property
    def failed_sources(self) -> List[FeedSource]:
        return [o.source for o in self.outcomes if o.state is SourceState.FAILED]

    @property
    def pending_sources(self) -> List[FeedSource]:
        return [o.source for o in self.outcomes if o.state is SourceState.PENDING]

    @property
    def is_settled(self) -> bool:
        return self.status is not AggregationStatus.LOADING
