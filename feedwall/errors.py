"""Exception types raised by feedwall."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import AggregationReport


class FeedwallError(RuntimeError):
    """Base class for feedwall runtime failures."""


class FeedLoadError(FeedwallError):
    """A single feed could not be fetched or decoded."""

    def __init__(self, source_url: str, reason: str):
        super().__init__(f"Failed to load feed {source_url}: {reason}")
        self.source_url = source_url
        self.reason = reason


class AggregationError(FeedwallError):
    """One or more sources failed, so no combined result is published."""

    def __init__(self, report: "AggregationReport"):
        failed = ", ".join(source.url for source in report.failed_sources)
        super().__init__(
            f"Feed aggregation {report.status.value}: failed sources: {failed}"
        )
        self.report = report


class AggregationTimeout(FeedwallError):
    """The wait for an aggregation elapsed while sources were still pending."""

    def __init__(self, report: "AggregationReport"):
        pending = ", ".join(source.url for source in report.pending_sources)
        super().__init__(f"Feed aggregation still loading; pending sources: {pending}")
        self.report = report
