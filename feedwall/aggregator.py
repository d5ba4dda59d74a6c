"""Fan-out over the configured sources and join on completion."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from typing import Dict, List, Optional, Sequence

from .errors import AggregationError, AggregationTimeout, FeedwallError
from .loader import DEFAULT_ENTRY_LIMIT, FeedLoader
from .models import (
    AggregationReport,
    AggregationStatus,
    Feed,
    FeedSource,
    SourceOutcome,
    SourceState,
)

logger = logging.getLogger(__name__)

ORDER_COMPLETION = "completion"
ORDER_SOURCE = "source"
ORDERS = (ORDER_COMPLETION, ORDER_SOURCE)


class Aggregation:
    """Handle on one in-flight aggregation.

    Outcomes are only written by the collector thread; the lock guards
    snapshots taken from other threads.
    """

    def __init__(self, sources: Sequence[FeedSource], order: str = ORDER_COMPLETION):
        self.order = order
        self._outcomes = [
            SourceOutcome(source=source, position=index)
            for index, source in enumerate(sources)
        ]
        self._arrivals: List[Feed] = []
        self._lock = threading.Lock()
        self._settled = threading.Event()

    def _record_success(self, position: int, feed: Feed) -> None:
        with self._lock:
            outcome = self._outcomes[position]
            outcome.state = SourceState.SUCCEEDED
            outcome.feed = feed
            self._arrivals.append(feed)
            received = len(self._arrivals)
        logger.debug(
            "Source %s succeeded (%d of %d)",
            outcome.source.url,
            received,
            len(self._outcomes),
        )

    def _record_failure(self, position: int, error: BaseException) -> None:
        with self._lock:
            outcome = self._outcomes[position]
            outcome.state = SourceState.FAILED
            outcome.error = str(error)

    def _mark_settled(self) -> None:
        self._settled.set()

    def _status(self) -> AggregationStatus:
        states = [outcome.state for outcome in self._outcomes]
        if SourceState.PENDING in states:
            return AggregationStatus.LOADING
        if all(state is SourceState.SUCCEEDED for state in states):
            return AggregationStatus.COMPLETE
        if all(state is SourceState.FAILED for state in states):
            return AggregationStatus.FAILED
        return AggregationStatus.PARTIAL

    def _ordered_feeds(self) -> List[Feed]:
        if self.order == ORDER_SOURCE:
            return [
                outcome.feed
                for outcome in self._outcomes
                if outcome.state is SourceState.SUCCEEDED
            ]
        return list(self._arrivals)

    @property
    def status(self) -> AggregationStatus:
        with self._lock:
            return self._status()

    def report(self) -> AggregationReport:
        """Return a consistent snapshot of the aggregation so far."""
        with self._lock:
            return AggregationReport(
                status=self._status(),
                feeds=self._ordered_feeds(),
                outcomes=[
                    SourceOutcome(
                        source=outcome.source,
                        position=outcome.position,
                        state=outcome.state,
                        feed=outcome.feed,
                        error=outcome.error,
                    )
                    for outcome in self._outcomes
                ],
            )

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every source has settled; False if ``timeout`` elapsed."""
        return self._settled.wait(timeout)

    def result(self, timeout: Optional[float] = None) -> List[Feed]:
        """Return one feed per source, or raise if that cannot happen."""
        if not self.wait(timeout):
            raise AggregationTimeout(self.report())
        report = self.report()
        if report.status is not AggregationStatus.COMPLETE:
            raise AggregationError(report)
        return report.feeds


class FeedAggregator:
    """Issue one loader call per source concurrently and join the results."""

    def __init__(
        self,
        loader: FeedLoader,
        sources: Sequence[FeedSource],
        limit: int = DEFAULT_ENTRY_LIMIT,
        concurrency: Optional[int] = None,
        order: str = ORDER_COMPLETION,
    ):
        if order not in ORDERS:
            raise ValueError(f"Unsupported result order: {order}")
        self.loader = loader
        self.sources = list(sources)
        self.limit = limit
        self.concurrency = concurrency
        self.order = order

    def start(self) -> Aggregation:
        """Submit every source and return immediately."""
        if not self.sources:
            raise FeedwallError("No feed sources configured.")

        aggregation = Aggregation(self.sources, order=self.order)
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.concurrency or len(self.sources)
        )
        logger.info("Fetching %d feed sources", len(self.sources))
        future_to_position: Dict[concurrent.futures.Future, int] = {
            executor.submit(self.loader.fetch, source.url, self.limit): position
            for position, source in enumerate(self.sources)
        }

        collector = threading.Thread(
            target=self._collect,
            args=(aggregation, executor, future_to_position),
            name="feedwall-aggregator",
            daemon=True,
        )
        collector.start()
        return aggregation

    def get_all(self, timeout: Optional[float] = None) -> List[Feed]:
        """Fetch all sources and return the combined result."""
        return self.start().result(timeout)

    def _collect(
        self,
        aggregation: Aggregation,
        executor: concurrent.futures.ThreadPoolExecutor,
        future_to_position: Dict[concurrent.futures.Future, int],
    ) -> None:
        try:
            for future in concurrent.futures.as_completed(future_to_position):
                position = future_to_position[future]
                source = self.sources[position]
                try:
                    feed = future.result()
                except Exception as exc:  # noqa: BLE001 - recorded per source
                    logger.warning("Feed source %s failed: %s", source.url, exc)
                    aggregation._record_failure(position, exc)
                else:
                    aggregation._record_success(position, feed)
        finally:
            executor.shutdown(wait=False)
            aggregation._mark_settled()

        report = aggregation.report()
        if report.status is AggregationStatus.COMPLETE:
            logger.info("All %d feed sources loaded", len(report.feeds))
        else:
            logger.error(
                "Feed aggregation %s; failed sources: %s",
                report.status.value,
                ", ".join(source.url for source in report.failed_sources),
            )
