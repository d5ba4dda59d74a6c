"""Home page state: the loaded feeds plus the current selection."""

from __future__ import annotations

import logging
from typing import List, Optional

from .aggregator import Aggregation, FeedAggregator
from .errors import AggregationError, AggregationTimeout
from .models import AggregationReport, AggregationStatus, Feed, FeedEntry
from .selection import SelectionState

logger = logging.getLogger(__name__)


class HomePage:
    """Page controller fed by the aggregator.

    Feeds are requested once per page. The selection is owned here and
    passed by reference to whatever renders the page.
    """

    def __init__(
        self, aggregator: FeedAggregator, selection: Optional[SelectionState] = None
    ):
        self.aggregator = aggregator
        self.selection = selection or SelectionState()
        self.feeds: Optional[List[Feed]] = None
        self.error: Optional[AggregationReport] = None
        self._aggregation: Optional[Aggregation] = None

    @property
    def selected_entry(self) -> Optional[FeedEntry]:
        return self.selection.selected

    @property
    def status(self) -> AggregationStatus:
        if self.feeds is not None:
            return AggregationStatus.COMPLETE
        if self.error is not None:
            return self.error.status
        return AggregationStatus.LOADING

    def load(self, timeout: Optional[float] = None) -> Optional[List[Feed]]:
        """Request all feeds and wait for them; returns None on failure."""
        if self._aggregation is None:
            self._aggregation = self.aggregator.start()
        try:
            self.feeds = self._aggregation.result(timeout)
        except AggregationTimeout:
            logger.info("Feeds still loading after %s seconds", timeout)
            return None
        except AggregationError as exc:
            logger.error("%s", exc)
            self.error = exc.report
            return None
        return self.feeds

    def on_entry_selected(self, entry: FeedEntry) -> None:
        self.selection.select(entry)

    def on_entry_deselected(self) -> None:
        self.selection.deselect()
