"""Single-entry selection state."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .models import FeedEntry

logger = logging.getLogger(__name__)

SelectionListener = Callable[[Optional[FeedEntry]], None]


class SelectionState:
    """Holds either no selection or exactly one selected entry.

    Transitions happen only through ``select`` and ``deselect``; listeners
    are called with the new selection after each one.
    """

    def __init__(self) -> None:
        self._selected: Optional[FeedEntry] = None
        self._listeners: List[SelectionListener] = []

    @property
    def selected(self) -> Optional[FeedEntry]:
        return self._selected

    @property
    def is_selected(self) -> bool:
        return self._selected is not None

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def select(self, entry: Optional[FeedEntry]) -> None:
        if entry is None:
            self.deselect()
            return
        logger.debug("Entry selected: %s", entry.link or entry.title)
        self._selected = entry
        self._notify()

    def deselect(self) -> None:
        if self._selected is not None:
            logger.debug("Entry deselected")
        self._selected = None
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._selected)
