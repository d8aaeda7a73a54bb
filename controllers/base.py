"""Shared state handling for screen controllers."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

logger = logging.getLogger(__name__)


def today_iso(today: Optional[date] = None) -> str:
    """Return today's date (or ``today``) as ``YYYY-MM-DD``."""

    return (today or date.today()).isoformat()


class ViewController:
    """Loading and error state plus fetch bookkeeping for one screen.

    Every fetch takes a token from :meth:`_begin_fetch`. Results are applied
    only while that token is still current and the controller is open, so a
    response for a superseded target or a closed screen is dropped.
    """

    def __init__(self) -> None:
        self.loading: bool = False
        self.error: Optional[str] = None
        self.submitting: bool = False
        self._generation: int = 0
        self._closed: bool = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Tear the screen down; late results become no-ops."""

        self._closed = True
        self._generation += 1

    def _begin_fetch(self) -> int:
        self._generation += 1
        self.loading = True
        return self._generation

    def _is_current(self, token: int) -> bool:
        return not self._closed and token == self._generation

    def _finish_fetch(self, token: int) -> None:
        if self._is_current(token):
            self.loading = False

    def _discarded(self, token: int, what: str) -> bool:
        if self._is_current(token):
            return False
        logger.debug("Discarding stale %s result for %s", what, type(self).__name__)
        return True
