"""
Debounced live customer search.

Each keystroke restarts the debounce timer; only the text in effect when the
timer fires is searched. Every issued search takes the next sequence number,
and a response is applied only if its number is still the latest. In-flight
requests are never cancelled, their results are just dropped when stale.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from ...config import SEARCH_DEBOUNCE_MS, SEARCH_MIN_CHARS
from ...errors import NetworkError
from ...models import Customer

logger = logging.getLogger(__name__)

SearchFn = Callable[[str], Awaitable[list[Customer]]]


class LiveSearch:
    def __init__(
        self,
        search: SearchFn,
        debounce_ms: int = SEARCH_DEBOUNCE_MS,
        min_chars: int = SEARCH_MIN_CHARS,
    ):
        self._search = search
        self.debounce = debounce_ms / 1000
        self.min_chars = min_chars

        self.query = ""
        self.results: list[Customer] = []
        self.error: Optional[str] = None

        self._seq = 0
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def searching(self) -> bool:
        return bool(self._in_flight) or self._timer is not None

    @property
    def latest_seq(self) -> int:
        return self._seq

    def update(self, text: str) -> None:
        """Record new input text and restart the debounce timer."""
        self.query = text
        self._cancel_timer()

        if len(text) < self.min_chars:
            # Invalidate anything still in flight for an older query
            self._seq += 1
            self.results = []
            self.error = None
            return

        self._timer = asyncio.create_task(self._debounce())

    def cancel(self) -> None:
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounce(self) -> None:
        try:
            await asyncio.sleep(self.debounce)
        except asyncio.CancelledError:
            return
        self._timer = None
        self._seq += 1
        task = asyncio.create_task(self._run(self._seq, self.query))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, seq: int, query: str) -> None:
        try:
            results = await self._search(query)
        except NetworkError as e:
            if seq == self._seq:
                logger.warning(f"⚠️ Customer search failed for '{query}': {e}")
                self.error = "Failed to search customers"
                self.results = []
            return

        if seq != self._seq:
            logger.debug(f"Discarding stale search #{seq} for '{query}' (latest #{self._seq})")
            return

        self.error = None
        self.results = results

    async def settle(self) -> None:
        """Wait for the pending timer and any in-flight searches to finish."""
        if self._timer is not None:
            await asyncio.gather(self._timer, return_exceptions=True)
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
