"""
Search Desk Module - Student Voucher Desk
Author: Voucher Desk Team
Date: October 2026

Hosts the search engine on its own asyncio event loop so that Flask request
threads never touch engine state directly. Every operation is marshalled onto
the loop thread and the caller waits for the resulting snapshot.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Optional, Sequence

from voucher_desk.modules.roster_source import StudentRecord
from voucher_desk.modules.search_engine import SearchEngine, SearchState


class SearchDesk:
    """
    Thread-safe front for a single SearchEngine.
    One desk serves one kiosk; there is no per-user separation.
    """

    def __init__(self, roster: Sequence[StudentRecord] = (),
                 debounce_seconds: float = 0.3,
                 suggestion_limit: int = 5,
                 call_timeout: float = 5.0):
        """
        Start the event loop thread and build the engine on it.

        Args:
            roster: Initial roster
            debounce_seconds: Quiet period before a query is evaluated
            suggestion_limit: Maximum number of suggestions
            call_timeout: Seconds a caller waits for the loop to answer
        """
        self.logger = logging.getLogger(__name__)
        self.call_timeout = call_timeout

        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name='search-desk-loop',
            daemon=True
        )
        self._thread.start()

        self.engine: SearchEngine = self._call(
            lambda: SearchEngine(roster, self.loop,
                                 debounce_seconds=debounce_seconds,
                                 suggestion_limit=suggestion_limit)
        )

        self.logger.info("Search desk started")

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def _call(self, func: Callable):
        """Run `func` on the loop thread and return its result."""
        if self.loop.is_closed():
            raise RuntimeError("Search desk is shut down")

        future: Future = Future()

        def runner():
            try:
                future.set_result(func())
            except Exception as e:
                future.set_exception(e)

        self.loop.call_soon_threadsafe(runner)
        return future.result(timeout=self.call_timeout)

    def _mutate(self, func: Callable[[], None]) -> SearchState:
        def apply():
            func()
            return self.engine.snapshot()

        return self._call(apply)

    # Engine operations

    def snapshot(self) -> SearchState:
        return self._call(lambda: self.engine.snapshot())

    def set_query(self, raw: str) -> SearchState:
        return self._mutate(lambda: self.engine.set_query(raw))

    def select_explicit(self, record: StudentRecord) -> SearchState:
        return self._mutate(lambda: self.engine.select_explicit(record))

    def move_highlight(self, direction: str) -> SearchState:
        return self._mutate(lambda: self.engine.move_highlight(direction))

    def confirm_highlighted(self) -> SearchState:
        return self._mutate(self.engine.confirm_highlighted)

    def clear(self) -> SearchState:
        return self._mutate(self.engine.clear)

    def dismiss_suggestions(self) -> SearchState:
        return self._mutate(self.engine.dismiss_suggestions)

    def set_roster(self, roster: Sequence[StudentRecord]) -> None:
        """Roster subscription callback; safe to call from any thread."""
        self._mutate(lambda: self.engine.set_roster(roster))

    def selection(self) -> Optional[StudentRecord]:
        return self.snapshot().selection

    def shutdown(self) -> None:
        """Stop the loop thread."""
        try:
            if self.loop.is_running():
                self._call(self.engine.clear)
                self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join(timeout=5)
            self.loop.close()
            self.logger.info("Search desk shut down")

        except Exception as e:
            self.logger.error(f"Error during search desk shutdown: {str(e)}")
