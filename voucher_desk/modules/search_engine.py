"""
Search Engine Module - Student Voucher Desk
Author: Voucher Desk Team
Date: October 2026

Incremental student lookup behind the voucher desk. The engine keeps four
pieces of state (query, suggestions, selection, highlight), debounces query
changes through a cancellable timer and exposes immutable snapshots to the
view layer.

Features:
- Debounced evaluation (single pending timer)
- Roster-order substring matching on id and name
- Exact-match auto selection
- Keyboard highlight navigation
- Snapshot subscription for views
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from voucher_desk.modules.roster_source import StudentRecord

_WHITESPACE = re.compile(r'\s+')

DEFAULT_DEBOUNCE_SECONDS = 0.3
DEFAULT_SUGGESTION_LIMIT = 5

STATUS_IDLE = 'idle'
STATUS_NO_MATCH = 'no_match'
STATUS_AMBIGUOUS = 'ambiguous'
STATUS_MATCHED = 'matched'
STATUS_SELECTED = 'selected'


def _collapse(text: str) -> str:
    return _WHITESPACE.sub('', text)


def matches_query(record: StudentRecord, query: str) -> bool:
    """
    Substring predicate used to build suggestions.

    `query` is expected trimmed and lowercased. Ids are compared as their
    string form, names case-insensitively; missing fields never match.
    """
    if record.id is not None and query in str(record.id):
        return True
    if isinstance(record.name, str) and query in record.name.lower():
        return True
    return False


def is_exact_match(record: StudentRecord, query: str) -> bool:
    """Id equals the query, or the name equals it once all whitespace is removed."""
    if record.id is not None and str(record.id) == query:
        return True
    if isinstance(record.name, str):
        return _collapse(record.name.lower()) == _collapse(query)
    return False


def find_suggestions(roster: Sequence[StudentRecord], query: str,
                     limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[StudentRecord]:
    """First `limit` matching records, in roster order."""
    matched = []
    for record in roster:
        if len(matched) >= limit:
            break
        if matches_query(record, query):
            matched.append(record)
    return matched


def find_exact(candidates: Sequence[StudentRecord], query: str) -> Optional[StudentRecord]:
    return next((record for record in candidates if is_exact_match(record, query)), None)


@dataclass(frozen=True)
class SearchState:
    """Immutable snapshot of the engine state handed to views."""
    query: str = ''
    suggestions: Tuple[StudentRecord, ...] = field(default_factory=tuple)
    selection: Optional[StudentRecord] = None
    highlight: int = -1

    @property
    def status(self) -> str:
        if self.selection is not None:
            return STATUS_SELECTED if not self.suggestions else STATUS_MATCHED
        if not self.query.strip():
            return STATUS_IDLE
        if self.suggestions:
            return STATUS_AMBIGUOUS
        return STATUS_NO_MATCH

    def to_dict(self) -> Dict[str, Any]:
        return {
            'query': self.query,
            'suggestions': [record.to_dict() for record in self.suggestions],
            'selection': self.selection.to_dict() if self.selection else None,
            'highlight': self.highlight,
            'status': self.status
        }


class SearchEngine:
    """
    Debounced search-and-selection engine.

    The scheduler must provide ``call_later(delay, callback)`` returning a
    handle with ``cancel()``; an asyncio event loop does. All methods must be
    called from the scheduler's thread.
    """

    def __init__(self, roster: Sequence[StudentRecord], scheduler,
                 debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
                 suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT):
        self.logger = logging.getLogger(__name__)
        self.scheduler = scheduler
        self.debounce_seconds = debounce_seconds
        self.suggestion_limit = suggestion_limit

        self._roster: Sequence[StudentRecord] = roster
        self._state = SearchState()
        self._pending = None
        self._suggestions_dismissed = False
        self._listeners: List[Callable[[SearchState], None]] = []

    @property
    def roster(self) -> Sequence[StudentRecord]:
        return self._roster

    @property
    def state(self) -> SearchState:
        return self._state

    def snapshot(self) -> SearchState:
        return self._state

    @property
    def has_pending_evaluation(self) -> bool:
        return self._pending is not None

    def subscribe(self, listener: Callable[[SearchState], None]) -> Callable[[], None]:
        """Register a listener called with every new state; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Mutations

    def set_query(self, raw: str) -> None:
        raw = raw or ''
        self._suggestions_dismissed = False
        self._publish(query=raw)
        self._schedule()

    def set_roster(self, roster: Sequence[StudentRecord]) -> None:
        """Point the engine at a new roster and re-run the current query against it."""
        self._roster = roster
        self.logger.debug(f"Roster replaced ({len(roster)} records)")
        self._schedule()

    def select_explicit(self, record: StudentRecord) -> None:
        self._cancel_pending()
        self._suggestions_dismissed = False
        self._publish(
            query=str(record.id) if record.id is not None else '',
            suggestions=(),
            selection=record,
            highlight=-1
        )

    def move_highlight(self, direction: str) -> None:
        count = len(self._state.suggestions)
        if not count:
            return

        if direction == 'down':
            highlight = min(self._state.highlight + 1, count - 1)
        elif direction == 'up':
            highlight = max(self._state.highlight - 1, 0)
        else:
            raise ValueError(f"Unknown highlight direction: {direction}")

        self._publish(highlight=highlight)

    def confirm_highlighted(self) -> None:
        suggestions = self._state.suggestions
        highlight = self._state.highlight
        if 0 <= highlight < len(suggestions):
            self.select_explicit(suggestions[highlight])

    def clear(self) -> None:
        self._cancel_pending()
        self._suggestions_dismissed = False
        self._publish(query='', suggestions=(), selection=None, highlight=-1)

    def dismiss_suggestions(self) -> None:
        """
        Close the suggestion list. A pending evaluation still runs so the
        selection follows the latest query, but the list stays closed until
        the query changes again.
        """
        self._suggestions_dismissed = True
        self._publish(suggestions=(), highlight=-1)

    # Internals

    def _schedule(self) -> None:
        self._cancel_pending()
        self._pending = self.scheduler.call_later(self.debounce_seconds, self._fire)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self) -> None:
        self._pending = None
        self._evaluate(self._state.query.strip().lower())

    def _evaluate(self, query: str) -> None:
        if not query:
            self._publish(suggestions=(), selection=None, highlight=-1)
            return

        matched = find_suggestions(self._roster, query, self.suggestion_limit)
        exact = find_exact(matched, query)

        shown = () if self._suggestions_dismissed else tuple(matched)
        self._publish(suggestions=shown, selection=exact, highlight=-1)
        self.logger.debug(f"Query {query!r}: {len(matched)} suggestions, "
                          f"exact={'yes' if exact else 'no'}")

    def _publish(self, **changes) -> None:
        values = {
            'query': self._state.query,
            'suggestions': self._state.suggestions,
            'selection': self._state.selection,
            'highlight': self._state.highlight
        }
        values.update(changes)
        self._state = SearchState(**values)

        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                self.logger.error(f"Search listener failed: {str(e)}")
