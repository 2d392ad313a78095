"""
In-memory session state: the last good record set, the active criteria and
the bookkeeping that keeps late fetch responses from overwriting newer ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from car_dashboard.data.filters import FETCH_FIELDS, fetch_key
from car_dashboard.data.models import FilterCriteria, ListingRecord
from car_dashboard.logger import get_logger

logger = get_logger("data.session")


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one issued fetch and the criteria that triggered it."""

    sequence: int
    criteria: FilterCriteria


@dataclass
class ListingSession:
    criteria: FilterCriteria
    records: List[ListingRecord] = field(default_factory=list)
    error: Optional[Exception] = None
    loaded: bool = False
    # Criteria of the fetch that produced `records`.
    view_criteria: Optional[FilterCriteria] = None
    _issued: int = 0

    def set_criteria(self, criteria: FilterCriteria) -> None:
        self.criteria = criteria

    def begin_fetch(self, criteria: Optional[FilterCriteria] = None) -> FetchTicket:
        self._issued += 1
        return FetchTicket(sequence=self._issued, criteria=criteria or self.criteria)

    def is_current(self, ticket: FetchTicket) -> bool:
        return ticket.sequence == self._issued and ticket.criteria == self.criteria

    def complete_fetch(self, ticket: FetchTicket, records: List[ListingRecord]) -> bool:
        """Install a fetch result unless a newer fetch or criteria change superseded it."""
        if not self.is_current(ticket):
            logger.debug("Discarding stale fetch #%d (%d rows)", ticket.sequence, len(records))
            return False
        self.records = list(records)
        self.view_criteria = ticket.criteria
        self.error = None
        self.loaded = True
        return True

    def fail_fetch(self, ticket: FetchTicket, error: Exception) -> bool:
        """Record a failure; the previous records stay in place for display."""
        if not self.is_current(ticket):
            logger.debug("Ignoring failure of stale fetch #%d: %s", ticket.sequence, error)
            return False
        self.error = error
        return True

    def display_criteria(self) -> FilterCriteria:
        """Criteria to filter `records` with.

        After a failed fetch the records still belong to the previous
        make/model/trim/year, so those fields are taken from the last good
        fetch instead of the pending selection.
        """
        if self.error is None or self.view_criteria is None:
            return self.criteria
        return replace(self.criteria, **dict(zip(FETCH_FIELDS, fetch_key(self.view_criteria))))

    def reset(self, criteria: FilterCriteria) -> None:
        self.criteria = criteria
        self.records = []
        self.error = None
        self.loaded = False
        self.view_criteria = None
        self._issued += 1
