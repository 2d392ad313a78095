"""
Read-only access to the hosted listings table.

The store is a Supabase (PostgREST) table; this module only issues simple
equality and range queries and turns rows into ListingRecord values.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from car_dashboard.config import StoreSettings
from car_dashboard.data.filters import FETCH_FIELDS, unique_values
from car_dashboard.data.models import FilterCriteria, ListingRecord
from car_dashboard.errors import ConfigurationError, FetchError
from car_dashboard.logger import get_logger

logger = get_logger("data.gateway")

CASCADE_FIELDS = FETCH_FIELDS
ORDER_COLUMN = "date_listed"


class ListingGateway:
    """Fetches listing pages and dropdown values from the listings table."""

    def __init__(self, settings: StoreSettings, client: Any = None):
        self._settings = settings
        self._client = client  # Lazy init

    def _get_client(self):
        if self._client is not None:
            return self._client
        if not self._settings.url or not self._settings.key:
            raise ConfigurationError(
                "SUPABASE_URL / SUPABASE_KEY must be set in the environment, "
                ".env or Streamlit secrets."
            )
        from supabase import create_client

        self._client = create_client(self._settings.url, self._settings.key)
        logger.info("Connected to listings store: %s", self._settings.url)
        return self._client

    def _execute(self, query, what: str) -> List[Dict[str, Any]]:
        try:
            response = query.execute()
        except Exception as exc:
            logger.error("Listing store query failed (%s): %s", what, exc)
            raise FetchError(f"Failed to fetch {what}: {exc}") from exc
        return list(response.data or [])

    def _table(self):
        try:
            return self._get_client().table(self._settings.table)
        except ConfigurationError:
            raise
        except Exception as exc:
            raise FetchError(f"Could not open table {self._settings.table}: {exc}") from exc

    @staticmethod
    def _apply_equality(query, constraints: Dict[str, Optional[str]]):
        for column, value in constraints.items():
            if value:
                query = query.eq(column, value)
        return query

    def fetch_page(
        self,
        offset: int,
        limit: int,
        criteria: Optional[FilterCriteria] = None,
    ) -> List[ListingRecord]:
        """At most `limit` listings starting at `offset`.

        Rows are ordered by the `date_listed` column descending. The column holds
        `d/m/yy` text, so this is a stable text order for paging, not calendar order.
        """
        if limit <= 0:
            return []
        query = self._table().select("*")
        if criteria is not None:
            query = self._apply_equality(query, {f: getattr(criteria, f) for f in CASCADE_FIELDS})
        query = query.order(ORDER_COLUMN, desc=True).range(offset, offset + limit - 1)
        rows = self._execute(query, f"listings {offset}-{offset + limit - 1}")
        return [ListingRecord.from_row(row) for row in rows[:limit]]

    def fetch_all(
        self,
        criteria: Optional[FilterCriteria] = None,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> List[ListingRecord]:
        """Page through the table until a short page or the page cap.

        The store orders by the `date_listed` text column, so when the cap is
        hit the rows kept are the first in that text order, not necessarily
        the newest listings.
        """
        page_size = page_size or self._settings.page_size
        max_pages = max_pages or self._settings.max_pages
        records: List[ListingRecord] = []
        for page in range(max_pages):
            batch = self.fetch_page(page * page_size, page_size, criteria)
            records.extend(batch)
            if len(batch) < page_size:
                break
        else:
            logger.warning(
                "Stopped after %d pages of %d; remaining listings (by %s text order) were not fetched",
                max_pages,
                page_size,
                ORDER_COLUMN,
            )
        logger.info("Fetched %d listings", len(records))
        return records

    def _distinct_rows(self, constraints: Dict[str, str]) -> List[ListingRecord]:
        """Every make/model/trim/year row matching `constraints`, paged like fetch_all."""
        page_size = self._settings.page_size
        max_pages = self._settings.max_pages
        columns = ",".join(CASCADE_FIELDS)
        records: List[ListingRecord] = []
        for page in range(max_pages):
            offset = page * page_size
            query = self._apply_equality(self._table().select(columns), constraints)
            query = query.order(ORDER_COLUMN, desc=True).range(offset, offset + page_size - 1)
            rows = self._execute(query, f"distinct values {constraints} {offset}-{offset + page_size - 1}")
            records.extend(ListingRecord.from_row(row) for row in rows)
            if len(rows) < page_size:
                break
        else:
            logger.warning(
                "Dropdown values for %s built from the first %d rows only",
                constraints or "all listings",
                len(records),
            )
        return records

    def fetch_distinct_values(self, partial_criteria: Optional[FilterCriteria] = None) -> Dict[str, List[str]]:
        """Distinct make/model/trim/year values for cascading dropdowns.

        Each field's options are constrained by the other fields already set,
        so a selected make still lists every make available for the rest.
        """
        criteria = partial_criteria or FilterCriteria()
        selected = {f: getattr(criteria, f) for f in CASCADE_FIELDS}

        fetched: Dict[Tuple[Tuple[str, str], ...], List[ListingRecord]] = {}
        values: Dict[str, List[str]] = {}
        for field in CASCADE_FIELDS:
            constraints = {k: v for k, v in selected.items() if k != field and v}
            cache_key = tuple(sorted(constraints.items()))
            if cache_key not in fetched:
                fetched[cache_key] = self._distinct_rows(constraints)
            values[field] = unique_values(fetched[cache_key], field)
        return values
