from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from car_dashboard.config import DashboardConfig
from car_dashboard.data.models import FilterCriteria, KPIComparison, ListingRecord


@dataclass
class PageContext:
    records: List[ListingRecord]
    criteria: FilterCriteria
    config: DashboardConfig
    comparison: Optional[KPIComparison] = None
