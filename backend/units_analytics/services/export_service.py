"""
Export Service - CSV downloads of the normalized analytics records.
"""
import logging
from enum import Enum
from typing import Dict, List

import pandas as pd

from units_analytics.models import DashboardSnapshot

logger = logging.getLogger(__name__)


class ExportFamily(str, Enum):
    OVERVIEW = "overview"
    PROPERTIES = "properties"
    TREND = "trend"


EXPORT_COLUMNS: Dict[ExportFamily, List[str]] = {
    ExportFamily.OVERVIEW: ["status", "label", "count", "percent"],
    ExportFamily.PROPERTIES: [
        "id", "name", "unit_count", "occupied_count", "vacant_count",
        "revenue_potential", "occupancy_rate",
    ],
    ExportFamily.TREND: ["date", "occupied", "vacant", "reserved", "unavailable", "maintenance"],
}


class ExportUnavailableError(Exception):
    """Raised when there is nothing to export for the current scope."""


def _rows(snapshot: DashboardSnapshot, family: ExportFamily) -> List[dict]:
    if family == ExportFamily.OVERVIEW:
        return [share.model_dump(mode="json") for share in snapshot.metrics.status_shares]
    if family == ExportFamily.PROPERTIES:
        return [p.model_dump() for p in snapshot.properties]
    return [t.model_dump() for t in snapshot.trend]


def export_csv(snapshot: DashboardSnapshot, family: ExportFamily) -> str:
    """Render one family of the snapshot as CSV text."""
    if not snapshot.has_data:
        raise ExportUnavailableError("No analytics data to export for the current filters")

    df = pd.DataFrame(_rows(snapshot, family), columns=EXPORT_COLUMNS[family])
    logger.info(f"[EXPORT] {family.value}: {len(df)} rows")
    return df.to_csv(index=False)


def export_filename(snapshot: DashboardSnapshot, family: ExportFamily) -> str:
    """e.g. units-analytics-trend_2024-01-01_2024-03-31.csv"""
    parts = [f"units-analytics-{family.value}"]
    if snapshot.filters.start_date:
        parts.append(snapshot.filters.start_date.isoformat())
    if snapshot.filters.end_date:
        parts.append(snapshot.filters.end_date.isoformat())
    return "_".join(parts) + ".csv"
