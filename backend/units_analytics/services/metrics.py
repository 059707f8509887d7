"""
Derived metrics - composite values computed from the normalized records.
Pure functions; nothing here touches the network or the filter state.
"""
import math
from typing import List, Sequence

from units_analytics.models import (
    UnitStatus,
    STATUS_LABELS,
    StatusCount,
    UnitStats,
    PropertyStats,
    TrendPoint,
    StatusShare,
    DerivedMetrics,
)

# Allowed gap (percentage points) between reported and computed occupancy
OCCUPANCY_TOLERANCE = 1.0


def status_count(breakdown: Sequence[StatusCount], status) -> int:
    """Count for `status` in the breakdown, 0 when absent or unknown."""
    name = status.value if isinstance(status, UnitStatus) else status
    for entry in breakdown or []:
        if entry.status.value == name:
            return entry.count
    return 0


def percent_of_total(value: float, total: float) -> int:
    """value / total as a whole percentage, halves rounded up; 0 when total is 0."""
    if not total:
        return 0
    return math.floor(value / total * 100 + 0.5)


def has_data(overview: UnitStats, properties: Sequence[PropertyStats], trend: Sequence[TrendPoint]) -> bool:
    """Renderable if any of the three views has something to show."""
    return overview.total_units > 0 or len(properties) > 0 or len(trend) > 0


def computed_occupancy_rate(overview: UnitStats) -> int:
    """Occupancy derived from the status breakdown, to cross-check the reported rate."""
    return percent_of_total(status_count(overview.status_breakdown, UnitStatus.OCCUPIED), overview.total_units)


def occupancy_mismatch(overview: UnitStats, tolerance: float = OCCUPANCY_TOLERANCE) -> bool:
    if overview.total_units == 0:
        return False
    return abs(overview.occupancy_rate - computed_occupancy_rate(overview)) > tolerance


def total_revenue_potential(properties: Sequence[PropertyStats]) -> float:
    return sum(p.revenue_potential for p in properties)


def status_shares(overview: UnitStats) -> List[StatusShare]:
    """Each status as a percentage of total units, in status order."""
    return [
        StatusShare(
            status=status,
            label=STATUS_LABELS[status],
            count=status_count(overview.status_breakdown, status),
            percent=percent_of_total(status_count(overview.status_breakdown, status), overview.total_units),
        )
        for status in UnitStatus
    ]


def property_unit_shares(properties: Sequence[PropertyStats]) -> List[dict]:
    """Each property's share of all units in scope."""
    total = sum(p.unit_count for p in properties)
    return [
        {"id": p.id, "name": p.name, "unit_count": p.unit_count, "percent": percent_of_total(p.unit_count, total)}
        for p in properties
    ]


def derive_metrics(
    overview: UnitStats,
    properties: Sequence[PropertyStats],
    trend: Sequence[TrendPoint],
) -> DerivedMetrics:
    return DerivedMetrics(
        occupied_units=status_count(overview.status_breakdown, UnitStatus.OCCUPIED),
        vacant_units=status_count(overview.status_breakdown, UnitStatus.VACANT),
        reported_occupancy_rate=overview.occupancy_rate,
        computed_occupancy_rate=computed_occupancy_rate(overview),
        occupancy_mismatch=occupancy_mismatch(overview),
        total_revenue_potential=total_revenue_potential(properties),
        status_shares=status_shares(overview),
        property_unit_shares=property_unit_shares(properties),
        has_data=has_data(overview, properties, trend),
    )
