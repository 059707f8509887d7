"""
Response normalizers - raw statistics JSON in, canonical records out.

The upstream API is inconsistent about field names (`total` vs `totalUnits`,
`propertyName` vs `name`, ...) and about shape (bare object vs array). All of
that is absorbed here: each normalizer is total over "any JSON value or None"
and degrades to zero-filled defaults instead of raising, so the dashboard stays
renderable through partial outages and schema drift.
"""
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from units_analytics.models import (
    UnitStatus,
    StatusCount,
    UnitStats,
    PropertyStats,
    TrendPoint,
    DashboardData,
)

UNKNOWN_PROPERTY_NAME = "Unknown Property"

# Canonical field -> upstream names, tried in order
OVERVIEW_FIELDS: Dict[str, Sequence[str]] = {
    "total_units": ("totalUnits", "total", "total_units"),
    "active_units": ("activeUnits", "active", "active_units"),
    "inactive_units": ("inactiveUnits", "inactive", "inactive_units"),
    "occupancy_rate": ("occupancyRate", "occupancy_rate"),
    "total_revenue_potential": ("totalRevenuePotential", "total_revenue_potential"),
    "average_rent": ("averageRent", "average_rent"),
}

PROPERTY_ID_FIELDS = ("propertyId", "id", "property_id")
PROPERTY_NAME_FIELDS = ("propertyName", "name", "property_name")
PROPERTY_FIELDS: Dict[str, Sequence[str]] = {
    "unit_count": ("unitCount", "unit_count", "totalUnits"),
    "occupied_count": ("occupiedCount", "occupied_count"),
    "vacant_count": ("vacantCount", "vacant_count"),
    "revenue_potential": ("revenuePotential", "revenue_potential"),
    "occupancy_rate": ("occupancyRate", "occupancy_rate"),
}


def extract_data(response: Any) -> Any:
    """Unwrap a `{"data": ...}` envelope; any other body is the payload itself."""
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response


def ensure_list(raw: Any) -> List[Any]:
    """Single object -> one-element list, list -> itself, anything else -> []."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    if isinstance(raw, dict):
        return [raw]
    return []


def _as_mapping(raw: Any) -> dict:
    return raw if isinstance(raw, dict) else {}


def _to_number(value: Any) -> Optional[float]:
    """Numeric value of a JSON scalar, or None when it is not a usable number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        cleaned = value.replace("$", "").replace(",", "").strip()
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _coalesce(raw: dict, names: Iterable[str]) -> float:
    """First non-zero numeric value among `names`, else 0."""
    for name in names:
        number = _to_number(raw.get(name))
        if number:
            return number
    return 0


def _coalesce_text(raw: dict, names: Iterable[str]) -> Optional[str]:
    for name in names:
        value = raw.get(name)
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _count(value: float) -> int:
    return max(0, int(value))


def _amount(value: float) -> float:
    return max(0.0, float(value))


def _rate(value: float) -> float:
    return min(100.0, max(0.0, float(value)))


def _passthrough(value: float) -> Union[int, float]:
    # Whole numbers stay ints so "12" and 12 read the same
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _breakdown_entry_count(entries: List[Any], status: UnitStatus) -> float:
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if (entry.get("name") or entry.get("status")) != status.value:
            continue
        number = _to_number(entry.get("value", entry.get("count")))
        if number:
            return number
    return 0


def _status_count(status: UnitStatus, by_status: dict, entries: List[Any]) -> int:
    # byStatus map first, then the upstream breakdown list, then 0
    number = _to_number(by_status.get(status.value))
    if number:
        return _count(number)
    return _count(_breakdown_entry_count(entries, status))


def normalize_overview(raw: Any) -> UnitStats:
    """Overview statistics with a status breakdown rebuilt over every UnitStatus."""
    raw = _as_mapping(raw)
    by_status = _as_mapping(raw.get("byStatus"))
    entries = raw.get("statusBreakdown")
    entries = entries if isinstance(entries, list) else []

    return UnitStats(
        total_units=_count(_coalesce(raw, OVERVIEW_FIELDS["total_units"])),
        active_units=_count(_coalesce(raw, OVERVIEW_FIELDS["active_units"])),
        inactive_units=_count(_coalesce(raw, OVERVIEW_FIELDS["inactive_units"])),
        occupancy_rate=_rate(_coalesce(raw, OVERVIEW_FIELDS["occupancy_rate"])),
        total_revenue_potential=_amount(_coalesce(raw, OVERVIEW_FIELDS["total_revenue_potential"])),
        average_rent=_amount(_coalesce(raw, OVERVIEW_FIELDS["average_rent"])),
        status_breakdown=[
            StatusCount(status=status, count=_status_count(status, by_status, entries))
            for status in UnitStatus
        ],
    )


def _normalize_property(raw: dict) -> PropertyStats:
    # Numbers pass through as reported; only missing or non-numeric values become 0
    numbers = {field: _passthrough(_coalesce(raw, names)) for field, names in PROPERTY_FIELDS.items()}
    return PropertyStats(
        id=_coalesce_text(raw, PROPERTY_ID_FIELDS) or "",
        name=_coalesce_text(raw, PROPERTY_NAME_FIELDS) or UNKNOWN_PROPERTY_NAME,
        **numbers,
    )


def normalize_properties(raw: Any) -> List[PropertyStats]:
    """Per-property statistics; accepts a bare object or an array."""
    return [_normalize_property(item) for item in ensure_list(raw) if isinstance(item, dict)]


def _normalize_trend_point(raw: dict) -> TrendPoint:
    counts = {status.value: _count(_coalesce(raw, (status.value,))) for status in UnitStatus}
    return TrendPoint(date=_coalesce_text(raw, ("date",)) or "", **counts)


def normalize_trend(raw: Any) -> List[TrendPoint]:
    """Occupancy trend points in upstream order; accepts a bare object or an array."""
    return [_normalize_trend_point(item) for item in ensure_list(raw) if isinstance(item, dict)]


def normalize_dashboard(raw: Any) -> DashboardData:
    raw = _as_mapping(raw)
    return DashboardData(
        overview=normalize_overview(raw.get("overview")),
        properties=normalize_properties(raw.get("properties")),
        trend=normalize_trend(raw.get("trend")),
    )
