"""
Canonical analytics models.
Every upstream statistics response is normalized into these shapes, so the rest
of the service never sees raw, possibly-partial JSON.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union
from enum import Enum

from .filters import ChartType, FilterState


class UnitStatus(str, Enum):
    """Closed set of unit statuses. Declaration order is the display order."""
    OCCUPIED = "occupied"
    VACANT = "vacant"
    RESERVED = "reserved"
    UNAVAILABLE = "unavailable"
    MAINTENANCE = "maintenance"


STATUS_LABELS: Dict[UnitStatus, str] = {
    UnitStatus.OCCUPIED: "Occupied",
    UnitStatus.VACANT: "Vacant",
    UnitStatus.RESERVED: "Reserved",
    UnitStatus.UNAVAILABLE: "Unavailable",
    UnitStatus.MAINTENANCE: "Maintenance",
}


class StatusCount(BaseModel):
    status: UnitStatus
    count: int = 0


class UnitStats(BaseModel):
    """Normalized overview statistics for the scope."""
    total_units: int = 0
    active_units: int = 0
    inactive_units: int = 0
    occupancy_rate: float = 0      # Percentage 0-100
    total_revenue_potential: float = 0
    average_rent: float = 0
    # Exactly one entry per UnitStatus, in UnitStatus order
    status_breakdown: List[StatusCount] = Field(
        default_factory=lambda: [StatusCount(status=s) for s in UnitStatus]
    )


class PropertyStats(BaseModel):
    """Normalized per-property statistics."""
    id: str = ""
    name: str
    unit_count: Union[int, float] = 0
    occupied_count: Union[int, float] = 0
    vacant_count: Union[int, float] = 0
    revenue_potential: Union[int, float] = 0
    occupancy_rate: Union[int, float] = 0   # Percentage as reported, not clamped


class TrendPoint(BaseModel):
    """Status counts for one reporting date. Upstream order is kept as-is."""
    date: str
    occupied: int = 0
    vacant: int = 0
    reserved: int = 0
    unavailable: int = 0
    maintenance: int = 0


class DashboardData(BaseModel):
    """Normalized combined dashboard payload."""
    overview: UnitStats = Field(default_factory=UnitStats)
    properties: List[PropertyStats] = Field(default_factory=list)
    trend: List[TrendPoint] = Field(default_factory=list)


# =========================================================================
# Fetch coordination
# =========================================================================

class FetchFamily(str, Enum):
    """The four independently fetched statistics endpoints."""
    OVERVIEW = "overview"
    PROPERTIES = "properties"
    TREND = "trend"
    DASHBOARD = "dashboard"


class FetchState(BaseModel):
    """Loading/error/data triple for one fetch family."""
    family: FetchFamily
    data: Optional[Any] = None     # Raw upstream payload (envelope removed)
    loading: bool = False
    error: Optional[str] = None
    generation: int = 0            # Filter generation the data/error belongs to


# =========================================================================
# Derived metrics & chart payloads
# =========================================================================

class StatusShare(BaseModel):
    status: UnitStatus
    label: str
    count: int
    percent: int                   # Rounded percentage of total units


class DerivedMetrics(BaseModel):
    """Composite values not returned directly by any endpoint."""
    occupied_units: int
    vacant_units: int
    reported_occupancy_rate: float
    computed_occupancy_rate: int   # occupied / total_units, rounded
    occupancy_mismatch: bool       # reported and computed rates disagree
    total_revenue_potential: float # Sum over per-property records
    status_shares: List[StatusShare]
    property_unit_shares: List[Dict[str, Any]] = Field(default_factory=list)
    has_data: bool


class ChartKind(str, Enum):
    STATUS_DISTRIBUTION = "status_distribution"
    PROPERTIES = "properties"
    REVENUE = "revenue"
    TREND = "trend"


class ChartPayload(BaseModel):
    """
    Series shaped for one chart.
    no_data=True is the explicit empty signal and always carries series=None.
    """
    chart: ChartKind
    chart_type: Optional[ChartType] = None
    category_key: Optional[str] = None
    no_data: bool = False
    series: Optional[List[Dict[str, Any]]] = None


class DashboardSnapshot(BaseModel):
    """Everything the dashboard exposes for the current filter generation."""
    filters: FilterState
    generation: int
    loading: bool
    families: Dict[FetchFamily, FetchState]
    errors: Dict[FetchFamily, str] = Field(default_factory=dict)
    overview: UnitStats
    properties: List[PropertyStats]
    trend: List[TrendPoint]
    dashboard: Optional[DashboardData] = None
    has_data: bool
    metrics: DerivedMetrics
    charts: List[ChartPayload]
