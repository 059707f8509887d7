# Models package - filter state and canonical analytics records

from .filters import (
    ViewMode,
    ChartType,
    SCOPE_FIELDS,
    QueryParams,
    FilterState,
    FilterUpdate,
)
from .unified import (
    UnitStatus,
    STATUS_LABELS,
    StatusCount,
    UnitStats,
    PropertyStats,
    TrendPoint,
    DashboardData,
    FetchFamily,
    FetchState,
    StatusShare,
    DerivedMetrics,
    ChartKind,
    ChartPayload,
    DashboardSnapshot,
)
