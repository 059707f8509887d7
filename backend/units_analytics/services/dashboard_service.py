"""
Units Analytics Dashboard - filter state, fetch coordination and derived views.

Data flow:
    FilterStore -> AggregationFetcher (parallel fetch) -> normalizers
    -> derived metrics -> chart adapter

Normalized records are re-derived from the latest applied payloads on every
read, so they are replaced wholesale whenever a fetch lands.
"""
import logging
from typing import List, Optional

from units_analytics.clients.source_interface import AnalyticsSource
from units_analytics.models import (
    FilterState,
    FetchFamily,
    FetchState,
    UnitStats,
    PropertyStats,
    TrendPoint,
    DashboardData,
    DashboardSnapshot,
)
from units_analytics.services.chart_adapter import charts_for_view
from units_analytics.services.fetcher import AggregationFetcher
from units_analytics.services.filter_state import FilterStore
from units_analytics.services.metrics import derive_metrics, has_data
from units_analytics.services.normalizers import (
    normalize_overview,
    normalize_properties,
    normalize_trend,
    normalize_dashboard,
)

logger = logging.getLogger(__name__)


class AnalyticsDashboard:
    """
    Owns one filter store and one fetcher for a dashboard session.

    set_filter() is the only write surface; refresh() re-runs all fetches
    immediately. Everything else is a read of the current generation.
    """

    def __init__(
        self,
        source: AnalyticsSource,
        debounce_seconds: Optional[float] = None,
        store: Optional[FilterStore] = None,
    ):
        self.source = source
        self.store = store or FilterStore()
        self.fetcher = AggregationFetcher(
            source,
            debounce_seconds=debounce_seconds,
            initial_params=self.store.current.query_params(),
        )
        self._unsubscribe = self.store.subscribe(self._on_filter_change)

    @property
    def filters(self) -> FilterState:
        return self.store.current

    def _on_filter_change(self, state: FilterState, previous: FilterState) -> None:
        params = state.query_params()
        # view_mode/chart_type changes leave the params equal
        if params != previous.query_params():
            self.fetcher.schedule(params)

    def set_filter(self, partial: Optional[dict] = None, **changes) -> FilterState:
        return self.store.update(partial, **changes)

    def reset_filters(self) -> FilterState:
        return self.store.reset()

    async def refresh(self) -> None:
        logger.info("[ANALYTICS] Manual refresh")
        await self.fetcher.refresh(self.store.current.query_params())

    async def ensure_loaded(self) -> None:
        """
        First read triggers the initial fetch cycle.

        A scope change still waiting out its debounce counts as not loaded, so
        the read fetches the current scope immediately.
        """
        if not self.fetcher.has_started:
            await self.fetcher.refresh(self.store.current.query_params())

    async def wait_idle(self) -> None:
        await self.fetcher.wait_idle()

    async def close(self) -> None:
        self._unsubscribe()
        await self.fetcher.close()
        await self.source.aclose()

    # =====================================================================
    # Reads
    # =====================================================================

    def family_state(self, family: FetchFamily) -> FetchState:
        return self.fetcher.state(family)

    def overview(self) -> UnitStats:
        return normalize_overview(self.fetcher.state(FetchFamily.OVERVIEW).data)

    def properties(self) -> List[PropertyStats]:
        return normalize_properties(self.fetcher.state(FetchFamily.PROPERTIES).data)

    def trend(self) -> List[TrendPoint]:
        return normalize_trend(self.fetcher.state(FetchFamily.TREND).data)

    def dashboard_data(self) -> Optional[DashboardData]:
        raw = self.fetcher.state(FetchFamily.DASHBOARD).data
        if raw is None:
            return None
        return normalize_dashboard(raw)

    def has_data(self) -> bool:
        return has_data(self.overview(), self.properties(), self.trend())

    def snapshot(self) -> DashboardSnapshot:
        filters = self.store.current
        overview = self.overview()
        properties = self.properties()
        trend = self.trend()
        families = self.fetcher.states
        return DashboardSnapshot(
            filters=filters,
            generation=self.fetcher.generation,
            loading=self.fetcher.loading,
            families=families,
            errors={f: s.error for f, s in families.items() if s.error},
            overview=overview,
            properties=properties,
            trend=trend,
            dashboard=self.dashboard_data(),
            has_data=has_data(overview, properties, trend),
            metrics=derive_metrics(overview, properties, trend),
            charts=charts_for_view(filters.view_mode, filters.chart_type, overview, properties, trend),
        )
