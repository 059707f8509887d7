"""
API Routes - Units Analytics
Filter writes, manual refresh and read-only views of the current generation.
"""
from fastapi import APIRouter, Depends, HTTPException, Response
from typing import List
from datetime import datetime

from units_analytics.clients.analytics_client import AnalyticsClient
from units_analytics.models import (
    FilterState,
    FilterUpdate,
    FetchFamily,
    FetchState,
    ChartPayload,
    DashboardSnapshot,
)
from units_analytics.services.dashboard_service import AnalyticsDashboard
from units_analytics.services.export_service import (
    ExportFamily,
    ExportUnavailableError,
    export_csv,
    export_filename,
)

router = APIRouter(prefix="/api/analytics", tags=["Units Analytics"])

# Singleton dashboard instance
_dashboard = None


def get_dashboard() -> AnalyticsDashboard:
    global _dashboard
    if _dashboard is None:
        _dashboard = AnalyticsDashboard(AnalyticsClient())
    return _dashboard


async def close_dashboard() -> None:
    global _dashboard
    if _dashboard is not None:
        await _dashboard.close()
        _dashboard = None


@router.get("/health")
async def health_check(dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    """Health check endpoint, including upstream reachability."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "upstream": await dashboard.source.health_check(),
    }


@router.get("", response_model=DashboardSnapshot)
async def get_analytics(dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    """
    Full dashboard snapshot.

    Returns: filters, per-family loading/error/data, normalized overview,
    properties and trend, derived metrics, has_data and chart payloads for
    the active view.
    """
    await dashboard.ensure_loaded()
    return dashboard.snapshot()


@router.get("/filters", response_model=FilterState)
async def get_filters(dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    return dashboard.filters


@router.patch("/filters", response_model=FilterState)
async def update_filters(update: FilterUpdate, dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    """
    Apply a partial filter change.

    Scope changes (organization, property, dates) queue a debounced refetch;
    view/chart changes do not. Changing organization clears the property.
    """
    try:
        return dashboard.set_filter(update.changes())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/filters/reset", response_model=FilterState)
async def reset_filters(dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    return dashboard.reset_filters()


@router.post("/refresh", response_model=DashboardSnapshot)
async def refresh(dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    """Re-run all four fetches now, bypassing the debounce."""
    await dashboard.refresh()
    return dashboard.snapshot()


@router.get("/families/{family}", response_model=FetchState)
async def get_family(family: FetchFamily, dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    await dashboard.ensure_loaded()
    return dashboard.family_state(family)


@router.get("/charts", response_model=List[ChartPayload])
async def get_charts(dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    """Chart payloads for the active view mode and chart type."""
    await dashboard.ensure_loaded()
    return dashboard.snapshot().charts


@router.get("/export/{family}")
async def export_family(family: ExportFamily, dashboard: AnalyticsDashboard = Depends(get_dashboard)):
    """CSV download of the normalized overview breakdown, properties or trend."""
    await dashboard.ensure_loaded()
    snapshot = dashboard.snapshot()
    try:
        content = export_csv(snapshot, family)
    except ExportUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(snapshot, family)}"'},
    )
