"""
Presentation adapter - shapes normalized records into chart series.
Formatting of labels/axes is the renderer's concern; this only fixes the
array/field layout each chart family expects.
"""
from typing import List, Sequence

from units_analytics.models import (
    ChartType,
    ViewMode,
    STATUS_LABELS,
    UnitStats,
    PropertyStats,
    TrendPoint,
    ChartKind,
    ChartPayload,
)
from units_analytics.services.metrics import percent_of_total


def _no_data(chart: ChartKind, chart_type: ChartType = None) -> ChartPayload:
    return ChartPayload(chart=chart, chart_type=chart_type, no_data=True, series=None)


def status_distribution(overview: UnitStats) -> ChartPayload:
    """Pie slices for statuses with a positive count; no_data when none remain."""
    slices = [entry for entry in overview.status_breakdown if entry.count > 0]
    if not slices:
        return _no_data(ChartKind.STATUS_DISTRIBUTION)

    total = sum(entry.count for entry in slices)
    return ChartPayload(
        chart=ChartKind.STATUS_DISTRIBUTION,
        category_key="status",
        series=[
            {
                "status": entry.status.value,
                "label": STATUS_LABELS[entry.status],
                "count": entry.count,
                "percent": percent_of_total(entry.count, total),
            }
            for entry in slices
        ],
    )


def property_chart(properties: Sequence[PropertyStats], chart_type: ChartType) -> ChartPayload:
    """Per-property records unchanged, keyed by `name` on the category axis."""
    if not properties:
        return _no_data(ChartKind.PROPERTIES, chart_type)
    return ChartPayload(
        chart=ChartKind.PROPERTIES,
        chart_type=chart_type,
        category_key="name",
        series=[p.model_dump() for p in properties],
    )


def revenue_chart(properties: Sequence[PropertyStats]) -> ChartPayload:
    if not properties:
        return _no_data(ChartKind.REVENUE, ChartType.BAR)
    return ChartPayload(
        chart=ChartKind.REVENUE,
        chart_type=ChartType.BAR,
        category_key="name",
        series=[{"id": p.id, "name": p.name, "revenue_potential": p.revenue_potential} for p in properties],
    )


def trend_chart(trend: Sequence[TrendPoint]) -> ChartPayload:
    """Stacked-area series in upstream date order."""
    if not trend:
        return _no_data(ChartKind.TREND, ChartType.AREA)
    return ChartPayload(
        chart=ChartKind.TREND,
        chart_type=ChartType.AREA,
        category_key="date",
        series=[point.model_dump() for point in trend],
    )


def charts_for_view(
    view_mode: ViewMode,
    chart_type: ChartType,
    overview: UnitStats,
    properties: Sequence[PropertyStats],
    trend: Sequence[TrendPoint],
) -> List[ChartPayload]:
    if view_mode == ViewMode.OVERVIEW:
        return [status_distribution(overview)]
    if view_mode == ViewMode.PROPERTIES:
        return [property_chart(properties, chart_type), revenue_chart(properties)]
    if view_mode == ViewMode.TREND:
        return [trend_chart(trend)]
    return [
        status_distribution(overview),
        property_chart(properties, chart_type),
        revenue_chart(properties),
        trend_chart(trend),
    ]
