"""
Filter models for the units analytics dashboard.
The filter state is the single input that drives every analytics fetch.
"""
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Dict, Optional
from datetime import date
from enum import Enum


class ViewMode(str, Enum):
    """Which analytics view is active."""
    DASHBOARD = "dashboard"
    OVERVIEW = "overview"
    PROPERTIES = "properties"
    TREND = "trend"


class ChartType(str, Enum):
    """Chart family used for the per-property view."""
    BAR = "bar"
    LINE = "line"
    AREA = "area"


SCOPE_FIELDS = ("organization_id", "property_id", "start_date", "end_date")


class QueryParams(BaseModel):
    """Scope-only projection of the filter state sent to every statistics endpoint."""
    model_config = ConfigDict(frozen=True)

    organization_id: Optional[str] = None
    property_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def to_query(self) -> Dict[str, str]:
        """Wire form: camelCase keys, unset fields omitted."""
        query = {}
        if self.organization_id:
            query["organizationId"] = self.organization_id
        if self.property_id:
            query["propertyId"] = self.property_id
        if self.start_date:
            query["startDate"] = self.start_date.isoformat()
        if self.end_date:
            query["endDate"] = self.end_date.isoformat()
        return query


class FilterState(BaseModel):
    """Active scope plus the view/chart selection. Immutable; every update yields a new state."""
    model_config = ConfigDict(frozen=True)

    organization_id: Optional[str] = None
    property_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    view_mode: ViewMode = ViewMode.DASHBOARD
    chart_type: ChartType = ChartType.BAR

    @field_validator("organization_id", "property_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        # Selects emit "" for the "all" option
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def query_params(self) -> QueryParams:
        return QueryParams(**{field: getattr(self, field) for field in SCOPE_FIELDS})


class FilterUpdate(BaseModel):
    """
    Partial filter change as received from the filter UI.

    Only fields explicitly present are applied, so an explicit null clears
    a scope field while an omitted field leaves it untouched.
    """
    model_config = ConfigDict(extra="forbid")

    organization_id: Optional[str] = None
    property_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    view_mode: Optional[ViewMode] = None
    chart_type: Optional[ChartType] = None

    def changes(self) -> dict:
        changes = self.model_dump(exclude_unset=True)
        # view/chart selection cannot be cleared, only replaced
        for key in ("view_mode", "chart_type"):
            if key in changes and changes[key] is None:
                changes.pop(key)
        return changes
