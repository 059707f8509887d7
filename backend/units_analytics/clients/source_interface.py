"""
Abstract statistics source - the four read-only analytics endpoints.
Implementations: AnalyticsClient (HTTP). Tests plug in an in-memory source.
"""
from abc import ABC, abstractmethod
from typing import Any

from units_analytics.models import FetchFamily, QueryParams


class AnalyticsSource(ABC):
    """
    Abstract interface for unit statistics providers.

    Every method returns the raw payload (envelope removed) and raises on
    transport/HTTP failure. Shape conformance is NOT guaranteed; callers
    normalize.
    """

    @abstractmethod
    async def get_overview(self, params: QueryParams) -> Any:
        """
        Overview statistics for the scope.

        Returns:
            Object with some of: totalUnits|total, activeUnits|active,
            inactiveUnits|inactive, occupancyRate, totalRevenuePotential,
            averageRent, byStatus (map), statusBreakdown (list of {name, value})
        """
        pass

    @abstractmethod
    async def get_property_stats(self, params: QueryParams) -> Any:
        """
        Per-property statistics.

        Returns:
            Array (or a bare object for single-property scopes) with:
            propertyId|id, propertyName|name, unitCount, occupiedCount,
            vacantCount, revenuePotential, occupancyRate
        """
        pass

    @abstractmethod
    async def get_occupancy_trend(self, params: QueryParams) -> Any:
        """
        Occupancy trend series.

        Returns:
            Array (or bare object) of {date, occupied, vacant, reserved,
            unavailable, maintenance}
        """
        pass

    @abstractmethod
    async def get_dashboard(self, params: QueryParams) -> Any:
        """
        Combined payload.

        Returns:
            Object with {overview, properties, trend}
        """
        pass

    async def fetch(self, family: FetchFamily, params: QueryParams) -> Any:
        """Dispatch to the endpoint backing a fetch family."""
        if family == FetchFamily.OVERVIEW:
            return await self.get_overview(params)
        if family == FetchFamily.PROPERTIES:
            return await self.get_property_stats(params)
        if family == FetchFamily.TREND:
            return await self.get_occupancy_trend(params)
        return await self.get_dashboard(params)

    async def health_check(self) -> dict:
        """
        Verify connectivity to the statistics API.

        Returns:
            Dict with:
            - status: str (ok, error)
            - message: Optional[str]
        """
        try:
            await self.get_overview(QueryParams())
            return {"status": "ok"}
        except Exception as e:
            return {"status": "error", "message": str(e)}

    async def aclose(self) -> None:
        """Release any held connections."""
        return None
