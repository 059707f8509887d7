"""
Units analytics REST client - READ-ONLY OPERATIONS ONLY
This client only implements GET operations against the statistics endpoints.
"""
import logging
from typing import Any, Optional

import httpx

from units_analytics.clients.source_interface import AnalyticsSource
from units_analytics.config import get_settings
from units_analytics.models import QueryParams
from units_analytics.services.normalizers import extract_data

logger = logging.getLogger(__name__)

OVERVIEW_PATH = "units/analytics/overview"
PROPERTIES_PATH = "units/analytics/properties"
TREND_PATH = "units/analytics/occupancy-trend"
DASHBOARD_PATH = "units/analytics/dashboard"


class AnalyticsClient(AnalyticsSource):
    """
    httpx client for the unit statistics API.
    IMPORTANT: Only GET requests are issued.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = get_settings()
        self.base_url = base_url or self.settings.analytics_api_base_url
        if not self.base_url.endswith("/"):
            self.base_url += "/"
        token = token if token is not None else self.settings.analytics_api_token
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=timeout or self.settings.request_timeout_seconds,
            transport=transport,
        )

    async def get_overview(self, params: QueryParams) -> Any:
        """GET units/analytics/overview"""
        return await self._send_get_request(OVERVIEW_PATH, params)

    async def get_property_stats(self, params: QueryParams) -> Any:
        """GET units/analytics/properties"""
        return await self._send_get_request(PROPERTIES_PATH, params)

    async def get_occupancy_trend(self, params: QueryParams) -> Any:
        """GET units/analytics/occupancy-trend"""
        return await self._send_get_request(TREND_PATH, params)

    async def get_dashboard(self, params: QueryParams) -> Any:
        """GET units/analytics/dashboard"""
        return await self._send_get_request(DASHBOARD_PATH, params)

    async def _send_get_request(self, path: str, params: QueryParams) -> Any:
        """Send GET request and return the JSON payload without its envelope."""
        response = await self._client.get(path, params=params.to_query())
        response.raise_for_status()
        logger.debug(f"[ANALYTICS] GET {response.url} -> {response.status_code}")
        return extract_data(response.json())

    async def aclose(self) -> None:
        await self._client.aclose()
