"""
Test fixtures for the units analytics tests.

Provides an in-memory statistics source so tests never touch a real API,
plus dashboard and HTTP client fixtures wired to it.
"""
import asyncio
import pytest
from typing import Any, Dict, List, Optional, Tuple

from httpx import AsyncClient, ASGITransport
from units_analytics.main import app
from units_analytics.api.routes import get_dashboard
from units_analytics.clients.source_interface import AnalyticsSource
from units_analytics.models import FetchFamily, QueryParams
from units_analytics.services.dashboard_service import AnalyticsDashboard


# ── Seed data ──────────────────────────────────────────────────────────

TEST_ORG_ID = "org_1"
OTHER_ORG_ID = "org_2"
TEST_PROPERTY_ID = "prop_1"
TEST_DEBOUNCE = 0.05

# Upstream field names are deliberately mixed (aliases, partial breakdowns)
OVERVIEW_PAYLOAD = {
    "total": 20,
    "active": 18,
    "inactive": 2,
    "occupancyRate": 60.0,
    "totalRevenuePotential": 30000,
    "averageRent": 1500,
    "byStatus": {"occupied": 12, "vacant": 5, "maintenance": 1},
    "statusBreakdown": [{"name": "reserved", "value": 2}],
}

PROPERTIES_PAYLOAD = [
    {
        "propertyId": "prop_1",
        "propertyName": "Harbor View",
        "unitCount": 12,
        "occupiedCount": 8,
        "vacantCount": 3,
        "revenuePotential": 18000,
        "occupancyRate": 66.7,
    },
    {
        "id": "prop_2",
        "name": "Maple Court",
        "unitCount": 8,
        "occupiedCount": 4,
        "vacantCount": 2,
        "revenuePotential": 12000,
        "occupancyRate": 50,
    },
]

TREND_PAYLOAD = [
    {"date": "2024-01-01", "occupied": 10, "vacant": 6, "reserved": 2, "unavailable": 1, "maintenance": 1},
    {"date": "2024-02-01", "occupied": 12, "vacant": 5, "reserved": 2, "maintenance": 1},
]

DASHBOARD_PAYLOAD = {
    "overview": OVERVIEW_PAYLOAD,
    "properties": PROPERTIES_PAYLOAD,
    "trend": TREND_PAYLOAD,
}

EMPTY_PAYLOADS = {
    FetchFamily.OVERVIEW: {},
    FetchFamily.PROPERTIES: [],
    FetchFamily.TREND: [],
    FetchFamily.DASHBOARD: {},
}


class FakeAnalyticsSource(AnalyticsSource):
    """
    In-memory statistics source.

    - payloads: per-family payload, or a callable(params) -> payload
    - failures: per-family exception to raise
    - gates: organization_id -> asyncio.Event; calls for that scope block until set
    - calls: every (family, params) received, in order
    """

    def __init__(self, payloads: Optional[Dict[FetchFamily, Any]] = None):
        self.payloads: Dict[FetchFamily, Any] = {
            FetchFamily.OVERVIEW: OVERVIEW_PAYLOAD,
            FetchFamily.PROPERTIES: PROPERTIES_PAYLOAD,
            FetchFamily.TREND: TREND_PAYLOAD,
            FetchFamily.DASHBOARD: DASHBOARD_PAYLOAD,
        }
        self.payloads.update(payloads or {})
        self.failures: Dict[FetchFamily, Exception] = {}
        self.gates: Dict[Optional[str], asyncio.Event] = {}
        self.calls: List[Tuple[FetchFamily, QueryParams]] = []
        self.closed = False

    async def _serve(self, family: FetchFamily, params: QueryParams) -> Any:
        self.calls.append((family, params))
        gate = self.gates.get(params.organization_id)
        if gate is not None:
            await gate.wait()
        if family in self.failures:
            raise self.failures[family]
        payload = self.payloads[family]
        return payload(params) if callable(payload) else payload

    async def get_overview(self, params: QueryParams) -> Any:
        return await self._serve(FetchFamily.OVERVIEW, params)

    async def get_property_stats(self, params: QueryParams) -> Any:
        return await self._serve(FetchFamily.PROPERTIES, params)

    async def get_occupancy_trend(self, params: QueryParams) -> Any:
        return await self._serve(FetchFamily.TREND, params)

    async def get_dashboard(self, params: QueryParams) -> Any:
        return await self._serve(FetchFamily.DASHBOARD, params)

    async def aclose(self) -> None:
        self.closed = True

    def params_seen(self) -> List[QueryParams]:
        return [params for _, params in self.calls]


# ── Fixtures ───────────────────────────────────────────────────────────

@pytest.fixture
def source():
    return FakeAnalyticsSource()


@pytest.fixture
def empty_source():
    return FakeAnalyticsSource(payloads=EMPTY_PAYLOADS)


@pytest.fixture
async def dashboard(source):
    """Dashboard over the fake source with a short debounce window."""
    d = AnalyticsDashboard(source, debounce_seconds=TEST_DEBOUNCE)
    yield d
    await d.close()


@pytest.fixture
async def client(dashboard):
    """Async test client for the FastAPI app, bound to the fake dashboard."""
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
