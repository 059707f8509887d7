"""Test the analytics HTTP routes."""
import pytest

from httpx import AsyncClient, ASGITransport
from units_analytics.main import app
from units_analytics.api.routes import get_dashboard
from units_analytics.models import FetchFamily, QueryParams
from units_analytics.services.dashboard_service import AnalyticsDashboard
from tests.conftest import TEST_DEBOUNCE, TEST_ORG_ID, OTHER_ORG_ID, TEST_PROPERTY_ID


@pytest.fixture
async def empty_client(empty_source):
    """Client bound to a dashboard whose upstream returns nothing."""
    dashboard = AnalyticsDashboard(empty_source, debounce_seconds=TEST_DEBOUNCE)
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await dashboard.close()


@pytest.mark.asyncio
async def test_snapshot(client):
    resp = await client.get("/api/analytics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["generation"] == 1
    assert data["has_data"] is True
    assert data["errors"] == {}
    assert data["filters"]["view_mode"] == "dashboard"
    assert data["overview"]["total_units"] == 20
    assert len(data["overview"]["status_breakdown"]) == 5
    assert set(data["families"]) == {"overview", "properties", "trend", "dashboard"}
    assert data["metrics"]["total_revenue_potential"] == 30000
    assert [c["chart"] for c in data["charts"]] == ["status_distribution", "properties", "revenue", "trend"]


@pytest.mark.asyncio
async def test_snapshot_reports_family_errors(client, source):
    source.failures[FetchFamily.TREND] = RuntimeError("trend endpoint down")
    data = (await client.get("/api/analytics")).json()
    assert data["errors"] == {"trend": "trend endpoint down"}
    assert data["trend"] == []
    assert data["charts"][3]["no_data"] is True


@pytest.mark.asyncio
async def test_get_filters_defaults(client):
    resp = await client.get("/api/analytics/filters")
    assert resp.status_code == 200
    assert resp.json() == {
        "organization_id": None,
        "property_id": None,
        "start_date": None,
        "end_date": None,
        "view_mode": "dashboard",
        "chart_type": "bar",
    }


@pytest.mark.asyncio
async def test_patch_organization_clears_property(client, dashboard, source):
    await client.patch("/api/analytics/filters", json={
        "organization_id": TEST_ORG_ID, "property_id": TEST_PROPERTY_ID,
    })
    resp = await client.patch("/api/analytics/filters", json={"organization_id": OTHER_ORG_ID})
    assert resp.status_code == 200
    assert resp.json()["organization_id"] == OTHER_ORG_ID
    assert resp.json()["property_id"] is None

    await dashboard.wait_idle()
    assert set(source.params_seen()) == {QueryParams(organization_id=OTHER_ORG_ID)}


@pytest.mark.asyncio
async def test_patch_view_mode_does_not_refetch(client, dashboard, source):
    await client.get("/api/analytics")
    resp = await client.patch("/api/analytics/filters", json={"view_mode": "trend", "chart_type": "area"})
    assert resp.json()["view_mode"] == "trend"
    await dashboard.wait_idle()
    assert len(source.calls) == len(FetchFamily)

    charts = (await client.get("/api/analytics/charts")).json()
    assert [c["chart"] for c in charts] == ["trend"]


@pytest.mark.asyncio
async def test_patch_rejects_invalid_values(client):
    resp = await client.patch("/api/analytics/filters", json={"view_mode": "pie"})
    assert resp.status_code == 422
    resp = await client.patch("/api/analytics/filters", json={"start_date": "not-a-date"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_patch_rejects_unknown_fields(client, source):
    resp = await client.patch("/api/analytics/filters", json={"timeframe": "ytd"})
    assert resp.status_code == 422
    assert source.calls == []


@pytest.mark.asyncio
async def test_reset_filters(client):
    await client.patch("/api/analytics/filters", json={"organization_id": TEST_ORG_ID, "view_mode": "overview"})
    resp = await client.post("/api/analytics/filters/reset")
    assert resp.status_code == 200
    assert resp.json()["organization_id"] is None
    assert resp.json()["view_mode"] == "overview"


@pytest.mark.asyncio
async def test_refresh_starts_new_generation(client, source):
    await client.get("/api/analytics")
    resp = await client.post("/api/analytics/refresh")
    assert resp.status_code == 200
    assert resp.json()["generation"] == 2
    assert len(source.calls) == 2 * len(FetchFamily)


@pytest.mark.asyncio
async def test_family_state(client):
    resp = await client.get("/api/analytics/families/properties")
    assert resp.status_code == 200
    data = resp.json()
    assert data["family"] == "properties"
    assert data["loading"] is False
    assert data["error"] is None
    assert len(data["data"]) == 2


@pytest.mark.asyncio
async def test_unknown_family_rejected(client):
    resp = await client.get("/api/analytics/families/leases")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_charts_follow_view_and_chart_type(client):
    await client.patch("/api/analytics/filters", json={"view_mode": "properties", "chart_type": "line"})
    charts = (await client.get("/api/analytics/charts")).json()
    assert [c["chart"] for c in charts] == ["properties", "revenue"]
    assert charts[0]["chart_type"] == "line"
    assert charts[0]["category_key"] == "name"


@pytest.mark.asyncio
async def test_export_properties_csv(client):
    resp = await client.get("/api/analytics/export/properties")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="units-analytics-properties.csv"' in resp.headers["content-disposition"]
    lines = resp.text.strip().splitlines()
    assert lines[0] == "id,name,unit_count,occupied_count,vacant_count,revenue_potential,occupancy_rate"
    assert lines[1].startswith("prop_1,Harbor View,12,8,3,")
    assert len(lines) == 3


@pytest.mark.asyncio
async def test_export_filename_carries_dates(client, dashboard):
    await client.patch("/api/analytics/filters", json={"start_date": "2024-01-01", "end_date": "2024-03-31"})
    await dashboard.wait_idle()
    resp = await client.get("/api/analytics/export/trend")
    assert 'filename="units-analytics-trend_2024-01-01_2024-03-31.csv"' in resp.headers["content-disposition"]
    assert resp.text.splitlines()[1] == "2024-01-01,10,6,2,1,1"


@pytest.mark.asyncio
async def test_export_without_data_conflicts(empty_client):
    resp = await empty_client.get("/api/analytics/export/overview")
    assert resp.status_code == 409
    assert "No analytics data" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_empty_scope_snapshot(empty_client):
    data = (await empty_client.get("/api/analytics")).json()
    assert data["has_data"] is False
    assert data["errors"] == {}
    assert all(c["no_data"] for c in data["charts"])


@pytest.mark.asyncio
async def test_view_change_then_first_read(client, source):
    await client.patch("/api/analytics/filters", json={"view_mode": "overview"})
    data = (await client.get("/api/analytics")).json()
    assert data["has_data"] is True
    assert data["charts"][0]["no_data"] is False
    assert len(source.calls) == len(FetchFamily)
