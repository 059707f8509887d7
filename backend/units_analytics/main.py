"""
Units Analytics API
===================
Aggregates the unit statistics endpoints into one dashboard view.

Data Sources (GET only):
- units/analytics/overview: totals, occupancy, revenue, status breakdown
- units/analytics/properties: per-property statistics
- units/analytics/occupancy-trend: status counts per reporting date
- units/analytics/dashboard: combined payload

Filter Logic:
- Scope: organization -> property (changing organization clears property), date range
- Scope changes refetch after a short debounce; view/chart changes never refetch
- Late responses from a superseded filter generation are discarded
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from units_analytics.api.routes import router, close_dashboard
from units_analytics.config import get_settings

settings = get_settings()
logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_dashboard()


app = FastAPI(
    title="Units Analytics API",
    description="""
    Analytics aggregation for the property management dashboard.

    ## Views
    - **Dashboard**: all charts
    - **Overview**: unit status distribution
    - **Properties**: per-property units/occupancy (bar, line or area) and revenue potential
    - **Trend**: occupancy status counts over time

    ## Failure model
    Each statistics family loads and fails independently. Missing or renamed
    upstream fields degrade to zero-filled defaults, never to an error.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        settings.frontend_url,  # deployed frontend
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Units Analytics API",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "running",
        "views": ["dashboard", "overview", "properties", "trend"],
    }
