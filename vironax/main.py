"""
VironaX Marketing Efficiency API
Main FastAPI application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from vironax.config import get_settings
from vironax.utils.logger import log
from vironax import __version__

# Import routers
from vironax.api import analytics, health, manual, salla

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    # Initialize database
    try:
        from vironax.models.base import init_db
        init_db()
        log.info("Database initialized")
    except Exception as e:
        log.error(f"Database initialization error: {str(e)}")

    yield

    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    Marketing efficiency analytics for Meta ad spend against Salla and
    manually entered orders.

    - KPIs and daily trends (spend, orders, revenue, AOV, CAC, ROAS)
    - Campaign and country breakdowns
    - Period-over-period budget efficiency with marginal CAC
    - Diagnostics (creative fatigue, low CTR, cart abandonment, attribution gaps)
    - Prioritized budget recommendations
    """,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(analytics.router)
app.include_router(manual.router)
app.include_router(salla.router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "overview": "GET /analytics/overview",
            "trends": "GET /analytics/trends",
            "dashboard": "GET /analytics/dashboard",
            "campaigns": "GET /analytics/campaigns",
            "campaigns_by_country": "GET /analytics/campaigns/by-country",
            "countries": "GET /analytics/countries",
            "efficiency": "GET /analytics/efficiency",
            "efficiency_trends": "GET /analytics/efficiency/trends",
            "diagnostics": "GET /analytics/diagnostics",
            "recommendations": "GET /analytics/recommendations",
            "manual_orders": "GET /manual",
            "add_manual_order": "POST /manual",
            "manual_bulk_delete": "POST /manual/delete-bulk",
            "manual_summary": "GET /manual/summary",
            "salla_orders": "GET /salla/orders",
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "vironax.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
