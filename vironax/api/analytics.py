"""
Marketing Efficiency Analytics API

Endpoints for KPIs, trends, budget efficiency, diagnostics and
recommendations over a date range.
"""
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from vironax.config import get_settings
from vironax.models.base import get_db
from vironax.services.analytics_service import AnalyticsService
from vironax.services.period import PeriodWindow
from vironax.services.row_source import SqlRowSource
from vironax.utils.logger import log

settings = get_settings()

router = APIRouter(prefix="/analytics", tags=["analytics"])


def parse_date_range(
    start: Optional[str] = None,
    end: Optional[str] = None,
    days: Optional[int] = None,
    weeks: Optional[int] = None,
    months: Optional[int] = None,
    today: Optional[date] = None,
) -> PeriodWindow:
    """
    Resolve query parameters to an inclusive window.

    ``end`` defaults to today. Without ``start`` the window reaches back
    ``days`` / ``weeks`` / ``months`` from ``end`` (first match wins), or
    the configured default number of days.
    """
    try:
        end_date = date_parser.isoparse(end).date() if end else (today or date.today())
        if start:
            start_date = date_parser.isoparse(start).date()
        elif days:
            start_date = end_date - timedelta(days=days - 1)
        elif weeks:
            start_date = end_date - timedelta(days=weeks * 7 - 1)
        elif months:
            start_date = end_date - relativedelta(months=months) + timedelta(days=1)
        else:
            start_date = end_date - timedelta(days=settings.default_range_days - 1)
        return PeriodWindow(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date range: {e}")


def get_date_range(
    start: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="End date (YYYY-MM-DD), defaults to today"),
    days: Optional[int] = Query(None, ge=1, description="Trailing days ending at end"),
    weeks: Optional[int] = Query(None, ge=1, description="Trailing weeks ending at end"),
    months: Optional[int] = Query(None, ge=1, description="Trailing months ending at end"),
) -> PeriodWindow:
    return parse_date_range(start, end, days, weeks, months)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(SqlRowSource(db), currency=settings.currency)


def _respond(data, window: PeriodWindow) -> dict:
    return {
        "success": True,
        "data": jsonable_encoder(data),
        "date_range": window.to_dict(),
    }


@router.get("/overview")
async def get_overview(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Spend, orders (both channels), revenue, AOV, CAC and ROAS"""
    try:
        return _respond(service.overview(window), window)
    except Exception as e:
        log.error(f"Error getting overview: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/trends")
async def get_trends(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Daily KPI series for charts"""
    try:
        return _respond(service.daily_trends(window), window)
    except Exception as e:
        log.error(f"Error getting trends: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/dashboard")
async def get_dashboard(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    All dashboard data in one call

    Returns overview, daily trends, campaigns, countries and diagnostics.
    """
    try:
        dashboard = service.dashboard(window)
        dashboard['date_range'] = window.to_dict()
        return _respond(dashboard, window)
    except Exception as e:
        log.error(f"Error getting dashboard: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/campaigns")
async def get_campaigns(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Meta campaign metrics, highest spend first"""
    try:
        return _respond(service.campaign_metrics(window), window)
    except Exception as e:
        log.error(f"Error getting campaigns: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/campaigns/by-country")
async def get_campaigns_by_country(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Campaign metrics broken down by country"""
    try:
        return _respond(service.campaigns_by_country(window), window)
    except Exception as e:
        log.error(f"Error getting campaigns by country: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/countries")
async def get_countries(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Spend and orders per country"""
    try:
        return _respond(service.country_metrics(window), window)
    except Exception as e:
        log.error(f"Error getting countries: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/efficiency")
async def get_efficiency(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Budget efficiency vs the previous period of equal length

    Shows:
    - Overall green/yellow/red status
    - Spend and ROAS change, efficiency ratio
    - Average vs marginal CAC
    - Per-campaign and per-country status
    """
    try:
        return _respond(service.efficiency_report(window), window)
    except Exception as e:
        log.error(f"Error getting efficiency: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/efficiency/trends")
async def get_efficiency_trends(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Daily series with 3-day rolling CAC/ROAS and marginal CAC"""
    try:
        return _respond(service.efficiency_trends(window), window)
    except Exception as e:
        log.error(f"Error getting efficiency trends: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/diagnostics")
async def get_diagnostics(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Warnings and positive signals"""
    try:
        return _respond(service.diagnostics(window), window)
    except Exception as e:
        log.error(f"Error getting diagnostics: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/recommendations")
async def get_recommendations(
    window: PeriodWindow = Depends(get_date_range),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Budget actions, most urgent first"""
    try:
        return _respond(service.recommendations(window), window)
    except Exception as e:
        log.error(f"Error getting recommendations: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
