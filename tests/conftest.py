"""
Shared fixtures.

Row and record factories for the pure-computation tests, plus an in-memory
SQLite session and a FastAPI TestClient wired to it for the store/API tests.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import vironax.models  # noqa: F401  (registers tables on Base.metadata)
from vironax.main import app
from vironax.models.base import Base, get_db
from vironax.services.efficiency_classifier import (
    GREEN,
    CampaignEfficiency,
    CountryScaling,
    EfficiencyReport,
)
from vironax.services.metrics_aggregator import CampaignMetric, CountryMetric, OverviewKPI
from vironax.services.period import PeriodWindow
from vironax.services.row_source import (
    AGGREGATE_COUNTRY,
    ChannelAOrderRow,
    ChannelBOrderRow,
    SpendRow,
)

# Current window used across tests: 7 days, previous = 2024-03-01..07
CURRENT_WINDOW = PeriodWindow(date(2024, 3, 8), date(2024, 3, 14))


# ---------------------------------------------------------------------------
# Raw rows
# ---------------------------------------------------------------------------

def _spend_row(day, campaign_id="c1", campaign_name="Prospecting", country=AGGREGATE_COUNTRY, **values):
    return SpendRow(date=day, campaign_id=campaign_id, campaign_name=campaign_name, country=country, **values)


def _order_a(day, country="SA", order_total=100.0):
    return ChannelAOrderRow(date=day, country=country, order_total=order_total)


def _order_b(day, country="SA", orders_count=1, revenue=100.0):
    return ChannelBOrderRow(date=day, country=country, orders_count=orders_count, revenue=revenue)


@pytest.fixture
def spend_row():
    return _spend_row


@pytest.fixture
def order_a():
    return _order_a


@pytest.fixture
def order_b():
    return _order_b


# ---------------------------------------------------------------------------
# Aggregated records
# ---------------------------------------------------------------------------

def _campaign(**overrides) -> CampaignMetric:
    values = dict(
        campaign_id="c1",
        campaign_name="Prospecting",
        spend=700.0,
        impressions=50000,
        reach=20000,
        clicks=1000,
        landing_page_views=800,
        add_to_cart=0,
        checkouts_initiated=0,
        conversions=20,
        conversion_value=2100.0,
        frequency=1.5,
        cpm=14.0,
        cpc=0.7,
        ctr=2.0,
        cr=2.0,
        meta_roas=3.0,
        meta_aov=105.0,
        meta_cac=35.0,
    )
    values.update(overrides)
    return CampaignMetric(**values)


def _country(**overrides) -> CountryMetric:
    values = dict(
        code="SA",
        name="Saudi Arabia",
        spend=500.0,
        channel_a_orders=10,
        channel_b_orders=0,
        channel_a_revenue=1000.0,
        channel_b_revenue=0.0,
        total_orders=10,
        total_revenue=1000.0,
        aov=100.0,
        cac=50.0,
        roas=2.0,
    )
    values.update(overrides)
    return CountryMetric(**values)


def _overview(**overrides) -> OverviewKPI:
    values = dict(
        spend=0.0,
        orders=0,
        channel_a_orders=0,
        channel_b_orders=0,
        revenue=0.0,
        aov=0.0,
        cac=0.0,
        roas=0.0,
    )
    values.update(overrides)
    return OverviewKPI(**values)


def _campaign_efficiency(campaign=None, status=GREEN, cpm_change_pct=0.0, ctr_change_pct=0.0,
                         marginal_cac=None, has_previous=True) -> CampaignEfficiency:
    campaign = campaign or _campaign()
    return CampaignEfficiency(
        campaign=campaign,
        status=status,
        cpm_change_pct=cpm_change_pct,
        ctr_change_pct=ctr_change_pct,
        marginal_cac=campaign.meta_cac if marginal_cac is None else marginal_cac,
        has_previous=has_previous,
    )


def _country_scaling(country=None, status=GREEN, headroom="Can scale +40%", cac_change_pct=0.0) -> CountryScaling:
    return CountryScaling(
        country=country or _country(),
        status=status,
        headroom=headroom,
        cac_change_pct=cac_change_pct,
        has_previous=True,
    )


def _report(campaigns=(), countries=(), current=None, previous=None, window=CURRENT_WINDOW,
            status=GREEN, spend_change_pct=0.0, roas_change_pct=0.0, efficiency_ratio=1.0,
            marginal_cac=0.0, marginal_premium_pct=50.0) -> EfficiencyReport:
    current = current or _overview()
    return EfficiencyReport(
        status=status,
        window=window,
        previous_window=window.previous(),
        current=current,
        previous=previous or _overview(),
        spend_change_pct=spend_change_pct,
        roas_change_pct=roas_change_pct,
        efficiency_ratio=efficiency_ratio,
        average_cac=current.cac,
        marginal_cac=marginal_cac,
        marginal_premium_pct=marginal_premium_pct,
        campaigns=tuple(campaigns),
        countries=tuple(countries),
    )


@pytest.fixture
def make_campaign():
    return _campaign


@pytest.fixture
def make_country():
    return _country


@pytest.fixture
def make_overview():
    return _overview


@pytest.fixture
def make_campaign_efficiency():
    return _campaign_efficiency


@pytest.fixture
def make_country_scaling():
    return _country_scaling


@pytest.fixture
def make_report():
    return _report


@pytest.fixture
def current_window():
    return CURRENT_WINDOW


# ---------------------------------------------------------------------------
# Database / API
# ---------------------------------------------------------------------------

@pytest.fixture
def db_session():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
