"""
Period-over-period comparison tests.

Covers the previous-window arithmetic, the efficiency ratio's neutral
default, and marginal CAC / premium including the no-growth fallback.
"""
from datetime import date

import pytest

from vironax.services.efficiency_classifier import GREEN, build_efficiency_report
from vironax.services.period import PeriodWindow
from vironax.services.period_comparator import compare_periods, efficiency_ratio
from vironax.services.row_source import StaticRowSource

CUR_DAY = date(2024, 3, 8)
PREV_DAY = date(2024, 3, 1)


# ────────────────────────────────────────────
# WINDOWS
# ────────────────────────────────────────────


class TestPeriodWindow:

    def test_previous_is_adjacent_and_equal_length(self, current_window):
        prev = current_window.previous()
        assert prev.start_date == date(2024, 3, 1)
        assert prev.end_date == date(2024, 3, 7)
        assert prev.days == current_window.days == 7

    def test_single_day_window(self):
        window = PeriodWindow(date(2024, 3, 1), date(2024, 3, 1))
        assert window.days == 1
        assert window.previous() == PeriodWindow(date(2024, 2, 29), date(2024, 2, 29))

    def test_previous_crosses_month_boundary(self):
        window = PeriodWindow.from_iso("2024-03-01", "2024-03-10")
        prev = window.previous()
        assert prev.start_date == date(2024, 2, 20)
        assert prev.end_date == date(2024, 2, 29)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            PeriodWindow(date(2024, 3, 10), date(2024, 3, 1))

    def test_to_dict(self, current_window):
        assert current_window.to_dict() == {
            "start_date": "2024-03-08",
            "end_date": "2024-03-14",
            "days": 7,
        }


# ────────────────────────────────────────────
# EFFICIENCY RATIO
# ────────────────────────────────────────────


class TestEfficiencyRatio:

    def test_proportional_change(self):
        assert efficiency_ratio(25.0, 50.0) == pytest.approx(1.2)

    def test_flat_spend_is_neutral(self):
        assert efficiency_ratio(0.0, 40.0) == 1.0

    def test_flat_roas_is_neutral(self):
        assert efficiency_ratio(30.0, 0.0) == 1.0

    def test_spend_up_roas_down_is_below_one(self):
        assert efficiency_ratio(20.0, -10.0) == pytest.approx(0.75)


# ────────────────────────────────────────────
# COMPARISON
# ────────────────────────────────────────────


class TestComparePeriods:

    def _source(self, spend_row, order_b, cur_orders=120, cur_revenue=3000.0,
                prev_orders=100, prev_revenue=1600.0, cur_spend=1000.0, prev_spend=800.0):
        return StaticRowSource(
            spend=[spend_row(CUR_DAY, spend=cur_spend), spend_row(PREV_DAY, spend=prev_spend)],
            channel_b=[
                order_b(CUR_DAY, orders_count=cur_orders, revenue=cur_revenue),
                order_b(PREV_DAY, orders_count=prev_orders, revenue=prev_revenue),
            ],
        )

    def test_spend_and_roas_change(self, spend_row, order_b, current_window):
        comparison = compare_periods(current_window, self._source(spend_row, order_b))

        assert comparison.spend_change_pct == pytest.approx(25.0)
        assert comparison.roas_change_pct == pytest.approx(50.0)
        assert comparison.efficiency_ratio == pytest.approx(1.2)

    def test_marginal_cac_and_premium(self, spend_row, order_b, current_window):
        comparison = compare_periods(current_window, self._source(spend_row, order_b))

        assert comparison.incremental_spend == pytest.approx(200.0)
        assert comparison.incremental_orders == 20
        assert comparison.marginal_cac == pytest.approx(10.0)
        # average CAC 1000 / 120
        assert comparison.marginal_premium_pct == pytest.approx(20.0)

    def test_snapshots_cover_both_windows(self, spend_row, order_b, current_window):
        comparison = compare_periods(current_window, self._source(spend_row, order_b))

        assert comparison.current.window == current_window
        assert comparison.previous.window == current_window.previous()
        assert comparison.previous.overview.spend == pytest.approx(800.0)

    def test_no_order_growth_falls_back_to_average_cac(self, spend_row, order_b, current_window):
        source = self._source(spend_row, order_b, cur_orders=90, prev_orders=100)
        comparison = compare_periods(current_window, source)

        assert comparison.incremental_orders == -10
        assert comparison.marginal_cac == pytest.approx(comparison.current.overview.cac)
        assert comparison.marginal_premium_pct == pytest.approx(0.0)

    def test_empty_previous_window(self, spend_row, order_b, current_window):
        source = StaticRowSource(
            spend=[spend_row(CUR_DAY, spend=500.0)],
            channel_b=[order_b(CUR_DAY, orders_count=10, revenue=1000.0)],
        )
        comparison = compare_periods(current_window, source)

        assert comparison.spend_change_pct == 0.0
        assert comparison.roas_change_pct == 0.0
        assert comparison.efficiency_ratio == 1.0
        assert comparison.marginal_cac == pytest.approx(50.0)

    def test_empty_everything_is_neutral(self, current_window):
        comparison = compare_periods(current_window, StaticRowSource())

        assert comparison.efficiency_ratio == 1.0
        assert comparison.marginal_cac == 0
        assert comparison.marginal_premium_pct == 0

    def test_healthy_growth_classifies_green(self, spend_row, order_b, current_window):
        report = build_efficiency_report(compare_periods(current_window, self._source(spend_row, order_b)))

        assert report.status == GREEN
        assert report.average_cac == pytest.approx(1000.0 / 120)
        assert report.previous_window == current_window.previous()
