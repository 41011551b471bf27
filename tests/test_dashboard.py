"""Tests for the analytics dashboard state and chart helpers."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from smart_finance import dashboard, synth
from smart_finance.config import Timeframe
from smart_finance.ledger import CsvTransactionSource, TransactionLedger
from smart_finance.models import SummaryMetrics

# A Tuesday; the demo transactions land on Monday 3 March.
NOW = datetime(2025, 3, 4, 12, 0)


@pytest.fixture
def demo_ledger() -> TransactionLedger:
    ledger = TransactionLedger(clock=lambda: NOW)
    synth.seed_demo_transactions(ledger, when=NOW - timedelta(days=1))
    return ledger


def test_refresh_on_construction(demo_ledger) -> None:
    board = dashboard.AnalyticsDashboard(demo_ledger, clock=lambda: NOW)

    assert board.timeframe is Timeframe.THIRTY_DAYS
    assert board.error_message is None
    assert board.result.timeframe_days == 30
    assert board.result.metrics.total_income == pytest.approx(2600.0)
    assert board.result.metrics.total_spent == pytest.approx(178.47)


def test_refresh_picks_up_ledger_changes(demo_ledger) -> None:
    board = dashboard.AnalyticsDashboard(demo_ledger, clock=lambda: NOW)
    demo_ledger.add(-21.53, "Cinema", category="entertainment", date=NOW)

    result = board.refresh()

    assert result.metrics.total_spent == pytest.approx(200.0)
    assert result is board.result


def test_change_timeframe(demo_ledger) -> None:
    demo_ledger.add(-300, "Old laptop repair", category="shopping", date=NOW - timedelta(days=20))
    board = dashboard.AnalyticsDashboard(demo_ledger, clock=lambda: NOW)
    assert board.result.metrics.total_spent == pytest.approx(478.47)

    board.change_timeframe("7D")

    assert board.timeframe is Timeframe.SEVEN_DAYS
    assert board.result.timeframe_days == 7
    assert board.result.metrics.total_spent == pytest.approx(178.47)


def test_fetch_failure_yields_empty_result(tmp_path) -> None:
    board = dashboard.AnalyticsDashboard(CsvTransactionSource(tmp_path / "missing.csv"), clock=lambda: NOW)

    assert board.error_message is not None
    assert board.error_message.startswith("Failed to load analytics:")
    assert board.result.metrics == SummaryMetrics(window_days=30)
    assert board.result.financial_insights == ()


def test_daily_spending_labels(demo_ledger) -> None:
    board = dashboard.AnalyticsDashboard(demo_ledger, Timeframe.SEVEN_DAYS, clock=lambda: NOW)
    assert board.daily_spending_chart_data == [("Mon", pytest.approx(178.47))]

    board.change_timeframe(Timeframe.THIRTY_DAYS)
    assert board.daily_spending_chart_data == [("Mar 3", pytest.approx(178.47))]


def test_category_chart_helpers(demo_ledger) -> None:
    board = dashboard.AnalyticsDashboard(demo_ledger, clock=lambda: NOW)

    categories = board.category_chart_data
    assert [row[0] for row in categories] == ["food", "bills", "transport", "entertainment"]
    assert [row[2] for row in categories] == ["blue", "green", "orange", "red"]
    assert sum(row[1] for row in categories) == pytest.approx(100.0)

    assert board.top_categories_for_chart[0] == ("food", pytest.approx(94.49))
    assert board.monthly_comparison_chart_data == [
        ("Mar 2025", pytest.approx(2600.0), pytest.approx(178.47))
    ]


def test_income_vs_expense_split(demo_ledger) -> None:
    board = dashboard.AnalyticsDashboard(demo_ledger, clock=lambda: NOW)
    split = board.income_vs_expense_data

    assert split.income == pytest.approx(2600.0)
    assert split.expenses == pytest.approx(178.47)
    assert split.savings == pytest.approx(2421.53)


def test_category_styles() -> None:
    assert dashboard.category_color("Food") == "orange"
    assert dashboard.category_icon("utilities") == "bolt.fill"
    assert dashboard.category_color("pets") == "gray"
    assert dashboard.category_icon("pets") == "tag.fill"
