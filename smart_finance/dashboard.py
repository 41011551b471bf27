"""Presentation-side state for the analytics screen.

:class:`AnalyticsDashboard` holds the selected timeframe and the latest
:class:`AnalyticsResult`; each refresh replaces the result wholesale. The
chart helpers reshape that result into the rows the chart widgets plot.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, NamedTuple, Protocol

from . import analytics
from .config import DEFAULT_TIMEFRAME, AnalyticsConfig, Timeframe
from .errors import DataUnavailable
from .models import AnalyticsResult, TransactionKind, TransactionRecord

logger = logging.getLogger(__name__)

CHART_COLORS = ("blue", "green", "orange", "red", "purple", "pink", "yellow", "cyan")
CATEGORY_CHART_LIMIT = 8
TOP_CATEGORY_LIMIT = 5

_CATEGORY_STYLES = {
    ("food", "dining"): ("orange", "fork.knife"),
    ("transport", "gas"): ("blue", "car.fill"),
    ("shopping",): ("purple", "bag.fill"),
    ("salary", "income"): ("green", "dollarsign.circle.fill"),
    ("bills", "utilities"): ("red", "bolt.fill"),
}
_DEFAULT_STYLE = ("gray", "tag.fill")


class RecordSource(Protocol):
    def records_for_timeframe(
        self,
        timeframe: Timeframe | str | int,
        now: datetime | None = None,
        config: AnalyticsConfig | None = None,
    ) -> list[TransactionRecord]: ...


class IncomeExpenseSplit(NamedTuple):
    income: float
    expenses: float
    savings: float


def _category_style(name: str) -> tuple[str, str]:
    key = name.lower()
    for names, style in _CATEGORY_STYLES.items():
        if key in names:
            return style
    return _DEFAULT_STYLE


def category_color(name: str) -> str:
    return _category_style(name)[0]


def category_icon(name: str) -> str:
    return _category_style(name)[1]


class AnalyticsDashboard:
    def __init__(
        self,
        source: RecordSource,
        timeframe: Timeframe | str | int = DEFAULT_TIMEFRAME,
        config: AnalyticsConfig | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source = source
        self.timeframe = Timeframe.parse(timeframe)
        self.config = config or AnalyticsConfig()
        self._clock = clock
        self.error_message: str | None = None
        self.result = AnalyticsResult.empty(self.timeframe.days)
        self.refresh()

    def refresh(self) -> AnalyticsResult:
        """Fetch the current window and recompute; fetch failures yield an empty result."""

        self.error_message = None
        try:
            records = self.source.records_for_timeframe(self.timeframe, self._clock(), self.config)
        except DataUnavailable as exc:
            logger.warning("Falling back to an empty record list: %s", exc)
            self.error_message = f"Failed to load analytics: {exc}"
            records = []

        self.result = analytics.analyze(records, self.timeframe, self.config)
        return self.result

    def change_timeframe(self, timeframe: Timeframe | str | int) -> AnalyticsResult:
        self.timeframe = Timeframe.parse(timeframe)
        return self.refresh()

    @property
    def daily_spending_chart_data(self) -> list[tuple[str, float]]:
        """(label, amount) per expense day; weekday names for the 7-day view."""

        rows = []
        for trend in self.result.spending_trends:
            if trend.kind is not TransactionKind.EXPENSE:
                continue
            if self.timeframe is Timeframe.SEVEN_DAYS:
                label = trend.date.strftime("%a")
            else:
                label = f"{trend.date:%b} {trend.date.day}"
            rows.append((label, trend.amount))
        return rows

    @property
    def category_chart_data(self) -> list[tuple[str, float, str]]:
        return [
            (insight.category, insight.percentage, CHART_COLORS[index % len(CHART_COLORS)])
            for index, insight in enumerate(self.result.category_insights[:CATEGORY_CHART_LIMIT])
        ]

    @property
    def monthly_comparison_chart_data(self) -> list[tuple[str, float, float]]:
        return [(row.month, row.income, row.expenses) for row in self.result.monthly_comparisons]

    @property
    def income_vs_expense_data(self) -> IncomeExpenseSplit:
        metrics = self.result.metrics
        savings = max(0.0, metrics.total_income - metrics.total_spent)
        return IncomeExpenseSplit(metrics.total_income, metrics.total_spent, savings)

    @property
    def top_categories_for_chart(self) -> list[tuple[str, float]]:
        return [
            (insight.category, insight.total_spent)
            for insight in self.result.category_insights[:TOP_CATEGORY_LIMIT]
        ]
