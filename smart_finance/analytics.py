"""Aggregation engine behind the analytics screen.

Every function here is a pure pass over a list of transaction records that
has already been filtered to the selected timeframe. Nothing is cached and
nothing raises for well-typed input: an empty list produces zeroed metrics
and empty collections.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import pandas as pd

from . import features, utils
from .config import DEFAULT_TIMEFRAME, AnalyticsConfig, Timeframe
from .models import (
    AnalyticsResult,
    CategoryInsight,
    FinancialInsight,
    InsightPriority,
    InsightTrend,
    MonthlyComparison,
    SpendingTrend,
    SummaryMetrics,
    TransactionKind,
)

logger = logging.getLogger(__name__)

MONTH_LABEL_FORMAT = "%b %Y"

Records = Iterable[Any] | pd.DataFrame
TimeframeLike = Timeframe | str | int


def window_days(timeframe: TimeframeLike) -> int:
    """Number of days covered by ``timeframe``; bare integers are used as-is."""

    if isinstance(timeframe, Timeframe):
        return timeframe.days
    if isinstance(timeframe, str):
        return Timeframe.parse(timeframe).days
    return max(int(timeframe), 0)


def _split_halves(frame: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
    # Odd counts put the extra row in the second half.
    ordered = frame.sort_values("date", kind="mergesort")["abs_amount"]
    midpoint = len(ordered) // 2
    return ordered.iloc[:midpoint], ordered.iloc[midpoint:]


def _spending_velocity(expenses: pd.DataFrame) -> float:
    first, second = _split_halves(expenses)
    if first.empty or second.empty:
        return 0.0
    first_total = float(first.sum())
    if first_total <= 0:
        return 0.0
    second_total = float(second.sum())
    return ((second_total - first_total) / first_total) * 100


def _category_trend(group: pd.DataFrame) -> float:
    first, second = _split_halves(group)
    if first.empty or second.empty:
        return 0.0
    first_avg = float(first.sum()) / len(first)
    if first_avg <= 0:
        return 0.0
    second_avg = float(second.sum()) / len(second)
    return ((second_avg - first_avg) / first_avg) * 100


def _basic_metrics(df: pd.DataFrame, days: int, config: AnalyticsConfig) -> SummaryMetrics:
    expenses = df.loc[df["is_expense"]]
    income = df.loc[df["is_income"]]

    total_spent = float(expenses["abs_amount"].sum())
    total_income = float(income["amount"].sum())

    average_daily = total_spent / days if days > 0 else 0.0

    ideal_spending = total_income * config.ideal_spending_ratio
    utilization = (total_spent / ideal_spending) * 100 if ideal_spending > 0 else 0.0

    return SummaryMetrics(
        total_spent=total_spent,
        total_income=total_income,
        average_daily_spending=average_daily,
        spending_velocity=_spending_velocity(expenses),
        budget_utilization=utilization,
        transaction_count=int(len(df)),
        window_days=days,
    )


def _spending_trends(df: pd.DataFrame) -> list[SpendingTrend]:
    daily_expenses = df.loc[df["is_expense"]].groupby("day")["abs_amount"].sum()
    daily_income = df.loc[df["is_income"]].groupby("day")["amount"].sum()

    trends: list[SpendingTrend] = []
    for day in sorted(set(daily_expenses.index) | set(daily_income.index)):
        spent = float(daily_expenses.get(day, 0.0))
        earned = float(daily_income.get(day, 0.0))
        when = day.to_pydatetime()
        if spent > 0:
            trends.append(SpendingTrend(date=when, amount=spent, kind=TransactionKind.EXPENSE))
        if earned > 0:
            trends.append(SpendingTrend(date=when, amount=earned, kind=TransactionKind.INCOME))
    return trends


def _category_insights(df: pd.DataFrame) -> list[CategoryInsight]:
    expenses = df.loc[df["is_expense"]]
    if expenses.empty:
        return []

    overall = float(expenses["abs_amount"].sum())
    insights: list[CategoryInsight] = []
    for category, group in expenses.groupby("category"):
        total = float(group["abs_amount"].sum())
        insights.append(
            CategoryInsight(
                category=str(category),
                total_spent=total,
                transaction_count=int(len(group)),
                percentage=(total / overall) * 100 if overall > 0 else 0.0,
                trend=_category_trend(group),
            )
        )

    insights.sort(key=lambda item: item.total_spent, reverse=True)
    return insights


def _monthly_comparisons(df: pd.DataFrame) -> list[MonthlyComparison]:
    if df.empty:
        return []

    comparisons: list[MonthlyComparison] = []
    for month, bucket in df.groupby("month"):
        income = float(bucket.loc[bucket["is_income"], "amount"].sum())
        expenses = float(bucket.loc[bucket["is_expense"], "abs_amount"].sum())
        comparisons.append(
            MonthlyComparison(
                month=month.strftime(MONTH_LABEL_FORMAT),
                income=income,
                expenses=expenses,
                net_flow=income - expenses,
            )
        )

    # Sorted on the label text, so "Apr 2025" precedes "Jan 2025".
    comparisons.sort(key=lambda row: row.month)
    return comparisons


def compute_basic_metrics(
    transactions: Records,
    timeframe: TimeframeLike = DEFAULT_TIMEFRAME,
    config: AnalyticsConfig | None = None,
) -> SummaryMetrics:
    """Totals, average daily spend, spending velocity and budget utilisation.

    ``spending_velocity`` compares the summed magnitudes of the later half of
    the date-ordered expenses with the earlier half, as a percentage.
    ``budget_utilization`` measures spend against ``ideal_spending_ratio`` of
    income.
    """

    config = config or AnalyticsConfig()
    df = features.prepare_transactions(transactions, config)
    return _basic_metrics(df, window_days(timeframe), config)


def generate_spending_trends(
    transactions: Records,
    config: AnalyticsConfig | None = None,
) -> list[SpendingTrend]:
    """Per-day expense and income totals, oldest day first, zero rows omitted."""

    config = config or AnalyticsConfig()
    return _spending_trends(features.prepare_transactions(transactions, config))


def analyze_category_insights(
    transactions: Records,
    config: AnalyticsConfig | None = None,
) -> list[CategoryInsight]:
    """Expense totals, shares and half-over-half trend per category, largest first."""

    config = config or AnalyticsConfig()
    return _category_insights(features.prepare_transactions(transactions, config))


def generate_monthly_comparisons(
    transactions: Records,
    config: AnalyticsConfig | None = None,
) -> list[MonthlyComparison]:
    config = config or AnalyticsConfig()
    return _monthly_comparisons(features.prepare_transactions(transactions, config))


def generate_financial_insights(
    metrics: SummaryMetrics,
    category_insights: Iterable[CategoryInsight],
    timeframe: TimeframeLike = DEFAULT_TIMEFRAME,
    config: AnalyticsConfig | None = None,
) -> list[FinancialInsight]:
    """Apply the fixed insight rules in order; each rule adds at most one insight."""

    config = config or AnalyticsConfig()
    limits = config.thresholds
    days = window_days(timeframe)
    insights: list[FinancialInsight] = []

    velocity = metrics.spending_velocity
    if velocity > limits.spending_acceleration:
        insights.append(
            FinancialInsight(
                title="Spending Acceleration Alert",
                description=f"Your spending has increased by {velocity:.1f}% in the recent period",
                value=utils.format_percent(velocity),
                trend=InsightTrend.NEGATIVE,
                priority=InsightPriority.HIGH,
            )
        )

    utilization = metrics.budget_utilization
    if utilization > limits.budget_alert:
        insights.append(
            FinancialInsight(
                title="Budget Alert",
                description=f"You've used {utilization:.0f}% of your recommended spending budget",
                value=utils.format_percent(utilization, decimals=0),
                trend=InsightTrend.NEGATIVE,
                priority=(
                    InsightPriority.HIGH
                    if utilization > limits.budget_exceeded
                    else InsightPriority.MEDIUM
                ),
            )
        )

    top_category = next(iter(category_insights), None)
    if top_category is not None:
        insights.append(
            FinancialInsight(
                title="Top Spending Category",
                description=(
                    f"{top_category.category} represents {top_category.percentage:.1f}% "
                    "of your total expenses"
                ),
                value=utils.format_currency(top_category.total_spent, config.currency_symbol),
                trend=InsightTrend.NEGATIVE if top_category.trend > 0 else InsightTrend.POSITIVE,
                priority=InsightPriority.MEDIUM,
            )
        )

    savings_rate = metrics.savings_rate
    if savings_rate > limits.excellent_savings:
        insights.append(
            FinancialInsight(
                title="Excellent Savings Rate",
                description=f"You're successfully saving {savings_rate:.1f}% of your income",
                value=utils.format_percent(savings_rate),
                trend=InsightTrend.POSITIVE,
                priority=InsightPriority.MEDIUM,
            )
        )
    elif savings_rate < limits.overspending:
        shortfall = abs(savings_rate)
        insights.append(
            FinancialInsight(
                title="Spending More Than Earning",
                description=f"Your expenses exceed your income by {shortfall:.1f}%",
                value=utils.format_percent(shortfall),
                trend=InsightTrend.NEGATIVE,
                priority=InsightPriority.HIGH,
            )
        )

    per_day = metrics.transaction_count / days if days > 0 else 0.0
    if per_day > limits.high_frequency:
        insights.append(
            FinancialInsight(
                title="High Transaction Frequency",
                description=f"You're making {per_day:.1f} transactions per day on average",
                value=f"{metrics.transaction_count} transactions",
                trend=InsightTrend.NEUTRAL,
                priority=InsightPriority.LOW,
            )
        )

    return insights


def analyze(
    transactions: Records,
    timeframe: TimeframeLike = DEFAULT_TIMEFRAME,
    config: AnalyticsConfig | None = None,
) -> AnalyticsResult:
    """Run every aggregation over one prepared frame and bundle the results."""

    config = config or AnalyticsConfig()
    days = window_days(timeframe)
    df = features.prepare_transactions(transactions, config)

    metrics = _basic_metrics(df, days, config)
    categories = _category_insights(df)
    result = AnalyticsResult(
        timeframe_days=days,
        metrics=metrics,
        spending_trends=tuple(_spending_trends(df)),
        category_insights=tuple(categories),
        monthly_comparisons=tuple(_monthly_comparisons(df)),
        financial_insights=tuple(generate_financial_insights(metrics, categories, days, config)),
    )

    logger.debug(
        "Analysed %d transactions over %d days: %d trend rows, %d categories, %d insights",
        metrics.transaction_count,
        days,
        len(result.spending_trends),
        len(result.category_insights),
        len(result.financial_insights),
    )
    return result
