"""Value records exchanged between the ledger, the engine and the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class InsightTrend(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class InsightPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class TransactionRecord:
    """A single ledger entry. The sign of ``amount`` decides income vs expense."""

    amount: Decimal | float
    date: datetime
    category: str | None = None
    merchant: str | None = None
    notes: str | None = None
    payment_method: str | None = None
    id: str = field(default_factory=_new_id)

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "amount": float(self.amount),
            "date": self.date,
            "category": self.category,
            "merchant": self.merchant,
            "notes": self.notes,
            "payment_method": self.payment_method,
        }


@dataclass(frozen=True)
class SpendingTrend:
    date: datetime
    amount: float
    kind: TransactionKind


@dataclass(frozen=True)
class CategoryInsight:
    category: str
    total_spent: float
    transaction_count: int
    percentage: float
    trend: float


@dataclass(frozen=True)
class MonthlyComparison:
    month: str
    income: float
    expenses: float
    net_flow: float
    # Never computed; kept so consumers can rely on the field being present.
    previous_month_change: float = 0.0


@dataclass(frozen=True)
class FinancialInsight:
    title: str
    description: str
    value: str
    trend: InsightTrend
    priority: InsightPriority


@dataclass(frozen=True)
class SummaryMetrics:
    total_spent: float = 0.0
    total_income: float = 0.0
    average_daily_spending: float = 0.0
    spending_velocity: float = 0.0
    budget_utilization: float = 0.0
    transaction_count: int = 0
    window_days: int = 0

    @property
    def savings_rate(self) -> float:
        if self.total_income <= 0:
            return 0.0
        return (self.total_income - self.total_spent) / self.total_income * 100.0


@dataclass(frozen=True)
class AnalyticsResult:
    """Everything one refresh of the analytics screen needs, computed in one pass."""

    timeframe_days: int
    metrics: SummaryMetrics
    spending_trends: tuple[SpendingTrend, ...] = ()
    category_insights: tuple[CategoryInsight, ...] = ()
    monthly_comparisons: tuple[MonthlyComparison, ...] = ()
    financial_insights: tuple[FinancialInsight, ...] = ()

    @classmethod
    def empty(cls, timeframe_days: int) -> "AnalyticsResult":
        return cls(timeframe_days=timeframe_days, metrics=SummaryMetrics(window_days=timeframe_days))
