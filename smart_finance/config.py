"""Configuration for the analytics engine.

Every threshold the insight rules use lives in :class:`InsightThresholds`
so the rule set can be tuned and tested without touching the engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError

DEFAULT_TIMEZONE = "UTC"
DEFAULT_CURRENCY_SYMBOL = "$"
DEFAULT_IDEAL_SPENDING_RATIO = 0.7
UNCATEGORIZED_LABEL = "Uncategorized"


class Timeframe(str, Enum):
    """Lookback windows offered by the analytics screen."""

    SEVEN_DAYS = "7D"
    THIRTY_DAYS = "30D"
    NINETY_DAYS = "90D"
    ONE_YEAR = "1Y"

    @property
    def days(self) -> int:
        return _TIMEFRAME_DAYS[self]

    @property
    def display_name(self) -> str:
        return _TIMEFRAME_NAMES[self]

    @classmethod
    def parse(cls, value: "Timeframe | str | int") -> "Timeframe":
        """Resolve an enum member, a code such as ``"30D"`` or a day count."""

        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            for member in cls:
                if member.days == value:
                    return member
            raise ConfigurationError(f"Unsupported timeframe: {value} days")
        text = str(value).strip().upper()
        for member in cls:
            if member.value == text:
                return member
        if text.isdigit():
            return cls.parse(int(text))
        raise ConfigurationError(f"Unsupported timeframe: {value!r}")


_TIMEFRAME_DAYS = {
    Timeframe.SEVEN_DAYS: 7,
    Timeframe.THIRTY_DAYS: 30,
    Timeframe.NINETY_DAYS: 90,
    Timeframe.ONE_YEAR: 365,
}

_TIMEFRAME_NAMES = {
    Timeframe.SEVEN_DAYS: "Last 7 Days",
    Timeframe.THIRTY_DAYS: "Last 30 Days",
    Timeframe.NINETY_DAYS: "Last 3 Months",
    Timeframe.ONE_YEAR: "Last Year",
}

DEFAULT_TIMEFRAME = Timeframe.THIRTY_DAYS


@dataclass(frozen=True)
class InsightThresholds:
    """Trigger levels for the rule-based insights (percentages unless noted)."""

    spending_acceleration: float = 20.0
    budget_alert: float = 80.0
    budget_exceeded: float = 100.0
    excellent_savings: float = 20.0
    overspending: float = 0.0
    # transactions per day
    high_frequency: float = 5.0


@dataclass(frozen=True)
class AnalyticsConfig:
    timezone: str = DEFAULT_TIMEZONE
    ideal_spending_ratio: float = DEFAULT_IDEAL_SPENDING_RATIO
    uncategorized_label: str = UNCATEGORIZED_LABEL
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    thresholds: InsightThresholds = field(default_factory=InsightThresholds)

    def __post_init__(self) -> None:
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown timezone: {self.timezone!r}") from exc
        if self.ideal_spending_ratio <= 0:
            raise ConfigurationError("ideal_spending_ratio must be positive")

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_config() -> AnalyticsConfig:
    """Build an :class:`AnalyticsConfig` from ``SMART_FINANCE_*`` environment variables."""

    ratio_raw = os.getenv("SMART_FINANCE_IDEAL_SPENDING_RATIO")
    try:
        ratio = float(ratio_raw) if ratio_raw else DEFAULT_IDEAL_SPENDING_RATIO
    except ValueError as exc:
        raise ConfigurationError(
            f"SMART_FINANCE_IDEAL_SPENDING_RATIO is not a number: {ratio_raw!r}"
        ) from exc

    return AnalyticsConfig(
        timezone=os.getenv("SMART_FINANCE_TIMEZONE", DEFAULT_TIMEZONE),
        ideal_spending_ratio=ratio,
        currency_symbol=os.getenv("SMART_FINANCE_CURRENCY", DEFAULT_CURRENCY_SYMBOL),
    )
