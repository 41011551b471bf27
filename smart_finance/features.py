"""Normalise raw transaction records into the frame the analytics passes use."""

from __future__ import annotations

from typing import Any, Iterable

import pandas as pd

from . import utils
from .config import AnalyticsConfig

PREPARED_COLUMNS = [
    *utils.RECORD_COLUMNS,
    "day",
    "month",
    "is_income",
    "is_expense",
    "abs_amount",
]


def to_local_timestamp(value: Any, timezone: str) -> pd.Timestamp:
    """Return ``value`` as naive wall-clock time in ``timezone``.

    Naive inputs are taken to already be local; aware inputs are converted.
    """

    ts = pd.Timestamp(value)
    if ts is pd.NaT:
        return ts
    if ts.tzinfo is not None:
        ts = ts.tz_convert(timezone).tz_localize(None)
    return ts


def prepare_transactions(
    transactions: Iterable[Any] | pd.DataFrame,
    config: AnalyticsConfig | None = None,
) -> pd.DataFrame:
    """Add the day/month buckets and sign flags every aggregation needs."""

    config = config or AnalyticsConfig()
    df = utils.ensure_dataframe(transactions).reset_index(drop=True)

    df["amount"] = df["amount"].fillna(0).astype(float)
    df["date"] = pd.Series(
        [to_local_timestamp(value, config.timezone) for value in df["date"]],
        index=df.index,
        dtype="datetime64[us]",
    )
    # Microsecond resolution keeps dates outside 1677-2262 representable.
    dates = df["date"].to_numpy()
    df["day"] = pd.Series(dates.astype("datetime64[D]").astype("datetime64[us]"), index=df.index)
    df["month"] = pd.Series(dates.astype("datetime64[M]").astype("datetime64[us]"), index=df.index)

    df["category"] = df["category"].where(df["category"].notna(), config.uncategorized_label)

    df["is_income"] = df["amount"] > 0
    df["is_expense"] = df["amount"] < 0
    df["abs_amount"] = df["amount"].abs()

    return df[PREPARED_COLUMNS]
