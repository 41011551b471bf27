"""Shared utilities for Smart Finance."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any, Iterable, Mapping

import pandas as pd

RECORD_COLUMNS = ["id", "amount", "date", "category", "merchant", "notes", "payment_method"]


def _as_mapping(item: Any) -> Mapping[str, Any]:
    if hasattr(item, "as_dict"):
        return item.as_dict()
    if is_dataclass(item) and not isinstance(item, type):
        return asdict(item)
    return item


def ensure_dataframe(transactions: Iterable[Any] | pd.DataFrame) -> pd.DataFrame:
    """Normalise records, mappings or a frame to a :class:`pandas.DataFrame`.

    The result always carries the ledger columns, even when empty.
    """

    if isinstance(transactions, pd.DataFrame):
        df = transactions.copy()
    else:
        df = pd.DataFrame([_as_mapping(item) for item in transactions])

    for column in RECORD_COLUMNS:
        if column not in df:
            df[column] = None
    return df


def format_currency(value: float, currency: str = "$") -> str:
    """Return a human-readable currency string such as ``$1,234.56``."""

    if value < 0:
        return f"-{currency}{abs(value):,.2f}"
    return f"{currency}{value:,.2f}"


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"
