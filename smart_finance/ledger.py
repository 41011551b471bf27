"""In-memory transaction ledger and CSV-backed record sources.

This is the data-access side of the app: it owns validation, search and the
timeframe window, and hands plain :class:`TransactionRecord` lists to the
analytics engine.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Iterable, Iterator

import pandas as pd

from . import features, utils
from .config import AnalyticsConfig, Timeframe
from .errors import DataUnavailable, InvalidTransaction, PersistenceWriteFailed, TransactionNotFound
from .models import TransactionRecord

logger = logging.getLogger(__name__)

MAX_ABS_AMOUNT = 1_000_000
DEFAULT_CATEGORY = "General"
ALL_CATEGORIES = "All"
TEXT_COLUMNS = ("id", "category", "merchant", "notes", "payment_method")


def validate_transaction(amount: Decimal | float, description: str | None) -> None:
    """Raise :class:`InvalidTransaction` unless the amount and description are usable."""

    if not math.isfinite(float(amount)):
        raise InvalidTransaction(f"Amount must be a finite number, got {amount}")
    if amount == 0 or abs(amount) >= MAX_ABS_AMOUNT:
        raise InvalidTransaction(
            f"Amount must be non-zero and below {MAX_ABS_AMOUNT:,} in magnitude, got {amount}"
        )
    if not (description or "").strip():
        raise InvalidTransaction("Description must not be blank")


def _to_decimal(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidTransaction(f"Amount is not a number: {value!r}") from exc


def filter_for_timeframe(
    records: Iterable[TransactionRecord],
    timeframe: Timeframe | str | int,
    now: datetime,
    config: AnalyticsConfig | None = None,
) -> list[TransactionRecord]:
    """Records dated within ``[now - days, now]``, oldest first."""

    config = config or AnalyticsConfig()
    days = timeframe if isinstance(timeframe, int) else Timeframe.parse(timeframe).days
    end = features.to_local_timestamp(now, config.timezone)
    start = end - timedelta(days=days)

    window = []
    for record in records:
        when = features.to_local_timestamp(record.date, config.timezone)
        if start <= when <= end:
            window.append((when, record))
    window.sort(key=lambda pair: pair[0])
    return [record for _, record in window]


class TransactionLedger:
    """Mutable collection of immutable records, keyed by id."""

    def __init__(
        self,
        records: Iterable[TransactionRecord] = (),
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._records: dict[str, TransactionRecord] = {record.id: record for record in records}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(self.records())

    def add(
        self,
        amount: Decimal | float,
        description: str,
        category: str = DEFAULT_CATEGORY,
        date: datetime | None = None,
        merchant: str | None = None,
        payment_method: str | None = None,
    ) -> TransactionRecord:
        validate_transaction(amount, description)
        record = TransactionRecord(
            amount=_to_decimal(amount),
            date=date or self._clock(),
            category=category,
            merchant=merchant,
            notes=description.strip(),
            payment_method=payment_method,
        )
        self._records[record.id] = record
        logger.info("Added transaction %s (%s)", record.id, record.amount)
        return record

    def get(self, transaction_id: str) -> TransactionRecord:
        try:
            return self._records[transaction_id]
        except KeyError:
            raise TransactionNotFound(transaction_id) from None

    def update(
        self,
        transaction_id: str,
        *,
        amount: Decimal | float | None = None,
        description: str | None = None,
        category: str | None = None,
        date: datetime | None = None,
        merchant: str | None = None,
        payment_method: str | None = None,
    ) -> TransactionRecord:
        """Replace the given fields; fields left as ``None`` keep their value."""

        current = self.get(transaction_id)
        changes: dict[str, object] = {}
        if amount is not None:
            changes["amount"] = _to_decimal(amount)
        if description is not None:
            changes["notes"] = description.strip()
        if category is not None:
            changes["category"] = category
        if date is not None:
            changes["date"] = date
        if merchant is not None:
            changes["merchant"] = merchant
        if payment_method is not None:
            changes["payment_method"] = payment_method

        updated = dataclasses.replace(current, **changes)
        validate_transaction(updated.amount, updated.notes)
        self._records[transaction_id] = updated
        logger.info("Updated transaction %s", transaction_id)
        return updated

    def delete(self, transaction_id: str) -> None:
        if self._records.pop(transaction_id, None) is None:
            raise TransactionNotFound(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)

    def records(self) -> list[TransactionRecord]:
        """All records, newest first."""

        return [
            record
            for _, record in sorted(
                (
                    (features.to_local_timestamp(record.date, "UTC"), record)
                    for record in self._records.values()
                ),
                key=lambda pair: pair[0],
                reverse=True,
            )
        ]

    def to_frame(self) -> pd.DataFrame:
        return utils.ensure_dataframe(self.records())[utils.RECORD_COLUMNS]

    @property
    def balance(self) -> float:
        return float(self.to_frame()["amount"].astype(float).sum())

    @property
    def total_income(self) -> float:
        amounts = self.to_frame()["amount"].astype(float)
        return float(amounts[amounts > 0].sum())

    @property
    def total_expenses(self) -> float:
        """Signed sum of expenses (zero or negative)."""

        amounts = self.to_frame()["amount"].astype(float)
        return float(amounts[amounts < 0].sum())

    def search(self, text: str = "", category: str = ALL_CATEGORIES) -> list[TransactionRecord]:
        """Case-insensitive match on notes or merchant, optionally narrowed to a category."""

        needle = text.strip().casefold()
        wanted = category.casefold()
        matches = []
        for record in self.records():
            if needle and not any(
                needle in (value or "").casefold() for value in (record.notes, record.merchant)
            ):
                continue
            if category != ALL_CATEGORIES and wanted not in (record.category or "").casefold():
                continue
            matches.append(record)
        return matches

    def records_for_timeframe(
        self,
        timeframe: Timeframe | str | int,
        now: datetime | None = None,
        config: AnalyticsConfig | None = None,
    ) -> list[TransactionRecord]:
        return filter_for_timeframe(self._records.values(), timeframe, now or self._clock(), config)

    def save_csv(self, path: str | Path) -> Path:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self.to_frame().to_csv(target, index=False)
        except OSError as exc:
            raise PersistenceWriteFailed(f"Could not save ledger to {target}: {exc}") from exc
        logger.info("Saved %d transactions to %s", len(self), target)
        return target

    @classmethod
    def load_csv(
        cls,
        path: str | Path,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "TransactionLedger":
        return cls(read_records_csv(path), clock=clock)


def read_records_csv(path: str | Path) -> list[TransactionRecord]:
    """Parse a ledger CSV written by :meth:`TransactionLedger.save_csv`."""

    source = Path(path)
    try:
        df = pd.read_csv(source, dtype={column: str for column in TEXT_COLUMNS})
        df = df.astype(object).where(df.notna(), None)
        return [
            TransactionRecord(
                id=row["id"] or str(index),
                amount=_to_decimal(row["amount"]),
                date=pd.Timestamp(row["date"]).to_pydatetime(),
                category=row["category"],
                merchant=row["merchant"],
                notes=row["notes"],
                payment_method=row["payment_method"],
            )
            for index, row in df.iterrows()
        ]
    except (OSError, KeyError, ValueError, InvalidTransaction, pd.errors.ParserError) as exc:
        raise DataUnavailable(f"Could not read transactions from {source}: {exc}") from exc


class CsvTransactionSource:
    """Read-only record source that re-reads a CSV ledger on every fetch."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def records_for_timeframe(
        self,
        timeframe: Timeframe | str | int,
        now: datetime | None = None,
        config: AnalyticsConfig | None = None,
    ) -> list[TransactionRecord]:
        return filter_for_timeframe(read_records_csv(self.path), timeframe, now or datetime.now(), config)
