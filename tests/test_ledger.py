"""Tests for the transaction ledger and its CSV persistence."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from smart_finance import synth
from smart_finance.config import Timeframe
from smart_finance.errors import (
    DataUnavailable,
    InvalidTransaction,
    PersistenceWriteFailed,
    TransactionNotFound,
)
from smart_finance.ledger import CsvTransactionSource, TransactionLedger

NOW = datetime(2025, 3, 31, 12, 0)


@pytest.fixture
def demo_ledger() -> TransactionLedger:
    ledger = TransactionLedger(clock=lambda: NOW)
    synth.seed_demo_transactions(ledger, when=NOW - timedelta(days=1))
    return ledger


@pytest.mark.parametrize(
    ("amount", "description"),
    [
        (0, "Nothing"),
        (1_000_000, "Lottery"),
        (-1_500_000, "Yacht"),
        (-4.5, "   "),
        (float("nan"), "Broken import"),
        (float("-inf"), "Overflow"),
        (Decimal("NaN"), "Broken import"),
    ],
)
def test_add_rejects_invalid_data(amount, description) -> None:
    ledger = TransactionLedger()
    with pytest.raises(InvalidTransaction):
        ledger.add(amount, description)
    assert len(ledger) == 0


def test_add_normalises_fields() -> None:
    ledger = TransactionLedger(clock=lambda: NOW)
    record = ledger.add(-4.5, "  Morning Coffee ", merchant="Starbucks")

    assert record.amount == Decimal("-4.5")
    assert record.notes == "Morning Coffee"
    assert record.category == "General"
    assert record.date == NOW
    assert ledger.get(record.id) is record


def test_balance_and_totals(demo_ledger) -> None:
    assert len(demo_ledger) == 7
    assert demo_ledger.total_income == pytest.approx(2600.0)
    assert demo_ledger.total_expenses == pytest.approx(-178.47)
    assert demo_ledger.balance == pytest.approx(2421.53)


def test_records_are_newest_first() -> None:
    ledger = TransactionLedger()
    older = ledger.add(-10, "Older", date=NOW - timedelta(days=2))
    newer = ledger.add(-20, "Newer", date=NOW)

    assert ledger.records() == [newer, older]


def test_search_matches_notes_merchant_and_category(demo_ledger) -> None:
    assert [record.notes for record in demo_ledger.search("coffee")] == ["Morning Coffee"]
    assert [record.merchant for record in demo_ledger.search("NETFLIX")] == ["Netflix"]
    assert len(demo_ledger.search(category="Food")) == 2
    assert len(demo_ledger.search()) == 7
    assert demo_ledger.search("coffee", category="transport") == []


def test_update_replaces_fields_and_validates(demo_ledger) -> None:
    coffee = demo_ledger.search("coffee")[0]

    updated = demo_ledger.update(coffee.id, amount=-5.25, category="dining")
    assert updated.amount == Decimal("-5.25")
    assert updated.category == "dining"
    assert updated.notes == "Morning Coffee"

    with pytest.raises(InvalidTransaction):
        demo_ledger.update(coffee.id, amount=0)
    with pytest.raises(InvalidTransaction):
        demo_ledger.update(coffee.id, amount=float("nan"))
    assert demo_ledger.get(coffee.id).amount == Decimal("-5.25")


def test_delete(demo_ledger) -> None:
    coffee = demo_ledger.search("coffee")[0]
    demo_ledger.delete(coffee.id)

    assert len(demo_ledger) == 6
    with pytest.raises(TransactionNotFound):
        demo_ledger.delete(coffee.id)
    with pytest.raises(TransactionNotFound):
        demo_ledger.update("missing", amount=5)


def test_records_for_timeframe_window() -> None:
    ledger = TransactionLedger(clock=lambda: NOW)
    recent = ledger.add(-10, "Recent", date=NOW - timedelta(days=3))
    month = ledger.add(-20, "Month", date=NOW - timedelta(days=10))
    quarter = ledger.add(-30, "Quarter", date=NOW - timedelta(days=40))
    ledger.add(-40, "Future", date=NOW + timedelta(days=1))

    assert ledger.records_for_timeframe(Timeframe.SEVEN_DAYS) == [recent]
    assert ledger.records_for_timeframe("30D") == [month, recent]
    assert ledger.records_for_timeframe(90) == [quarter, month, recent]


def test_csv_round_trip(tmp_path, demo_ledger) -> None:
    path = demo_ledger.save_csv(tmp_path / "ledger.csv")
    loaded = TransactionLedger.load_csv(path)

    assert len(loaded) == len(demo_ledger)
    assert loaded.balance == pytest.approx(demo_ledger.balance)
    assert {record.id for record in loaded} == {record.id for record in demo_ledger}
    assert sorted(record.notes for record in loaded) == sorted(record.notes for record in demo_ledger)


def test_load_missing_csv_raises_data_unavailable(tmp_path) -> None:
    with pytest.raises(DataUnavailable):
        TransactionLedger.load_csv(tmp_path / "missing.csv")


def test_save_failure_raises_persistence_error(tmp_path, demo_ledger) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(PersistenceWriteFailed):
        demo_ledger.save_csv(blocker / "ledger.csv")


def test_csv_source_filters_on_each_fetch(tmp_path, demo_ledger) -> None:
    path = demo_ledger.save_csv(tmp_path / "ledger.csv")
    source = CsvTransactionSource(path)

    assert len(source.records_for_timeframe(Timeframe.SEVEN_DAYS, now=NOW)) == 7
    assert source.records_for_timeframe(Timeframe.SEVEN_DAYS, now=NOW + timedelta(days=30)) == []


def test_csv_round_trip_keeps_numeric_looking_text(tmp_path) -> None:
    ledger = TransactionLedger(clock=lambda: NOW)
    ledger.add(-40, "2024", category="2024", merchant="76", payment_method="4242")
    path = ledger.save_csv(tmp_path / "ledger.csv")

    loaded = TransactionLedger.load_csv(path)
    record = loaded.records()[0]

    assert (record.notes, record.category, record.merchant, record.payment_method) == (
        "2024",
        "2024",
        "76",
        "4242",
    )
    assert loaded.search("20") == [record]
    assert loaded.search("76", category="2024") == [record]
    assert loaded.update(record.id, amount=-41).notes == "2024"
