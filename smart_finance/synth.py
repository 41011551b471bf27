"""Deterministic sample ledgers for demos, previews and tests.

The generator lays a monthly salary and recurring bills over Poisson-distributed
everyday spending, so every timeframe has income, several categories and a
realistic transaction frequency.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import UUID

import numpy as np

from .ledger import TransactionLedger
from .models import TransactionRecord

DEFAULT_DAYS = 120
DEFAULT_SEED = 7


@dataclass(frozen=True)
class MerchantProfile:
    """Static metadata for a merchant."""

    name: str
    category: str
    amount_range: tuple[float, float]
    flow: str = "debit"  # "debit" or "credit"
    payment_method: str = "Credit Card"


CATALOGUE = {
    profile.name: profile
    for profile in (
        MerchantProfile("Company Inc", "salary", (2400.0, 2600.0), flow="credit", payment_method="Direct Deposit"),
        MerchantProfile("Client XYZ", "income", (80.0, 400.0), flow="credit", payment_method="PayPal"),
        MerchantProfile("Oakwood Apartments", "housing", (1150.0, 1150.0), payment_method="Bank Transfer"),
        MerchantProfile("Verizon", "bills", (45.0, 55.0), payment_method="Auto Pay"),
        MerchantProfile("City Power & Light", "utilities", (60.0, 140.0), payment_method="Auto Pay"),
        MerchantProfile("Netflix", "entertainment", (12.99, 12.99)),
        MerchantProfile("Starbucks", "food", (3.5, 7.5)),
        MerchantProfile("Whole Foods", "food", (25.0, 120.0)),
        MerchantProfile("Chipotle", "dining", (9.0, 18.0)),
        MerchantProfile("Shell", "transport", (25.0, 60.0), payment_method="Debit Card"),
        MerchantProfile("Uber", "transport", (8.0, 35.0)),
        MerchantProfile("Amazon", "shopping", (10.0, 150.0)),
        MerchantProfile("Target", "shopping", (15.0, 90.0), payment_method="Debit Card"),
    )
}

DAILY_SPEND_MERCHANTS = ("Starbucks", "Whole Foods", "Chipotle", "Shell", "Uber", "Amazon", "Target")

# (merchant, day of month)
MONTHLY_BILLS = (
    ("Oakwood Apartments", 1),
    ("Verizon", 12),
    ("City Power & Light", 15),
    ("Netflix", 20),
)

# amount, description, category, merchant, payment method
SAMPLE_TRANSACTIONS = (
    (-4.50, "Morning Coffee", "food", "Starbucks", "Credit Card"),
    (-25.99, "Gas Station Fill-up", "transport", "Shell", "Debit Card"),
    (-89.99, "Grocery Shopping", "food", "Whole Foods", "Credit Card"),
    (2500.00, "Monthly Salary", "salary", "Company Inc", "Direct Deposit"),
    (-45.00, "Phone Bill", "bills", "Verizon", "Auto Pay"),
    (-12.99, "Netflix Subscription", "entertainment", "Netflix", "Credit Card"),
    (100.00, "Freelance Project", "income", "Client XYZ", "PayPal"),
)


def _business_day(candidate: date) -> date:
    """Roll weekend dates back to the preceding Friday."""

    adjusted = candidate
    while adjusted.weekday() >= 5:
        adjusted -= timedelta(days=1)
    return adjusted


def _uuid4_from_rng(rng: np.random.Generator) -> str:
    raw = bytearray(rng.bytes(16))
    raw[6] = (raw[6] & 0x0F) | 0x40  # version 4
    raw[8] = (raw[8] & 0x3F) | 0x80  # variant 10
    return str(UUID(bytes=bytes(raw)))


def _build_record(
    merchant: MerchantProfile,
    day: date,
    rng: np.random.Generator,
    *,
    note: str | None = None,
) -> TransactionRecord:
    low, high = merchant.amount_range
    magnitude = round(float(rng.uniform(low, high)), 2)
    amount = magnitude if merchant.flow == "credit" else -magnitude
    minute = int(rng.integers(8 * 60, 22 * 60))
    return TransactionRecord(
        id=_uuid4_from_rng(rng),
        amount=Decimal(f"{amount:.2f}"),
        date=datetime.combine(day, time(minute // 60, minute % 60)),
        category=merchant.category,
        merchant=merchant.name,
        notes=note or merchant.name,
        payment_method=merchant.payment_method,
    )


def generate_sample_records(
    days: int = DEFAULT_DAYS,
    *,
    seed: int | None = DEFAULT_SEED,
    end: date | None = None,
) -> list[TransactionRecord]:
    """Return ``days`` worth of records ending on ``end`` (default today), oldest first."""

    if days <= 0:
        raise ValueError("days must be positive")

    rng = np.random.default_rng(seed)
    last_day = end or date.today()
    first_day = last_day - timedelta(days=days - 1)

    records: list[TransactionRecord] = []
    current = first_day
    while current <= last_day:
        if current == _business_day(date(current.year, current.month, 25)):
            records.append(_build_record(CATALOGUE["Company Inc"], current, rng, note="Monthly Salary"))
        for name, day_of_month in MONTHLY_BILLS:
            if current.day == day_of_month:
                records.append(_build_record(CATALOGUE[name], current, rng))

        lam = 1.8 if current.weekday() < 5 else 2.6
        for _ in range(int(rng.poisson(lam))):
            merchant = CATALOGUE[str(rng.choice(DAILY_SPEND_MERCHANTS))]
            records.append(_build_record(merchant, current, rng))

        if rng.random() < 0.05:
            records.append(_build_record(CATALOGUE["Client XYZ"], current, rng, note="Freelance Project"))

        current += timedelta(days=1)

    records.sort(key=lambda record: record.date)
    return records


def sample_ledger(
    days: int = DEFAULT_DAYS,
    *,
    seed: int | None = DEFAULT_SEED,
    end: date | None = None,
) -> TransactionLedger:
    return TransactionLedger(generate_sample_records(days, seed=seed, end=end))


def seed_demo_transactions(ledger: TransactionLedger, when: datetime | None = None) -> list[TransactionRecord]:
    """Add the seven hand-written demo transactions to ``ledger``."""

    return [
        ledger.add(
            amount,
            description,
            category=category,
            date=when,
            merchant=merchant,
            payment_method=payment_method,
        )
        for amount, description, category, merchant, payment_method in SAMPLE_TRANSACTIONS
    ]
