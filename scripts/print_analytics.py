"""Print the analytics bundle for a generated sample ledger as JSON."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from datetime import date, datetime, time
from typing import Any

from smart_finance import analytics, config, synth


def _default_serializer(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.strftime("%Y-%m-%d")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serialisable")


def main() -> None:
    parser = argparse.ArgumentParser(description="Print analytics for a sample ledger")
    parser.add_argument("--timeframe", default=config.DEFAULT_TIMEFRAME.value, help="7D, 30D, 90D or 1Y")
    parser.add_argument("--days", type=int, default=synth.DEFAULT_DAYS, help="days of sample history")
    parser.add_argument("--seed", type=int, default=synth.DEFAULT_SEED)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = config.load_config()
    timeframe = config.Timeframe.parse(args.timeframe)
    ledger = synth.sample_ledger(args.days, seed=args.seed)
    records = ledger.records_for_timeframe(
        timeframe, now=datetime.combine(date.today(), time.max), config=settings
    )
    result = analytics.analyze(records, timeframe, settings)
    print(json.dumps(dataclasses.asdict(result), indent=2, default=_default_serializer))


if __name__ == "__main__":
    main()
