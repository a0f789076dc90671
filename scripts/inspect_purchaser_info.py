#!/usr/bin/env python3
"""
Inspect a cached subscriber record.

Parses a raw record (as stored by the cache layer) and prints what it grants
at a given instant. The summary goes to stdout, log lines to stderr.

Usage:
    # Evaluate now
    python3 inspect_purchaser_info.py record.json

    # Evaluate at a specific instant
    python3 inspect_purchaser_info.py record.json --at 2024-01-15T00:00:00Z

    # Read from stdin, JSON output
    cat record.json | python3 inspect_purchaser_info.py - --json
"""

import argparse
import json
import sys
from datetime import UTC, datetime
from typing import Any

from purchaser_info import MalformedDateError, MalformedRecordError, PurchaserInfo, normalize_date
from purchaser_info.observability import get_logger, log_context, setup_logging

logger = get_logger(__name__)


def load_record(path: str) -> Any:
    """Read a JSON record from a file path, or stdin for '-'."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def summarize(info: PurchaserInfo, at: datetime) -> dict[str, Any]:
    """Report what the snapshot grants at `at`."""
    latest = info.latest_expiration_date
    return {
        "evaluated_at": at.isoformat(),
        "original_application_version": info.original_application_version,
        "active_entitlements": sorted(info.active_entitlements(at)),
        "active_subscriptions": sorted(info.active_subscriptions(at)),
        "non_consumable_purchases": sorted(info.non_consumable_purchases),
        "all_purchased_products": sorted(info.all_purchased_product_identifiers),
        "latest_expiration_date": latest.isoformat() if latest else None,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Show the entitlements granted by a cached subscriber record",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 inspect_purchaser_info.py record.json
  python3 inspect_purchaser_info.py record.json --at 2024-02-01T00:00:00Z --json
        """,
    )
    parser.add_argument("record", help="Path to the JSON record, or - for stdin")
    parser.add_argument("--at", help="Evaluation instant, ISO-8601 (default: now)")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")

    args = parser.parse_args(argv)
    setup_logging(stream=sys.stderr)

    try:
        at = normalize_date(args.at) or datetime.now(UTC)
    except MalformedDateError as e:
        logger.error("invalid_evaluation_instant", value=args.at, reason=e.reason)
        return 2

    with log_context(record_path=args.record):
        try:
            raw = load_record(args.record)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("record_unreadable", reason=str(e))
            return 1

        try:
            info = PurchaserInfo.from_json_object(raw)
        except MalformedRecordError as e:
            logger.error("record_rejected", reason=e.reason)
            return 1

    summary = summarize(info, at)
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        for key, value in summary.items():
            if isinstance(value, list):
                value = ", ".join(value) or "-"
            print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
