#!/usr/bin/env python3
"""Generate a synthetic shipment ledger CSV.

The output uses the same layout as the production spreadsheet export
(``;`` separated, ``DD/MM/YYYY`` dates, ``R$ 1.234,56`` values) and can be
fed straight to ``scripts/run_dashboard.py --source``.
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from crm_insights.generators import LedgerGenerator
from crm_insights.logging import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate a synthetic shipment ledger CSV")
    parser.add_argument(
        "--customers",
        type=int,
        default=200,
        help="Number of customers to generate (default: 200)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=date(2023, 1, 1),
        help="First possible shipment date, ISO format (default: 2023-01-01)",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=date(2024, 12, 31),
        help="Last possible shipment date, ISO format (default: 2024-12-31)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("local/ledger.csv"),
        help="Output file (default: local/ledger.csv)",
    )
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    args = parser.parse_args()

    setup_logging(args.log_level)

    generator = LedgerGenerator(seed=args.seed)
    try:
        rows = list(generator.generate_rows(args.customers, args.start, args.end))
    except ValueError as exc:
        parser.error(str(exc))

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(generator.to_csv_text(rows), encoding="utf-8")
    logger.info("Saved %d rows for %d customers to %s", len(rows), args.customers, args.output)


if __name__ == "__main__":
    main()
