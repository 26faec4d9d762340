#!/usr/bin/env python3
"""Score a shipment ledger and print the dashboard summary.

Reads the ledger from a URL or a local file, applies the optional filters,
prints KPIs, ABC curve, health tiers, alerts and the revenue projection,
and optionally writes the JSON report and CSV exports.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from crm_insights.analytics import build_dashboard
from crm_insights.config import CrmInsightsConfig
from crm_insights.exceptions import CrmInsightsError
from crm_insights.ingestion import load_customers
from crm_insights.logging import setup_logging_from_config
from crm_insights.models import FilterState
from crm_insights.sinks import ConsoleSink, JsonFileSink, clients_csv, reactivation_csv, write_csv
from crm_insights.sinks.serialization import dashboard_to_dict

logger = logging.getLogger(__name__)


def build_filters(args: argparse.Namespace) -> FilterState:
    """Translate repeated CLI flags into a filter state."""
    return FilterState.from_dict(
        {
            "years": args.year or [],
            "months": args.month or [],
            "clients": args.client or [],
            "origins": args.origin or [],
            "destinations": args.destination or [],
            "segments": args.segment or [],
        }
    )


def main() -> int:
    """Main entry point."""
    config = CrmInsightsConfig.from_env()

    parser = argparse.ArgumentParser(description="Customer analytics over a shipment ledger")
    parser.add_argument(
        "--source",
        type=str,
        default=None,
        help="Ledger URL or file path (default: LEDGER_URL / the public sheet export)",
    )
    parser.add_argument("--year", type=int, action="append", help="Keep only this year (repeatable)")
    parser.add_argument("--month", type=int, action="append", help="Keep only this month 1-12 (repeatable)")
    parser.add_argument(
        "--client",
        action="append",
        help="Keep only this customer CNPJ/CPF, formatted or digits (repeatable)",
    )
    parser.add_argument("--origin", action="append", help="Keep only this origin (repeatable)")
    parser.add_argument("--destination", action="append", help="Keep only this destination (repeatable)")
    parser.add_argument(
        "--segment",
        action="append",
        help="Keep only this segment, by name (e.g. AT_RISK) or label (repeatable)",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Write dashboard.json, clientes.csv and reativacao.csv here",
    )
    parser.add_argument("--log-level", default=config.log_level, help="Log level")
    args = parser.parse_args()

    setup_logging_from_config(config, args.log_level)

    try:
        filters = build_filters(args)
    except ValueError as exc:
        parser.error(str(exc))

    customers = load_customers(args.source, config.source)
    if not customers:
        logger.warning("No ledger data available")

    view = build_dashboard(customers, filters, config=config)
    ConsoleSink().print_dashboard(view)

    if args.export_dir is not None:
        try:
            JsonFileSink(args.export_dir, pretty=config.output.pretty_json).write_report(
                "dashboard", dashboard_to_dict(view)
            )
            write_csv(args.export_dir / "clientes.csv", clients_csv(view.result.clients))
            write_csv(args.export_dir / "reativacao.csv", reactivation_csv(view.reactivation))
        except CrmInsightsError as exc:
            logger.error("%s", exc)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
