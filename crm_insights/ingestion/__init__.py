"""Ledger ingestion: parsing raw shipment ledgers into customer aggregates."""

from crm_insights.ingestion.ledger import parse_ledger_text
from crm_insights.ingestion.parsing import (
    detect_delimiter,
    normalize_tax_id,
    parse_currency,
    parse_ledger_date,
    split_line,
)
from crm_insights.ingestion.sources import (
    fetch_ledger_text,
    load_customers,
    read_ledger_file,
)

__all__ = [
    "detect_delimiter",
    "fetch_ledger_text",
    "load_customers",
    "normalize_tax_id",
    "parse_currency",
    "parse_ledger_date",
    "parse_ledger_text",
    "read_ledger_file",
    "split_line",
]
