"""Ledger text to customer aggregates."""

import logging

from crm_insights.ingestion.parsing import (
    detect_delimiter,
    is_missing_tax_id,
    normalize_tax_id,
    parse_currency,
    parse_ledger_date,
    split_line,
)
from crm_insights.models.ledger import MISSING_LABEL, CustomerAggregate, Transaction
from crm_insights.store.aggregates import CustomerAggregateStore

logger = logging.getLogger(__name__)

MIN_COLUMNS = 5

# Fixed column positions: date, origin, destination, value, tax id, name
COL_DATE, COL_ORIGIN, COL_DESTINATION, COL_VALUE, COL_TAX_ID, COL_NAME = range(6)


def parse_ledger_text(text: str) -> list[CustomerAggregate]:
    """Parse a delimited shipment ledger into customer aggregates.

    The first line is a header and is skipped. Malformed rows (too few
    columns, missing tax id, unparseable date) are dropped without
    aborting the file.

    Parameters
    ----------
    text : str
        Full ledger payload.

    Returns
    -------
    list[CustomerAggregate]
        One aggregate per normalized tax id, in first-seen order. Empty when
        the payload holds no valid rows.
    """
    lines = text.splitlines()
    if not lines:
        return []

    delimiter = detect_delimiter(lines[0].lstrip("\ufeff"))
    store = CustomerAggregateStore()
    skipped = 0

    for line in lines[1:]:
        if not line.strip():
            continue
        if not _ingest_line(store, line, delimiter):
            skipped += 1

    aggregates = store.build()
    logger.info(
        "Parsed ledger: %d customers, %d transactions, %d rows skipped",
        len(aggregates),
        store.transaction_count,
        skipped,
        extra={"rows_skipped": skipped},
    )
    return aggregates


def _ingest_line(store: CustomerAggregateStore, line: str, delimiter: str) -> bool:
    """Parse one data row into the store. Returns False when the row is dropped."""
    cols = split_line(line, delimiter)
    if len(cols) < MIN_COLUMNS:
        logger.debug("Skipping row with %d columns: %r", len(cols), line)
        return False

    raw_tax_id = cols[COL_TAX_ID]
    if is_missing_tax_id(raw_tax_id):
        logger.debug("Skipping row without tax id: %r", line)
        return False

    shipped_on = parse_ledger_date(cols[COL_DATE])
    if shipped_on is None:
        logger.debug("Skipping row with unparseable date %r", cols[COL_DATE])
        return False

    name = cols[COL_NAME] if len(cols) > COL_NAME and cols[COL_NAME] else raw_tax_id
    transaction = Transaction(
        date=shipped_on,
        value=parse_currency(cols[COL_VALUE]),
        origin=cols[COL_ORIGIN] or MISSING_LABEL,
        destination=cols[COL_DESTINATION] or MISSING_LABEL,
        year=shipped_on.year,
        month=shipped_on.month,
    )
    store.add_transaction(normalize_tax_id(raw_tax_id), raw_tax_id, name, transaction)
    return True
