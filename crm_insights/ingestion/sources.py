"""Ledger sources: a remote CSV export or a local file.

Both sources hand back the full text, or an empty string when the ledger
cannot be obtained. Callers treat an empty ledger as "no data".
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from crm_insights.config import SourceConfig
from crm_insights.exceptions import LedgerSourceError
from crm_insights.ingestion.ledger import parse_ledger_text
from crm_insights.models.ledger import CustomerAggregate

logger = logging.getLogger(__name__)


def download_ledger(url: str, timeout: float = 20.0, client: httpx.Client | None = None) -> str:
    """Download the ledger text.

    Raises
    ------
    LedgerSourceError
        On transport errors or non-2xx responses.
    """
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = http.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise LedgerSourceError(f"Failed to fetch ledger from {url}: {exc}") from exc
    finally:
        if owns_client:
            http.close()
    return response.text


def fetch_ledger_text(url: str, timeout: float = 20.0, client: httpx.Client | None = None) -> str:
    """Fetch the ledger, returning ``""`` on any failure."""
    logger.info("Fetching ledger from %s", url, extra={"source": url})
    try:
        return download_ledger(url, timeout=timeout, client=client)
    except LedgerSourceError as exc:
        logger.warning("%s", exc)
        return ""


def read_ledger_file(path: str | Path) -> str:
    """Read a local ledger file as UTF-8, returning ``""`` when unreadable."""
    file_path = Path(path)
    try:
        return file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read ledger file %s: %s", file_path, exc, extra={"source": str(file_path)})
        return ""


def is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_customers(
    source: str | Path | None = None,
    config: SourceConfig | None = None,
    client: httpx.Client | None = None,
) -> list[CustomerAggregate]:
    """Load and parse the ledger from a URL or a file path.

    Parameters
    ----------
    source : str | Path | None
        URL or local path. Defaults to the configured ledger URL.
    config : SourceConfig | None
        Source settings (URL and timeout).
    client : httpx.Client | None
        Optional preconfigured HTTP client.

    Returns
    -------
    list[CustomerAggregate]
        Parsed customers; empty when the source is unavailable.
    """
    config = config or SourceConfig()
    target = str(source) if source is not None else config.ledger_url

    if is_remote(target):
        text = fetch_ledger_text(target, timeout=config.timeout_seconds, client=client)
    else:
        text = read_ledger_file(target)

    if not text:
        return []
    return parse_ledger_text(text)
