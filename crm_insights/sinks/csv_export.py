"""CSV exports in the Brazilian spreadsheet convention.

Fields are ``;`` separated and quoted only when they contain the
separator, a quote or a line break, with embedded quotes doubled. Money
uses a decimal comma, mirroring what the ledger parser reads.
"""

import csv
import io
import logging
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Iterable, Sequence

from crm_insights.exceptions import ExportError
from crm_insights.models.analytics import ScoredCustomer

logger = logging.getLogger(__name__)

SEPARATOR = ";"

LOW_POTENTIAL_LABEL = "Baixo Potencial"

REACTIVATION_HEADERS = (
    "Nome do Cliente",
    "CNPJ/CPF",
    "Ultimo Envio",
    "Dias Inativo",
    "Ticket Medio",
    "Total Historico",
    "Classificacao IA",
)

CLIENT_HEADERS = (
    "Nome do Cliente",
    "CNPJ/CPF",
    "Segmento",
    "Curva ABC",
    "Saude",
    "Score",
    "Receita",
    "Envios",
    "Ticket Medio",
    "Recencia",
)


def format_money(value: Decimal) -> str:
    """Two decimals with a decimal comma and no thousands separator."""
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)).replace(".", ",")


def _to_csv(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=SEPARATOR, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def reactivation_csv(customers: Iterable[ScoredCustomer]) -> str:
    """Reactivation call list."""
    return _to_csv(
        REACTIVATION_HEADERS,
        (
            (
                c.name,
                c.cnpj,
                c.last_shipment_date.isoformat(),
                c.recency,
                format_money(c.average_ticket),
                format_money(c.monetary),
                c.opportunity_tag.value if c.opportunity_tag else LOW_POTENTIAL_LABEL,
            )
            for c in customers
        ),
    )


def clients_csv(customers: Iterable[ScoredCustomer]) -> str:
    """Scored client list of the current view."""
    return _to_csv(
        CLIENT_HEADERS,
        (
            (
                c.name,
                c.cnpj,
                c.segment.value,
                c.abc_category.value,
                c.health_score.value,
                c.health_value,
                format_money(c.total_revenue),
                c.total_shipments,
                format_money(c.average_ticket),
                c.recency,
            )
            for c in customers
        ),
    )


def write_csv(path: str | Path, content: str) -> Path:
    """Write CSV text with a UTF-8 BOM so spreadsheet tools pick the encoding.

    Raises
    ------
    ExportError
        If the file cannot be written.
    """
    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8-sig")
    except OSError as exc:
        raise ExportError(f"Cannot write {file_path}: {exc}") from exc
    logger.info("Wrote %s", file_path)
    return file_path
