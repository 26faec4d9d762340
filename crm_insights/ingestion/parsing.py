"""Field-level parsers for the shipment ledger.

The ledger follows the Brazilian convention: ``;`` or ``,`` separated
columns, ``DD/MM/YYYY`` dates and ``R$ 1.234,56`` money. Every parser here
degrades to a neutral value instead of raising.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

TAX_ID_WIDTH = 14

# Placeholders the source sheet uses for an unknown tax id
TAX_ID_SENTINELS = frozenset({"N/I", "NAO INFORMADO", "NÃO INFORMADO", "NOT INFORMED"})

_NON_DIGITS = re.compile(r"\D")
_CURRENCY_NOISE = re.compile(r"[\"'\s]|R\$")

MIN_YEAR = 1990
MAX_YEAR = 2100


def detect_delimiter(sample_line: str) -> str:
    """Return ``;`` when the sample line contains one, ``,`` otherwise."""
    return ";" if ";" in sample_line else ","


def split_line(line: str, delimiter: str) -> list[str]:
    """Tokenize one delimited line, honouring double-quoted fields.

    A quote toggles the inside-quotes state and is not kept; the delimiter
    only separates tokens outside quotes. Tokens are whitespace-trimmed.

    Parameters
    ----------
    line : str
        Raw ledger line without its line terminator.
    delimiter : str
        Field separator.

    Returns
    -------
    list[str]
        Tokens in column order.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            tokens.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    tokens.append("".join(current).strip())
    return tokens


def is_missing_tax_id(raw: str) -> bool:
    """Whether the tax-id token is empty or a known placeholder."""
    token = raw.strip()
    return not token or token.upper() in TAX_ID_SENTINELS


def normalize_tax_id(raw: str) -> str:
    """Normalize a CPF/CNPJ into the customer key.

    Non-digits are stripped and 1-14 digit results are left-padded with
    zeros to 14 digits, so ``12.345.678/0001-90``, ``12345678000190`` and a
    spreadsheet-mangled ``2345678000190`` resolve to the same key. Longer
    digit strings are kept as-is; a token without digits falls back to the
    stripped raw label.
    """
    digits = _NON_DIGITS.sub("", raw)
    if not digits:
        return raw.strip()
    if len(digits) <= TAX_ID_WIDTH:
        return digits.zfill(TAX_ID_WIDTH)
    return digits


def parse_currency(raw: str) -> Decimal:
    """Parse a Brazilian-formatted amount (``R$ 1.500,00``) into a Decimal.

    ``.`` is the thousands separator and ``,`` the decimal separator.
    Anything unparseable is worth zero.
    """
    if not raw:
        return Decimal("0")
    clean = _CURRENCY_NOISE.sub("", raw).replace(".", "").replace(",", ".")
    if not clean:
        return Decimal("0")
    try:
        value = Decimal(clean)
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value


def parse_ledger_date(raw: str) -> date | None:
    """Parse ``DD/MM/YYYY``, ``DD/MM/YY`` or ``YYYY-MM-DD``.

    A trailing time of day is ignored. Two-digit years are read as 20YY.
    Impossible calendar dates and years outside (1990, 2100) give ``None``.
    """
    if not raw:
        return None
    clean = raw.strip().replace('"', "")
    clean = clean.split(" ", 1)[0].split("T", 1)[0]

    try:
        if "/" in clean:
            parts = clean.split("/")
            if len(parts) != 3:
                return None
            day, month, year = (int(p) for p in parts)
            if year < 100:
                year += 2000
        elif "-" in clean:
            parts = clean.split("-")
            if len(parts) != 3 or len(parts[0]) != 4:
                return None
            year, month, day = (int(p) for p in parts)
        else:
            return None
    except ValueError:
        return None

    if not MIN_YEAR < year < MAX_YEAR:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None
