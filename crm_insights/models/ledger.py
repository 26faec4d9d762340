"""Ledger-level models: transactions, customer aggregates and user overlays."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

# Placeholder for an empty origin or destination column
MISSING_LABEL = "N/A"


@dataclass(frozen=True)
class Transaction:
    """One shipment/invoice line from the ledger."""

    date: date
    value: Decimal
    origin: str
    destination: str
    # Cached for filter membership tests
    year: int
    month: int

    @property
    def period_key(self) -> str:
        """Calendar month key (``YYYY-MM``)."""
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class Justification:
    """User-supplied reason for a customer's inactivity."""

    reason: str
    created_at: datetime
    author: str
    replacement_tax_id: str | None = None


@dataclass(frozen=True)
class ClientAction:
    """Free-text contact log entry."""

    note: str
    created_at: datetime
    author: str
    kind: str = "contact"


@dataclass(frozen=True)
class CustomerOverlay:
    """User edits attached to a customer outside of the ledger."""

    justification: Justification | None = None
    actions: tuple[ClientAction, ...] = ()


@dataclass(frozen=True)
class CustomerAggregate:
    """All ledger activity for one normalized customer key.

    ``history`` is chronological and never empty; the shipment date bounds
    are its first and last dates. ``justification`` and ``actions`` are
    overlays merged in by the caller and carried through scoring untouched.
    """

    id: str
    name: str
    cnpj: str
    history: tuple[Transaction, ...]
    first_shipment_date: date
    last_shipment_date: date
    origins: frozenset[str] = field(default_factory=frozenset)
    destinations: frozenset[str] = field(default_factory=frozenset)
    justification: Justification | None = None
    actions: tuple[ClientAction, ...] = ()

    @property
    def global_revenue(self) -> Decimal:
        """Revenue over the full, unfiltered history."""
        return sum((t.value for t in self.history), Decimal("0"))

    @property
    def global_shipments(self) -> int:
        return len(self.history)

    @property
    def global_average_ticket(self) -> Decimal:
        if not self.history:
            return Decimal("0")
        return self.global_revenue / len(self.history)
