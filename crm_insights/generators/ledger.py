"""Synthetic shipment ledger generator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterator

from crm_insights.generators.base import BaseGenerator

LEDGER_HEADER = ("Data", "Origem", "Destino", "Valor", "CNPJ", "Cliente")


class CustomerBehavior(str, Enum):
    STEADY = "STEADY"
    PREMIUM = "PREMIUM"
    CHURNED = "CHURNED"
    NEW = "NEW"
    DECLINING = "DECLINING"


@dataclass(frozen=True)
class LedgerRow:
    """One generated ledger line."""

    shipped_on: date
    origin: str
    destination: str
    value: Decimal
    cnpj: str
    name: str


def format_brl(value: Decimal) -> str:
    """``R$ 1.234,56``."""
    text = f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")


class LedgerGenerator(BaseGenerator):
    """Generate shipment ledgers with a realistic customer mix."""

    BEHAVIORS = list(CustomerBehavior)
    BEHAVIOR_WEIGHTS = [0.45, 0.10, 0.25, 0.10, 0.10]

    # Churned customers need room to go silent for 100+ days
    MIN_SPAN_DAYS = 180

    # Ticket ranges per behavior (BRL)
    TICKET_RANGES = {
        CustomerBehavior.STEADY: (400, 4000),
        CustomerBehavior.PREMIUM: (6000, 25000),
        CustomerBehavior.CHURNED: (300, 6000),
        CustomerBehavior.NEW: (300, 3000),
        CustomerBehavior.DECLINING: (2000, 8000),
    }

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "pt_BR",
        num_locations: int = 12,
    ) -> None:
        super().__init__(seed, locale)
        self.locations = [f"{self.fake.city()}/{self.fake.estado_sigla()}" for _ in range(num_locations)]

    def generate_rows(
        self,
        num_customers: int,
        start_date: date,
        end_date: date,
    ) -> Iterator[LedgerRow]:
        """Generate ledger rows for ``num_customers`` customers.

        Parameters
        ----------
        num_customers : int
            Number of distinct customers.
        start_date : date
            Earliest possible shipment.
        end_date : date
            Latest possible shipment.

        Yields
        ------
        LedgerRow
            Rows grouped by customer, chronological within a customer.

        Raises
        ------
        ValueError
            If the date range is shorter than ``MIN_SPAN_DAYS``.
        """
        if (end_date - start_date).days < self.MIN_SPAN_DAYS:
            raise ValueError(f"date range must span at least {self.MIN_SPAN_DAYS} days")
        for _ in range(num_customers):
            behavior = self.rng.choices(self.BEHAVIORS, weights=self.BEHAVIOR_WEIGHTS, k=1)[0]
            yield from self._customer_rows(behavior, start_date, end_date)

    def _customer_rows(self, behavior: CustomerBehavior, start_date: date, end_date: date) -> Iterator[LedgerRow]:
        cnpj = self.fake.cnpj()
        name = self.fake.company()
        home = self.rng.choice(self.locations)
        low, high = self.TICKET_RANGES[behavior]
        span = (end_date - start_date).days

        if behavior == CustomerBehavior.NEW:
            first = end_date - timedelta(days=self.rng.randint(5, min(80, span)))
            last = end_date - timedelta(days=self.rng.randint(0, 4))
        elif behavior == CustomerBehavior.CHURNED:
            first = start_date + timedelta(days=self.rng.randint(0, span // 3))
            last = end_date - timedelta(days=self.rng.randint(100, min(400, span)))
        else:
            first = start_date + timedelta(days=self.rng.randint(0, span // 4))
            last = end_date - timedelta(days=self.rng.randint(0, 20))
        if last < first:
            first, last = last, first

        interval = self.rng.randint(5, 30) if behavior != CustomerBehavior.PREMIUM else self.rng.randint(20, 60)
        current = first
        shipments: list[date] = []
        while current <= last:
            shipments.append(current)
            current += timedelta(days=max(1, int(self.rng.gauss(interval, interval / 4))))
        if shipments[-1] != last:
            shipments.append(last)

        for index, shipped_on in enumerate(shipments):
            ticket = self.rng.uniform(low, high)
            if behavior == CustomerBehavior.DECLINING and index >= len(shipments) - 3:
                ticket *= 0.2
            yield LedgerRow(
                shipped_on=shipped_on,
                origin=home if self.rng.random() < 0.8 else self.rng.choice(self.locations),
                destination=self.rng.choice(self.locations),
                value=Decimal(str(round(ticket, 2))),
                cnpj=cnpj,
                name=name,
            )

    def to_csv_text(self, rows: Iterator[LedgerRow] | list[LedgerRow]) -> str:
        """Render rows in the ledger format read by ``parse_ledger_text``."""
        lines = [";".join(LEDGER_HEADER)]
        for row in rows:
            lines.append(
                ";".join(
                    (
                        row.shipped_on.strftime("%d/%m/%Y"),
                        row.origin,
                        row.destination,
                        format_brl(row.value),
                        row.cnpj,
                        '"' + row.name.replace('"', "") + '"',
                    )
                )
            )
        return "\n".join(lines) + "\n"
