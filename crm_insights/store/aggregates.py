"""Customer aggregate builder and overlay merge."""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Mapping

from crm_insights.models.ledger import MISSING_LABEL, CustomerAggregate, CustomerOverlay, Transaction


@dataclass
class _Draft:
    """Mutable accumulator for one customer while ingestion runs."""

    key: str
    name: str
    cnpj: str
    history: list[Transaction] = field(default_factory=list)
    origins: dict[str, None] = field(default_factory=dict)
    destinations: dict[str, None] = field(default_factory=dict)


@dataclass
class CustomerAggregateStore:
    """In-memory store grouping ledger transactions by customer key."""

    _drafts: dict[str, _Draft] = field(default_factory=dict)
    transaction_count: int = 0

    def add_transaction(self, key: str, cnpj: str, name: str, transaction: Transaction) -> None:
        """Upsert the customer for ``key`` and append a transaction.

        The display name and tax id of the first row seen for a key win.
        """
        draft = self._drafts.get(key)
        if draft is None:
            draft = _Draft(key=key, name=name, cnpj=cnpj)
            self._drafts[key] = draft

        draft.history.append(transaction)
        self.transaction_count += 1

        if transaction.origin and transaction.origin != MISSING_LABEL:
            draft.origins[transaction.origin] = None
        if transaction.destination and transaction.destination != MISSING_LABEL:
            draft.destinations[transaction.destination] = None

    def __len__(self) -> int:
        return len(self._drafts)

    def build(self) -> list[CustomerAggregate]:
        """Freeze the accumulated customers.

        Histories are sorted chronologically and the shipment date bounds
        are the ends of the sorted history, whatever order rows arrived in.
        Customers without a single transaction are never emitted.
        """
        aggregates: list[CustomerAggregate] = []
        for draft in self._drafts.values():
            if not draft.history:
                continue
            history = tuple(sorted(draft.history, key=lambda t: t.date))
            aggregates.append(
                CustomerAggregate(
                    id=draft.key,
                    name=draft.name,
                    cnpj=draft.cnpj,
                    history=history,
                    first_shipment_date=history[0].date,
                    last_shipment_date=history[-1].date,
                    origins=frozenset(draft.origins),
                    destinations=frozenset(draft.destinations),
                )
            )
        return aggregates


def reference_date(aggregates: Iterable[CustomerAggregate]) -> date | None:
    """Most recent shipment across the whole dataset.

    This anchors "today" for recency and projection, so results depend on
    the data and not on the wall clock. ``None`` for an empty dataset.
    """
    return max((a.last_shipment_date for a in aggregates), default=None)


def with_overlay(aggregate: CustomerAggregate, overlay: CustomerOverlay | None) -> CustomerAggregate:
    """Return a copy of ``aggregate`` carrying the user overlay.

    A missing overlay clears any previously merged one.
    """
    if overlay is None:
        return replace(aggregate, justification=None, actions=())
    return replace(aggregate, justification=overlay.justification, actions=tuple(overlay.actions))


def apply_overlays(
    aggregates: Iterable[CustomerAggregate],
    overlays: Mapping[str, CustomerOverlay],
) -> list[CustomerAggregate]:
    """Merge the overlay of each customer id onto its aggregate."""
    return [with_overlay(a, overlays.get(a.id)) for a in aggregates]
