"""In-memory store of user edits keyed by customer id."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from crm_insights.models.ledger import ClientAction, CustomerOverlay, Justification


@dataclass
class OverlayStore:
    """Justifications and contact logs attached to customers.

    The store never touches ledger data; overlays reach the analytics
    through ``crm_insights.store.apply_overlays``.
    """

    overlays: dict[str, CustomerOverlay] = field(default_factory=dict)

    def get(self, customer_id: str) -> CustomerOverlay | None:
        return self.overlays.get(customer_id)

    def justify(self, customer_id: str, justification: Justification) -> CustomerOverlay:
        """Set (or replace) the inactivity justification of a customer."""
        current = self.overlays.get(customer_id, CustomerOverlay())
        updated = replace(current, justification=justification)
        self.overlays[customer_id] = updated
        return updated

    def clear_justification(self, customer_id: str) -> None:
        current = self.overlays.get(customer_id)
        if current is not None:
            self.overlays[customer_id] = replace(current, justification=None)

    def log_action(self, customer_id: str, action: ClientAction) -> CustomerOverlay:
        """Prepend a contact log entry; the newest entry comes first."""
        current = self.overlays.get(customer_id, CustomerOverlay())
        updated = replace(current, actions=(action, *current.actions))
        self.overlays[customer_id] = updated
        return updated

    def __len__(self) -> int:
        return len(self.overlays)

    def to_dict(self) -> dict[str, Any]:
        """JSON-shaped snapshot of every overlay."""
        return {customer_id: _overlay_to_dict(overlay) for customer_id, overlay in self.overlays.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OverlayStore":
        """Rebuild a store from ``to_dict`` output."""
        return cls(overlays={customer_id: _overlay_from_dict(raw) for customer_id, raw in data.items()})


def _overlay_to_dict(overlay: CustomerOverlay) -> dict[str, Any]:
    justification = overlay.justification
    return {
        "justification": None
        if justification is None
        else {
            "reason": justification.reason,
            "replacementTaxId": justification.replacement_tax_id,
            "createdAt": justification.created_at.isoformat(),
            "author": justification.author,
        },
        "actions": [
            {
                "note": action.note,
                "kind": action.kind,
                "createdAt": action.created_at.isoformat(),
                "author": action.author,
            }
            for action in overlay.actions
        ],
    }


def _overlay_from_dict(raw: dict[str, Any]) -> CustomerOverlay:
    justification = raw.get("justification")
    return CustomerOverlay(
        justification=None
        if not justification
        else Justification(
            reason=justification["reason"],
            replacement_tax_id=justification.get("replacementTaxId"),
            created_at=datetime.fromisoformat(justification["createdAt"]),
            author=justification.get("author", ""),
        ),
        actions=tuple(
            ClientAction(
                note=action["note"],
                kind=action.get("kind", "contact"),
                created_at=datetime.fromisoformat(action["createdAt"]),
                author=action.get("author", ""),
            )
            for action in raw.get("actions", [])
        ),
    )
