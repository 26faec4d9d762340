"""In-memory customer aggregate store."""

from crm_insights.store.aggregates import (
    CustomerAggregateStore,
    apply_overlays,
    reference_date,
    with_overlay,
)

__all__ = ["CustomerAggregateStore", "apply_overlays", "reference_date", "with_overlay"]
