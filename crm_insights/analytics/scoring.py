"""Segmentation and scoring engine.

Turns customer aggregates into scored customers for one filter: filtered
RFM totals, lifecycle segment, health score, ABC revenue tier and an
opportunity tag for inactive customers. Recency, tenure, segment and
opportunity are computed on the full history so a narrow viewing window
never changes what a customer *is*, only how much of it is on screen.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Sequence

from crm_insights.config import ScoringConfig
from crm_insights.models.analytics import FilterState, ScoredCustomer, ScoringResult
from crm_insights.models.enums import ABCCategory, HealthScore, OpportunityTag, Segment
from crm_insights.models.ledger import CustomerAggregate, Transaction
from crm_insights.store.aggregates import reference_date as dataset_reference_date

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Health points
LOST_HEALTH = 10
AT_RISK_HEALTH = 30
ACTIVE_BASE_HEALTH = 70


def classify_segment(
    recency: int,
    tenure_days: int,
    global_revenue: Decimal,
    config: ScoringConfig | None = None,
) -> Segment:
    """Assign the lifecycle segment. First matching rule wins.

    Inactivity dominates tenure: a customer who bought once four months
    ago is at risk, not new.
    """
    config = config or ScoringConfig()
    if recency > config.lost_after_days:
        return Segment.LOST
    if recency > config.at_risk_after_days:
        return Segment.AT_RISK
    if tenure_days <= config.new_customer_tenure_days:
        return Segment.NEW
    if global_revenue > config.champion_revenue:
        return Segment.CHAMPIONS
    return Segment.LOYAL


def compute_health(segment: Segment, recency: int) -> int:
    """Health value on a 0-100 scale."""
    if segment == Segment.LOST:
        return LOST_HEALTH
    if segment == Segment.AT_RISK:
        return AT_RISK_HEALTH

    score = ACTIVE_BASE_HEALTH
    if recency > 60:
        score -= 25
    elif recency > 30:
        score -= 5
    elif recency < 15:
        score += 15

    if segment == Segment.CHAMPIONS:
        score += 10
    elif segment == Segment.NEW:
        score += 5

    return max(0, min(100, score))


def health_tier(value: int) -> HealthScore:
    """Map a health value onto its tier."""
    if value >= 80:
        return HealthScore.EXCELLENT
    if value >= 60:
        return HealthScore.GOOD
    if value <= 30:
        return HealthScore.CRITICAL
    return HealthScore.WARNING


def opportunity_tag_for(
    aggregate: CustomerAggregate,
    segment: Segment,
    config: ScoringConfig | None = None,
) -> OpportunityTag | None:
    """Recovery potential of an inactive customer, from its full history.

    Only AT_RISK and LOST customers are tagged. Tags are exclusive and
    checked in priority order: premium ticket, high volume, recoverable.
    """
    if segment not in (Segment.AT_RISK, Segment.LOST):
        return None
    config = config or ScoringConfig()
    if aggregate.global_average_ticket > config.premium_ticket:
        return OpportunityTag.PREMIUM_FREIGHT
    if aggregate.global_revenue > config.high_volume_revenue:
        return OpportunityTag.HIGH_VOLUME
    if aggregate.global_shipments > config.recoverable_shipments:
        return OpportunityTag.RECOVERABLE
    return None


def assign_abc_categories(
    customers: Sequence[ScoredCustomer],
    config: ScoringConfig | None = None,
) -> list[ScoredCustomer]:
    """Rank customers by filtered revenue and tag them A, B or C.

    Walks the cumulative revenue share: A while it stays within the A share
    (80%), B within the B share (95%), C beyond. The curve is relative to
    the customers passed in. With no revenue at all every customer is C.

    Returns
    -------
    list[ScoredCustomer]
        New objects ordered by revenue descending (ties by id).
    """
    config = config or ScoringConfig()
    ranked = sorted(customers, key=lambda c: (-c.total_revenue, c.id))
    total = sum((c.total_revenue for c in ranked), ZERO)

    result: list[ScoredCustomer] = []
    cumulative = ZERO
    for customer in ranked:
        cumulative += customer.total_revenue
        share = cumulative / total if total > 0 else Decimal("1")
        if share <= config.abc_a_share:
            category = ABCCategory.A
        elif share <= config.abc_b_share:
            category = ABCCategory.B
        else:
            category = ABCCategory.C
        result.append(replace(customer, abc_category=category))
    return result


def score_customer(
    aggregate: CustomerAggregate,
    filtered_history: Sequence[Transaction],
    reference: date,
    config: ScoringConfig | None = None,
) -> ScoredCustomer:
    """Score one customer against the reference date.

    The ABC category is left at its default; it only exists relative to
    the full result set.
    """
    config = config or ScoringConfig()

    total_revenue = sum((t.value for t in filtered_history), ZERO)
    total_shipments = len(filtered_history)
    average_ticket = total_revenue / total_shipments if total_shipments else ZERO

    recency = (reference - aggregate.last_shipment_date).days
    tenure_days = (reference - aggregate.first_shipment_date).days

    segment = classify_segment(recency, tenure_days, aggregate.global_revenue, config)
    health_value = compute_health(segment, recency)

    return ScoredCustomer(
        customer=aggregate,
        filtered_history=tuple(filtered_history),
        total_revenue=total_revenue,
        total_shipments=total_shipments,
        recency=recency,
        tenure_days=tenure_days,
        average_ticket=average_ticket,
        segment=segment,
        health_score=health_tier(health_value),
        health_value=health_value,
        opportunity_tag=opportunity_tag_for(aggregate, segment, config),
    )


def score_customers(
    aggregates: Sequence[CustomerAggregate],
    filters: FilterState | None = None,
    reference_date: date | None = None,
    config: ScoringConfig | None = None,
) -> ScoringResult:
    """Score every customer visible under ``filters``.

    Parameters
    ----------
    aggregates : Sequence[CustomerAggregate]
        The full dataset, overlays already merged.
    filters : FilterState | None
        Active filters; ``None`` means no restriction.
    reference_date : date | None
        "Today" for recency. Defaults to the latest shipment in
        ``aggregates``, which must be the full dataset for that default to
        be meaningful. An explicit date may not precede that shipment.
    config : ScoringConfig | None
        Thresholds.

    Returns
    -------
    ScoringResult
        Scored customers ordered by filtered revenue, plus the origin and
        destination universe of the unfiltered dataset.

    Raises
    ------
    ValueError
        If ``reference_date`` is earlier than the latest shipment.
    """
    filters = filters or FilterState()
    config = config or ScoringConfig()

    origins: set[str] = set()
    destinations: set[str] = set()
    for aggregate in aggregates:
        origins.update(aggregate.origins)
        destinations.update(aggregate.destinations)

    latest = dataset_reference_date(aggregates)
    if reference_date is not None and latest is not None and reference_date < latest:
        raise ValueError(
            f"reference date {reference_date.isoformat()} precedes the latest shipment {latest.isoformat()}"
        )
    reference = reference_date or latest
    if reference is None:
        return ScoringResult(
            reference_date=None,
            scored_customers=[],
            available_origins=sorted(origins),
            available_destinations=sorted(destinations),
        )

    scored: list[ScoredCustomer] = []
    for aggregate in aggregates:
        if filters.clients and aggregate.id not in filters.clients:
            continue

        filtered_history = [t for t in aggregate.history if filters.matches(t)]
        if filters.has_history_filter and not filtered_history:
            continue

        customer = score_customer(aggregate, filtered_history, reference, config)
        if filters.segments and customer.segment not in filters.segments:
            continue
        scored.append(customer)

    ranked = assign_abc_categories(scored, config)
    logger.debug(
        "Scored %d of %d customers against %s",
        len(ranked),
        len(aggregates),
        reference.isoformat(),
    )

    return ScoringResult(
        reference_date=reference,
        scored_customers=ranked,
        available_origins=sorted(origins),
        available_destinations=sorted(destinations),
    )
