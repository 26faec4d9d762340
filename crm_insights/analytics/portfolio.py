"""Portfolio-level view-models built from scored customers."""

from collections import Counter, defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from crm_insights.analytics.projection import period_label
from crm_insights.models.analytics import (
    CustomerProfile,
    MonthlyRevenue,
    PortfolioStats,
    RouteStats,
    ScoredCustomer,
    TierSummary,
)
from crm_insights.models.enums import ABCCategory, HealthScore, OpportunityTag, TrendDirection

ZERO = Decimal("0")

ACTIVE_MAX_RECENCY = 90

# Reactivation ranking: higher first
OPPORTUNITY_WEIGHTS = {
    OpportunityTag.PREMIUM_FREIGHT: 4,
    OpportunityTag.HIGH_VOLUME: 3,
    OpportunityTag.RECOVERABLE: 2,
}


def portfolio_stats(customers: Sequence[ScoredCustomer]) -> PortfolioStats:
    """Headline KPIs: revenue, shipments, average ticket and active share."""
    revenue = sum((c.total_revenue for c in customers), ZERO)
    shipments = sum(c.total_shipments for c in customers)
    active = sum(1 for c in customers if c.recency <= ACTIVE_MAX_RECENCY)
    return PortfolioStats(
        revenue=revenue,
        shipments=shipments,
        clients_count=len(customers),
        average_ticket=revenue / shipments if shipments else ZERO,
        active_percent=Decimal(active * 100) / len(customers) if customers else ZERO,
    )


def _summarize(customers: Sequence[ScoredCustomer], label: str) -> TierSummary:
    return TierSummary(
        label=label,
        count=len(customers),
        revenue=sum((c.total_revenue for c in customers), ZERO),
        customers=list(customers),
    )


def abc_summary(customers: Sequence[ScoredCustomer]) -> list[TierSummary]:
    """Count and revenue per ABC tier, A first."""
    return [
        _summarize([c for c in customers if c.abc_category == category], category.value)
        for category in ABCCategory
    ]


def health_summary(customers: Sequence[ScoredCustomer]) -> list[TierSummary]:
    """Count and revenue per health tier, each tier sorted by revenue."""
    summaries = []
    for tier in HealthScore:
        members = sorted(
            (c for c in customers if c.health_score == tier),
            key=lambda c: c.total_revenue,
            reverse=True,
        )
        summaries.append(_summarize(members, tier.value))
    return summaries


def top_customers(customers: Sequence[ScoredCustomer], limit: int = 50) -> list[ScoredCustomer]:
    return sorted(customers, key=lambda c: c.total_revenue, reverse=True)[:limit]


def reactivation_opportunities(customers: Sequence[ScoredCustomer]) -> list[ScoredCustomer]:
    """Inactive customers worth a call, best prospects first.

    Customers whose inactivity was already justified are left out. The
    ranking is the opportunity tag weight, then the average ticket.
    """
    candidates = [c for c in customers if c.recency > ACTIVE_MAX_RECENCY and c.justification is None]
    return sorted(
        candidates,
        key=lambda c: (OPPORTUNITY_WEIGHTS.get(c.opportunity_tag, 1), c.average_ticket),
        reverse=True,
    )


def customer_profile(customer: ScoredCustomer, months: int = 12) -> CustomerProfile:
    """Drill-down for one customer over its full history.

    Parameters
    ----------
    customer : ScoredCustomer
        The customer to profile.
    months : int
        Number of most recent active months kept in the monthly series.

    Returns
    -------
    CustomerProfile
        Monthly revenue, month-over-month trend, busiest origin and
        destination and the five highest-revenue routes.
    """
    by_month: dict[str, Decimal] = defaultdict(Decimal)
    origin_counts: Counter[str] = Counter()
    destination_counts: Counter[str] = Counter()
    routes: dict[tuple[str, str], list] = {}

    for t in customer.history:
        by_month[t.period_key] += t.value
        origin_counts[t.origin] += 1
        destination_counts[t.destination] += 1
        route = routes.setdefault((t.origin, t.destination), [ZERO, 0])
        route[0] += t.value
        route[1] += 1

    monthly = [
        MonthlyRevenue(
            period_key=key,
            period_label=period_label(int(key[:4]), int(key[5:])),
            value=by_month[key],
        )
        for key in sorted(by_month)
    ][-months:]

    trend_percent, trend_direction = _trend(monthly)

    top_routes = sorted(
        (RouteStats(origin=o, destination=d, revenue=v, shipments=n) for (o, d), (v, n) in routes.items()),
        key=lambda r: r.revenue,
        reverse=True,
    )[:5]

    return CustomerProfile(
        customer=customer,
        monthly_revenue=monthly,
        trend_percent=trend_percent,
        trend_direction=trend_direction,
        top_origin=origin_counts.most_common(1)[0][0] if origin_counts else "N/A",
        top_destination=destination_counts.most_common(1)[0][0] if destination_counts else "N/A",
        top_routes=top_routes,
    )


def _trend(monthly: list[MonthlyRevenue]) -> tuple[Decimal, TrendDirection]:
    """Last month against the one before it."""
    if len(monthly) < 2:
        return ZERO, TrendDirection.NEUTRAL
    last, previous = monthly[-1].value, monthly[-2].value
    if previous == 0:
        return Decimal("100"), TrendDirection.UP
    diff = (last - previous) / previous * 100
    direction = TrendDirection.UP if diff >= 0 else TrendDirection.DOWN
    return abs(diff).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP), direction
