"""One-call orchestration of the analytics engines."""

import logging
from datetime import date
from typing import Mapping, Sequence

from crm_insights.analytics.alerts import detect_alerts
from crm_insights.analytics.portfolio import (
    abc_summary,
    health_summary,
    portfolio_stats,
    reactivation_opportunities,
)
from crm_insights.analytics.projection import build_revenue_series
from crm_insights.analytics.scoring import score_customers
from crm_insights.config import CrmInsightsConfig
from crm_insights.models.analytics import DashboardView, FilterState, ProcessResult
from crm_insights.models.ledger import CustomerAggregate, CustomerOverlay
from crm_insights.store.aggregates import apply_overlays
from crm_insights.store.aggregates import reference_date as dataset_reference_date

logger = logging.getLogger(__name__)


def process_customers(
    aggregates: Sequence[CustomerAggregate],
    filters: FilterState | None = None,
    reference_date: date | None = None,
    config: CrmInsightsConfig | None = None,
) -> ProcessResult:
    """Score the customers and chart the revenue of what survives the filter.

    Parameters
    ----------
    aggregates : Sequence[CustomerAggregate]
        Full dataset.
    filters : FilterState | None
        Active filters.
    reference_date : date | None
        Precomputed dataset reference date; derived from ``aggregates``
        when omitted. It may not precede the latest shipment.
    config : CrmInsightsConfig | None
        Scoring and projection settings.

    Returns
    -------
    ProcessResult
        Scored customers, chart series and the origin/destination universe.

    Raises
    ------
    ValueError
        If ``reference_date`` is earlier than the latest shipment.
    """
    config = config or CrmInsightsConfig()
    scoring = score_customers(aggregates, filters, reference_date, config.scoring)

    transactions = [t for customer in scoring.scored_customers for t in customer.filtered_history]
    chart_data = build_revenue_series(transactions, scoring.reference_date, config.projection)

    return ProcessResult(
        reference_date=scoring.reference_date,
        clients=scoring.scored_customers,
        chart_data=chart_data,
        available_origins=scoring.available_origins,
        available_destinations=scoring.available_destinations,
    )


def build_dashboard(
    aggregates: Sequence[CustomerAggregate],
    filters: FilterState | None = None,
    overlays: Mapping[str, CustomerOverlay] | None = None,
    config: CrmInsightsConfig | None = None,
) -> DashboardView:
    """Merge overlays, process, detect alerts and summarize the portfolio."""
    config = config or CrmInsightsConfig()
    merged = apply_overlays(aggregates, overlays or {})
    reference = dataset_reference_date(merged)

    result = process_customers(merged, filters, reference, config)
    alerts = detect_alerts(result.clients, config.alerts)

    logger.info(
        "Dashboard ready: %d customers, %d chart points, %d alerts",
        len(result.clients),
        len(result.chart_data),
        len(alerts),
        extra={"reference_date": reference.isoformat() if reference else None},
    )

    return DashboardView(
        result=result,
        alerts=alerts,
        stats=portfolio_stats(result.clients),
        abc=abc_summary(result.clients),
        health=health_summary(result.clients),
        reactivation=reactivation_opportunities(result.clients),
    )
