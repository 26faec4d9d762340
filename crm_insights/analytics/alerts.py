"""Anomaly detection over scored customers.

Two rules, each measured against the customer's own baseline:

* ticket collapse: the latest shipments are much cheaper than the
  customer's average ticket (A/B tier, established, still active);
* frequency break: the customer has been silent far longer than its usual
  interval between shipments, but not yet long enough to count as lost.

A customer matching both rules gets two alerts, ticket first.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from crm_insights.config import AlertConfig
from crm_insights.models.analytics import Alert, ScoredCustomer
from crm_insights.models.enums import ABCCategory, AlertKind, AlertSeverity, Segment

logger = logging.getLogger(__name__)

ALERT_TIERS = frozenset({ABCCategory.A, ABCCategory.B})


def ticket_drop_alert(customer: ScoredCustomer, config: AlertConfig | None = None) -> Alert | None:
    """Alert when the mean of the latest tickets falls below the drop ratio."""
    config = config or AlertConfig()
    if customer.abc_category not in ALERT_TIERS:
        return None
    # Early volatility of new customers is expected
    if customer.segment == Segment.NEW:
        return None
    if customer.recency > config.ticket_max_recency_days:
        return None
    if customer.average_ticket <= 0 or not customer.filtered_history:
        return None

    recent = customer.filtered_history[-config.ticket_window:]
    recent_average = sum((t.value for t in recent), Decimal("0")) / len(recent)
    if recent_average >= customer.average_ticket * config.ticket_drop_ratio:
        return None

    drop = (customer.average_ticket - recent_average) / customer.average_ticket * 100
    drop_label = drop.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return Alert(
        id=f"alert-{customer.id}-ticket",
        customer_id=customer.id,
        customer_name=customer.name,
        kind=AlertKind.TICKET_DROP,
        severity=AlertSeverity.HIGH,
        metric_label=f"-{drop_label}%",
        message=f"Queda no ticket médio (últimos {len(recent)} envios).",
        customer=customer,
    )


def typical_interval(customer: ScoredCustomer) -> Decimal:
    """Days between shipments, estimated as the span over the shipment count."""
    history = customer.filtered_history
    if not history:
        return Decimal("0")
    span = (history[-1].date - history[0].date).days
    return Decimal(span) / len(history)


def frequency_drop_alert(customer: ScoredCustomer, config: AlertConfig | None = None) -> Alert | None:
    """Alert when the current silence breaks the customer's usual rhythm."""
    config = config or AlertConfig()
    if customer.total_shipments <= config.frequency_min_shipments:
        return None
    # Past this point the customer is lost and the segment already says so
    if customer.recency >= config.frequency_max_recency_days:
        return None

    interval = typical_interval(customer)
    threshold = max(Decimal(config.frequency_floor_days), interval * config.frequency_interval_multiplier)
    if customer.recency <= threshold:
        return None

    interval_label = interval.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return Alert(
        id=f"alert-{customer.id}-freq",
        customer_id=customer.id,
        customer_name=customer.name,
        kind=AlertKind.FREQUENCY_DROP,
        severity=AlertSeverity.MEDIUM,
        metric_label=f"{customer.recency}d",
        message=f"Quebra de recorrência (cliente usualmente envia a cada {interval_label}d).",
        customer=customer,
    )


def detect_alerts(customers: Iterable[ScoredCustomer], config: AlertConfig | None = None) -> list[Alert]:
    """Run every rule over the scored customers.

    Parameters
    ----------
    customers : Iterable[ScoredCustomer]
        Customers of the current view.
    config : AlertConfig | None
        Rule thresholds.

    Returns
    -------
    list[Alert]
        Alerts in customer order. Recomputed from scratch on every call.
    """
    config = config or AlertConfig()
    alerts: list[Alert] = []
    for customer in customers:
        for rule in (ticket_drop_alert, frequency_drop_alert):
            alert = rule(customer, config)
            if alert is not None:
                alerts.append(alert)

    logger.debug("Detected %d alerts", len(alerts))
    return alerts
