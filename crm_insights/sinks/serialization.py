"""Shared serialization utilities for sinks."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from crm_insights.models.analytics import (
    Alert,
    ChartDataPoint,
    DashboardView,
    ScoredCustomer,
    TierSummary,
)


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if isinstance(obj, ScoredCustomer):
        return scored_customer_to_dict(obj)
    if isinstance(obj, Alert):
        return alert_to_dict(obj)
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return obj
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert a dataclass without deep copy, serializing each field."""
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return float(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, (ScoredCustomer, Alert)):
        return to_dict(value)
    elif is_dataclass(value):
        return dataclass_to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (frozenset, set)):
        return sorted(serialize_value(v) for v in value)
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def scored_customer_to_dict(customer: ScoredCustomer) -> dict:
    """Flat view of a scored customer; the transaction history is left out."""
    return {
        "id": customer.id,
        "name": customer.name,
        "cnpj": customer.cnpj,
        "totalRevenue": serialize_value(customer.total_revenue),
        "totalShipments": customer.total_shipments,
        "firstShipmentDate": serialize_value(customer.first_shipment_date),
        "lastShipmentDate": serialize_value(customer.last_shipment_date),
        "origin": serialize_value(customer.origins),
        "destination": serialize_value(customer.destinations),
        "recency": customer.recency,
        "frequency": customer.frequency,
        "monetary": serialize_value(customer.monetary),
        "averageTicket": serialize_value(customer.average_ticket),
        "segment": customer.segment.value,
        "abcCategory": customer.abc_category.value,
        "healthScore": customer.health_score.value,
        "healthValue": customer.health_value,
        "opportunityTag": serialize_value(customer.opportunity_tag),
        "justification": serialize_value(customer.justification),
        "actions": serialize_value(customer.actions),
    }


def alert_to_dict(alert: Alert) -> dict:
    return {
        "id": alert.id,
        "clientId": alert.customer_id,
        "clientName": alert.customer_name,
        "type": alert.kind.value,
        "severity": alert.severity.value,
        "metric": alert.metric_label,
        "message": alert.message,
    }


def chart_point_to_dict(point: ChartDataPoint) -> dict:
    return {
        "name": point.period_label,
        "date": point.period_key,
        "revenue": serialize_value(point.historical_revenue),
        "projectedRevenue": serialize_value(point.projected_revenue),
        "isProjection": point.is_projection,
    }


def _tier_to_dict(summary: TierSummary) -> dict:
    return {"name": summary.label, "count": summary.count, "revenue": serialize_value(summary.revenue)}


def dashboard_to_dict(view: DashboardView) -> dict:
    """JSON-ready payload of a whole dashboard render."""
    result = view.result
    return {
        "generatedAt": serialize_value(view.generated_at),
        "referenceDate": serialize_value(result.reference_date),
        "stats": dataclass_to_dict(view.stats),
        "abc": [_tier_to_dict(s) for s in view.abc],
        "health": [_tier_to_dict(s) for s in view.health],
        "clients": [scored_customer_to_dict(c) for c in result.clients],
        "chartData": [chart_point_to_dict(p) for p in result.chart_data],
        "alerts": [alert_to_dict(a) for a in view.alerts],
        "reactivation": [c.id for c in view.reactivation],
        "availableOrigins": result.available_origins,
        "availableDestinations": result.available_destinations,
    }
