"""Analytics engines: scoring, projection, alerts and portfolio summaries."""

from crm_insights.analytics.alerts import detect_alerts
from crm_insights.analytics.pipeline import build_dashboard, process_customers
from crm_insights.analytics.portfolio import (
    abc_summary,
    customer_profile,
    health_summary,
    portfolio_stats,
    reactivation_opportunities,
    top_customers,
)
from crm_insights.analytics.projection import build_revenue_series
from crm_insights.analytics.scoring import score_customers

__all__ = [
    "abc_summary",
    "build_dashboard",
    "build_revenue_series",
    "customer_profile",
    "detect_alerts",
    "health_summary",
    "portfolio_stats",
    "process_customers",
    "reactivation_opportunities",
    "score_customers",
    "top_customers",
]
