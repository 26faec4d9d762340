"""Domain models for customer analytics."""

from crm_insights.models.analytics import (
    Alert,
    ChartDataPoint,
    CustomerProfile,
    DashboardView,
    FilterState,
    InsightResult,
    MonthlyRevenue,
    PortfolioStats,
    ProcessResult,
    RouteStats,
    ScoredCustomer,
    ScoringResult,
    TierSummary,
)
from crm_insights.models.enums import (
    ABCCategory,
    AlertKind,
    AlertSeverity,
    HealthScore,
    InsightCategory,
    OpportunityTag,
    Segment,
    TrendDirection,
)
from crm_insights.models.ledger import (
    ClientAction,
    CustomerAggregate,
    CustomerOverlay,
    Justification,
    Transaction,
)

__all__ = [
    "ABCCategory",
    "Alert",
    "AlertKind",
    "AlertSeverity",
    "ChartDataPoint",
    "ClientAction",
    "CustomerAggregate",
    "CustomerOverlay",
    "CustomerProfile",
    "DashboardView",
    "FilterState",
    "HealthScore",
    "InsightCategory",
    "InsightResult",
    "Justification",
    "MonthlyRevenue",
    "OpportunityTag",
    "PortfolioStats",
    "ProcessResult",
    "RouteStats",
    "ScoredCustomer",
    "ScoringResult",
    "Segment",
    "TierSummary",
    "Transaction",
]
