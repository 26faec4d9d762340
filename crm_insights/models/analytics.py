"""Derived view-models produced by the analytics engines."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from crm_insights.ingestion.parsing import normalize_tax_id
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
    Justification,
    Transaction,
)


@dataclass(frozen=True)
class FilterState:
    """Active dashboard filters.

    An empty set means no restriction on that dimension. Dimensions are
    combined with AND, values within a dimension with OR.
    """

    years: frozenset[int] = frozenset()
    months: frozenset[int] = frozenset()
    clients: frozenset[str] = frozenset()
    origins: frozenset[str] = frozenset()
    destinations: frozenset[str] = frozenset()
    segments: frozenset[Segment] = frozenset()

    @property
    def has_history_filter(self) -> bool:
        """Whether any temporal or route dimension is restricted."""
        return bool(self.years or self.months or self.origins or self.destinations)

    def matches(self, transaction: Transaction) -> bool:
        """Check a transaction against the temporal and route dimensions."""
        if self.years and transaction.year not in self.years:
            return False
        if self.months and transaction.month not in self.months:
            return False
        if self.origins and transaction.origin not in self.origins:
            return False
        if self.destinations and transaction.destination not in self.destinations:
            return False
        return True

    @classmethod
    def from_dict(cls, data: dict[str, Iterable[Any]]) -> "FilterState":
        """Build a filter from plain lists, e.g. a decoded JSON payload.

        Client ids may be given formatted (``11.111.111/0001-11``); they are
        normalized into customer keys the way ingestion builds them.
        """
        return cls(
            years=frozenset(int(y) for y in data.get("years", ())),
            months=frozenset(int(m) for m in data.get("months", ())),
            clients=frozenset(normalize_tax_id(str(c)) for c in data.get("clients", ())),
            origins=frozenset(data.get("origins", ())),
            destinations=frozenset(data.get("destinations", ())),
            segments=frozenset(_coerce_segment(s) for s in data.get("segments", ())),
        )


@dataclass(frozen=True)
class ScoredCustomer:
    """A customer aggregate plus the metrics derived for the current filter."""

    customer: CustomerAggregate
    filtered_history: tuple[Transaction, ...]
    total_revenue: Decimal
    total_shipments: int
    recency: int
    tenure_days: int
    average_ticket: Decimal
    segment: Segment
    health_score: HealthScore
    health_value: int
    opportunity_tag: OpportunityTag | None = None
    abc_category: ABCCategory = ABCCategory.C

    @property
    def frequency(self) -> int:
        return self.total_shipments

    @property
    def monetary(self) -> Decimal:
        return self.total_revenue

    @property
    def id(self) -> str:
        return self.customer.id

    @property
    def name(self) -> str:
        return self.customer.name

    @property
    def cnpj(self) -> str:
        return self.customer.cnpj

    @property
    def history(self) -> tuple[Transaction, ...]:
        return self.customer.history

    @property
    def first_shipment_date(self) -> date:
        return self.customer.first_shipment_date

    @property
    def last_shipment_date(self) -> date:
        return self.customer.last_shipment_date

    @property
    def origins(self) -> frozenset[str]:
        return self.customer.origins

    @property
    def destinations(self) -> frozenset[str]:
        return self.customer.destinations

    @property
    def justification(self) -> Justification | None:
        return self.customer.justification

    @property
    def actions(self) -> tuple[ClientAction, ...]:
        return self.customer.actions


@dataclass(frozen=True)
class ChartDataPoint:
    """One month of the revenue chart.

    Historical months carry ``historical_revenue``, future months carry
    ``projected_revenue``. The last historical month carries both so a line
    chart joins without a gap.
    """

    period_label: str
    period_key: str
    historical_revenue: Decimal | None
    projected_revenue: Decimal | None
    is_projection: bool = False


@dataclass(frozen=True)
class Alert:
    """Behavioural break detected for one customer."""

    id: str
    customer_id: str
    customer_name: str
    kind: AlertKind
    severity: AlertSeverity
    metric_label: str
    message: str
    customer: ScoredCustomer = field(repr=False, compare=False)


@dataclass(frozen=True)
class ScoringResult:
    """Output of one scoring pass."""

    reference_date: date | None
    scored_customers: list[ScoredCustomer]
    available_origins: list[str]
    available_destinations: list[str]


@dataclass(frozen=True)
class ProcessResult:
    """Scoring output plus the revenue chart series."""

    reference_date: date | None
    clients: list[ScoredCustomer]
    chart_data: list[ChartDataPoint]
    available_origins: list[str]
    available_destinations: list[str]


@dataclass(frozen=True)
class PortfolioStats:
    """Headline KPIs for the current view."""

    revenue: Decimal
    shipments: int
    clients_count: int
    average_ticket: Decimal
    active_percent: Decimal


@dataclass(frozen=True)
class TierSummary:
    """Count and revenue of the customers falling in one tier."""

    label: str
    count: int
    revenue: Decimal
    customers: list[ScoredCustomer] = field(repr=False)


@dataclass(frozen=True)
class MonthlyRevenue:
    period_key: str
    period_label: str
    value: Decimal


@dataclass(frozen=True)
class RouteStats:
    origin: str
    destination: str
    revenue: Decimal
    shipments: int


@dataclass(frozen=True)
class CustomerProfile:
    """Single-customer drill-down."""

    customer: ScoredCustomer
    monthly_revenue: list[MonthlyRevenue]
    trend_percent: Decimal
    trend_direction: TrendDirection
    top_origin: str
    top_destination: str
    top_routes: list[RouteStats]


@dataclass(frozen=True)
class InsightResult:
    """One narrative suggestion returned by the insight service."""

    category: InsightCategory
    title: str
    description: str


@dataclass
class DashboardView:
    """Everything a presentation layer needs for one render."""

    result: ProcessResult
    alerts: list[Alert]
    stats: PortfolioStats
    abc: list[TierSummary]
    health: list[TierSummary]
    reactivation: list[ScoredCustomer]
    generated_at: datetime = field(default_factory=datetime.now)


def _coerce_segment(value: Any) -> Segment:
    """Accept a ``Segment``, its display label or its member name."""
    if isinstance(value, Segment):
        return value
    if value in Segment.__members__:
        return Segment[value]
    return Segment(value)
