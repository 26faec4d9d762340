"""Monthly revenue series with a 12-month forward projection."""

import logging
from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from crm_insights.config import ProjectionConfig
from crm_insights.models.analytics import ChartDataPoint
from crm_insights.models.ledger import Transaction

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")

CENTS = Decimal("0.01")


def period_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def period_label(year: int, month: int) -> str:
    """Short pt-BR month label, e.g. ``nov/24``."""
    return f"{MONTH_ABBREVIATIONS[month - 1]}/{year % 100:02d}"


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move ``offset`` calendar months from (year, month)."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def monthly_buckets(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum transaction values per ``YYYY-MM``."""
    buckets: dict[str, Decimal] = defaultdict(Decimal)
    for transaction in transactions:
        buckets[transaction.period_key] += transaction.value
    return dict(buckets)


def weighted_base(values: list[Decimal]) -> Decimal:
    """Linearly weighted mean, the last value weighing the most.

    With six values the weights are 1..6, oldest to newest.
    """
    if not values:
        return Decimal("0")
    weights = range(1, len(values) + 1)
    total = sum((v * w for v, w in zip(values, weights)), Decimal("0"))
    return total / sum(weights)


def build_revenue_series(
    transactions: Iterable[Transaction],
    reference_date: date | None,
    config: ProjectionConfig | None = None,
) -> list[ChartDataPoint]:
    """Historical and projected monthly revenue.

    Emits the trailing history window ending at the reference month with
    zero-filled gaps, then ``horizon_months`` projected months. The
    projection base is the weighted mean of the latest months (at most
    ``base_window_months``, never reaching before the first month with
    data) times the safety margin, scaled by the seasonality factor of each
    future calendar month.

    Parameters
    ----------
    transactions : Iterable[Transaction]
        Filtered transactions of every visible customer.
    reference_date : date | None
        Anchor of the history window.
    config : ProjectionConfig | None
        Window sizes, safety margin and seasonality table.

    Returns
    -------
    list[ChartDataPoint]
        Empty when there is nothing to chart.
    """
    config = config or ProjectionConfig()
    config.validate()

    buckets = monthly_buckets(transactions)
    if not buckets or reference_date is None:
        return []

    ref_year, ref_month = reference_date.year, reference_date.month
    first_key = min(buckets)

    points: list[ChartDataPoint] = []
    history: list[tuple[str, Decimal]] = []
    for offset in range(-(config.history_months - 1), 1):
        year, month = shift_month(ref_year, ref_month, offset)
        key = period_key(year, month)
        value = buckets.get(key, Decimal("0"))
        history.append((key, value))
        points.append(
            ChartDataPoint(
                period_label=period_label(year, month),
                period_key=key,
                historical_revenue=value,
                projected_revenue=None,
            )
        )

    observed = [value for key, value in history if key >= first_key] or [value for _, value in history]
    base = weighted_base(observed[-config.base_window_months:]) * config.safety_margin

    # Boundary month carries both series
    last = points[-1]
    points[-1] = ChartDataPoint(
        period_label=last.period_label,
        period_key=last.period_key,
        historical_revenue=last.historical_revenue,
        projected_revenue=last.historical_revenue,
    )

    for offset in range(1, config.horizon_months + 1):
        year, month = shift_month(ref_year, ref_month, offset)
        projected = (base * config.seasonality[month - 1]).quantize(CENTS, rounding=ROUND_HALF_UP)
        points.append(
            ChartDataPoint(
                period_label=period_label(year, month),
                period_key=period_key(year, month),
                historical_revenue=None,
                projected_revenue=projected,
                is_projection=True,
            )
        )

    logger.debug("Projection base %s from %d months", base, len(observed[-config.base_window_months:]))
    return points
