"""Console sink for a quick text rendering of the dashboard."""

import sys
from decimal import Decimal
from typing import TextIO

from crm_insights.models.analytics import DashboardView


def _brl(value: Decimal) -> str:
    """``R$ 1.234,56``."""
    text = f"{value:,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")


class ConsoleSink:
    """Print dashboard summaries to a text stream."""

    def __init__(self, stream: TextIO | None = None, max_rows: int | None = 10) -> None:
        """Initialize console sink.

        Parameters
        ----------
        stream : TextIO | None
            Destination stream (stdout when omitted).
        max_rows : int | None
            Maximum rows per table (None for all).
        """
        self.stream = stream or sys.stdout
        self.max_rows = max_rows

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def _limit(self, rows: list) -> list:
        return rows[: self.max_rows] if self.max_rows else rows

    def print_dashboard(self, view: DashboardView) -> None:
        """Print KPIs, ABC curve, health tiers, alerts and the revenue chart."""
        result = view.result
        stats = view.stats

        self._print("=" * 60)
        reference = result.reference_date.isoformat() if result.reference_date else "sem dados"
        self._print(f"Dashboard de Clientes (referência: {reference})")
        self._print("=" * 60)
        self._print(f"Receita:        {_brl(stats.revenue)}")
        self._print(f"Envios:         {stats.shipments}")
        self._print(f"Clientes:       {stats.clients_count}")
        self._print(f"Ticket médio:   {_brl(stats.average_ticket)}")
        self._print(f"Ativos:         {stats.active_percent:.1f}%")

        self._print("\nCurva ABC")
        for tier in view.abc:
            self._print(f"  {tier.label}: {tier.count} clientes, {_brl(tier.revenue)}")

        self._print("\nSaúde da carteira")
        for tier in view.health:
            self._print(f"  {tier.label}: {tier.count}")

        self._print(f"\nAlertas ({len(view.alerts)})")
        for alert in self._limit(view.alerts):
            self._print(f"  [{alert.severity.value}] {alert.customer_name}: {alert.message} ({alert.metric_label})")

        self._print(f"\nReativação ({len(view.reactivation)})")
        for customer in self._limit(view.reactivation):
            tag = customer.opportunity_tag.value if customer.opportunity_tag else "-"
            self._print(f"  {customer.name}: {customer.recency}d inativo, {tag}")

        if result.chart_data:
            self._print("\nReceita mensal")
            for point in result.chart_data:
                actual = _brl(point.historical_revenue) if point.historical_revenue is not None else ""
                projected = _brl(point.projected_revenue) if point.projected_revenue is not None else ""
                self._print(f"  {point.period_label:>7} {actual:>18} {projected:>18}")
