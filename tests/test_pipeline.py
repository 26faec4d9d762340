"""Tests for the end-to-end analytics pipeline."""

from datetime import date, datetime

import pytest

from crm_insights.analytics.pipeline import build_dashboard, process_customers
from crm_insights.ingestion.ledger import parse_ledger_text
from crm_insights.models.analytics import FilterState
from crm_insights.models.enums import Segment
from crm_insights.models.ledger import ClientAction, CustomerAggregate, CustomerOverlay, Justification


@pytest.fixture
def customers(sample_ledger_text: str) -> list[CustomerAggregate]:
    return parse_ledger_text(sample_ledger_text)


class TestProcessCustomers:
    """Tests for process_customers."""

    def test_scores_and_charts(self, customers: list[CustomerAggregate]) -> None:
        result = process_customers(customers)

        assert result.reference_date == date(2024, 12, 1)
        assert [c.id for c in result.clients] == ["22222222000122", "11111111000111"]
        assert len(result.chart_data) == 24
        assert result.chart_data[11].period_key == "2024-12"

    def test_segments(self, customers: list[CustomerAggregate]) -> None:
        """Alfa went silent in June, Beta started in November."""
        result = process_customers(customers)
        by_id = {c.id: c for c in result.clients}

        assert by_id["11111111000111"].recency == 169
        assert by_id["11111111000111"].segment == Segment.AT_RISK
        assert by_id["22222222000122"].segment == Segment.NEW

    def test_chart_follows_filter(self, customers: list[CustomerAggregate]) -> None:
        result = process_customers(customers, FilterState(clients=frozenset({"11111111000111"})))
        history = {p.period_key: p.historical_revenue for p in result.chart_data if not p.is_projection}

        assert history["2024-06"] == 500
        assert history["2024-11"] == 0

    def test_empty_year(self, customers: list[CustomerAggregate]) -> None:
        """Filtering to a year without shipments gives no clients and no chart."""
        result = process_customers(customers, FilterState(years=frozenset({2020})))

        assert result.clients == []
        assert result.chart_data == []
        assert result.available_origins == ["Campinas/SP", "São Paulo/SP"]

    def test_empty_dataset(self) -> None:
        result = process_customers([])

        assert result.reference_date is None
        assert result.clients == []
        assert result.chart_data == []

    def test_idempotent(self, customers: list[CustomerAggregate]) -> None:
        filters = FilterState(origins=frozenset({"São Paulo/SP"}))

        assert process_customers(customers, filters) == process_customers(customers, filters)

    def test_formatted_client_id_filter(self, customers: list[CustomerAggregate]) -> None:
        result = process_customers(customers, FilterState.from_dict({"clients": ["11.111.111/0001-11"]}))

        assert [c.id for c in result.clients] == ["11111111000111"]

    def test_reference_before_latest_shipment_rejected(self, customers: list[CustomerAggregate]) -> None:
        with pytest.raises(ValueError, match="precedes the latest shipment"):
            process_customers(customers, reference_date=date(2024, 1, 1))


class TestBuildDashboard:
    """Tests for build_dashboard."""

    def test_view(self, customers: list[CustomerAggregate]) -> None:
        view = build_dashboard(customers)

        assert view.stats.clients_count == 2
        assert view.stats.shipments == 4
        assert [c.id for c in view.reactivation] == ["11111111000111"]
        assert isinstance(view.generated_at, datetime)

    def test_overlay_hides_justified_customer(self, customers: list[CustomerAggregate]) -> None:
        overlays = {
            "11111111000111": CustomerOverlay(
                justification=Justification("Mudou de fornecedor", datetime(2024, 12, 2), "ana"),
            )
        }

        view = build_dashboard(customers, overlays=overlays)
        alfa = next(c for c in view.result.clients if c.id == "11111111000111")

        assert view.reactivation == []
        assert alfa.justification is not None
        assert alfa.segment == Segment.AT_RISK

    def test_overlays_do_not_touch_input(self, customers: list[CustomerAggregate]) -> None:
        overlays = {"22222222000122": CustomerOverlay(justification=Justification("x", datetime(2024, 12, 2), "ana"))}

        build_dashboard(customers, overlays=overlays)

        assert all(c.justification is None for c in customers)

    def test_overlay_actions_reach_scored_customer(self, customers: list[CustomerAggregate]) -> None:
        actions = (
            ClientAction("Primeiro contato", datetime(2024, 12, 2), "ana"),
            ClientAction("Proposta enviada", datetime(2024, 12, 5), "ana", kind="email"),
        )
        overlays = {"11111111000111": CustomerOverlay(actions=actions)}

        view = build_dashboard(customers, overlays=overlays)
        alfa = next(c for c in view.result.clients if c.id == "11111111000111")
        beta = next(c for c in view.result.clients if c.id == "22222222000122")

        assert alfa.actions == actions
        assert alfa.justification is None
        assert beta.actions == ()

    def test_empty_dataset(self) -> None:
        view = build_dashboard([])

        assert view.result.clients == []
        assert view.alerts == []
        assert view.stats.clients_count == 0
