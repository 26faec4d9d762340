"""Tests for ledger ingestion into customer aggregates."""

from datetime import date
from decimal import Decimal

from crm_insights.ingestion.ledger import parse_ledger_text


class TestParseLedgerText:
    """Tests for parse_ledger_text."""

    def test_groups_rows_by_normalized_tax_id(self, sample_ledger_text: str) -> None:
        customers = parse_ledger_text(sample_ledger_text)

        assert [c.id for c in customers] == ["11111111000111", "22222222000122"]

    def test_invalid_rows_are_skipped(self, sample_ledger_text: str) -> None:
        customers = parse_ledger_text(sample_ledger_text)

        # N/I tax id, bad date and short rows never create customers
        assert sum(len(c.history) for c in customers) == 4

    def test_aggregate_fields(self, sample_ledger_text: str) -> None:
        alfa = parse_ledger_text(sample_ledger_text)[0]

        assert alfa.name == "Transportes Alfa"
        assert alfa.cnpj == "11.111.111/0001-11"
        assert alfa.global_revenue == Decimal("2000.00")
        assert alfa.first_shipment_date == date(2024, 1, 1)
        assert alfa.last_shipment_date == date(2024, 6, 15)
        assert alfa.origins == frozenset({"São Paulo/SP"})
        assert alfa.destinations == frozenset({"Curitiba/PR", "Recife/PE"})

    def test_missing_destination_defaults_and_is_not_tracked(self, sample_ledger_text: str) -> None:
        beta = parse_ledger_text(sample_ledger_text)[1]

        assert beta.history[-1].destination == "N/A"
        assert "N/A" not in beta.destinations

    def test_history_is_chronological(self) -> None:
        text = "\n".join(
            [
                "Data;Origem;Destino;Valor;CNPJ;Cliente",
                "20/03/2024;A;B;R$ 3,00;123;X",
                "01/01/2024;A;B;R$ 1,00;123;X",
                "10/02/2024;A;B;R$ 2,00;123;X",
            ]
        )

        customer = parse_ledger_text(text)[0]

        assert [t.date for t in customer.history] == [date(2024, 1, 1), date(2024, 2, 10), date(2024, 3, 20)]
        assert customer.first_shipment_date == customer.history[0].date
        assert customer.last_shipment_date == customer.history[-1].date

    def test_transactions_cache_year_and_month(self, sample_ledger_text: str) -> None:
        first = parse_ledger_text(sample_ledger_text)[0].history[0]

        assert (first.year, first.month) == (2024, 1)
        assert first.period_key == "2024-01"

    def test_comma_separated_ledger(self) -> None:
        text = "\n".join(
            [
                "Data,Origem,Destino,Valor,CNPJ,Cliente",
                '01/01/2024,SP,RJ,"R$ 1.000,50",12.345.678/0001-90,Empresa',
            ]
        )

        customer = parse_ledger_text(text)[0]

        assert customer.id == "12345678000190"
        assert customer.history[0].value == Decimal("1000.50")

    def test_name_defaults_to_tax_id(self) -> None:
        text = "Data;Origem;Destino;Valor;CNPJ\n01/01/2024;SP;RJ;R$ 10,00;12.345.678/0001-90"

        customer = parse_ledger_text(text)[0]

        assert customer.name == "12.345.678/0001-90"

    def test_unparseable_value_counts_as_zero(self) -> None:
        text = "Data;Origem;Destino;Valor;CNPJ;Cliente\n01/01/2024;SP;RJ;a combinar;123;X"

        customer = parse_ledger_text(text)[0]

        assert customer.history[0].value == Decimal("0")

    def test_crlf_and_bom(self) -> None:
        text = "\ufeffData;Origem;Destino;Valor;CNPJ;Cliente\r\n01/01/2024;SP;RJ;R$ 10,00;123;X\r\n"

        assert len(parse_ledger_text(text)) == 1

    def test_empty_input(self) -> None:
        assert parse_ledger_text("") == []

    def test_header_only(self) -> None:
        assert parse_ledger_text("Data;Origem;Destino;Valor;CNPJ;Cliente\n") == []

    def test_customer_without_valid_dates_is_not_emitted(self) -> None:
        text = "Data;Origem;Destino;Valor;CNPJ;Cliente\nsem data;SP;RJ;R$ 10,00;123;X"

        assert parse_ledger_text(text) == []
