"""Pytest configuration and fixtures."""

from typing import Callable

import pytest

from crm_insights.models.ledger import CustomerAggregate, Transaction
from tests.factories import make_aggregate, make_transaction


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def tx() -> Callable[..., Transaction]:
    """Transaction factory."""
    return make_transaction


@pytest.fixture
def aggregate() -> Callable[..., CustomerAggregate]:
    """Aggregate factory."""
    return make_aggregate


@pytest.fixture
def sample_ledger_text() -> str:
    """Small semicolon ledger in the spreadsheet export layout."""
    return "\n".join(
        [
            "Data;Origem;Destino;Valor;CNPJ;Cliente",
            '01/01/2024;São Paulo/SP;Curitiba/PR;"R$ 1.500,00";11.111.111/0001-11;Transportes Alfa',
            "15/06/2024;São Paulo/SP;Recife/PE;R$ 500,00;11111111000111;Transportes Alfa",
            "10/11/2024;Campinas/SP;Curitiba/PR;R$ 2.000,00;22.222.222/0001-22;Beta Logística",
            "01/12/2024;Campinas/SP;;R$ 300,50;22.222.222/0001-22;Beta Logística",
            "05/05/2024;Santos/SP;Recife/PE;R$ 100,00;N/I;Sem Cadastro",
            "data ruim;Santos/SP;Recife/PE;R$ 100,00;33.333.333/0001-33;Gama",
            "curta;linha",
        ]
    )
