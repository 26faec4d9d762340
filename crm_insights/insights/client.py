"""Client for the narrative insight service (Gemini ``generateContent``).

The analytics never depend on this service. Every public method degrades
to an empty result when the service is not configured, unreachable or
answers something unusable.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Sequence

import httpx

from crm_insights.config import InsightConfig
from crm_insights.exceptions import InsightServiceError
from crm_insights.models.analytics import InsightResult, ScoredCustomer
from crm_insights.models.enums import InsightCategory

logger = logging.getLogger(__name__)

PORTFOLIO_UNAVAILABLE = "Análise indisponível."

ACTIVE_MAX_RECENCY = 90

INSIGHT_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "category": {"type": "STRING", "enum": [c.value for c in InsightCategory]},
            "title": {"type": "STRING"},
            "description": {"type": "STRING"},
        },
        "required": ["category", "title", "description"],
    },
}


class NarrativeInsightClient:
    """Ask a generative text service for customer and portfolio narratives."""

    def __init__(self, config: InsightConfig | None = None, client: httpx.Client | None = None) -> None:
        """Initialize the insight client.

        Parameters
        ----------
        config : InsightConfig | None
            API key, model and endpoint settings.
        client : httpx.Client | None
            Optional preconfigured HTTP client (tests inject a mock transport).
        """
        self.config = config or InsightConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.config.timeout_seconds)
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "NarrativeInsightClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def generate_text(self, prompt: str, response_schema: dict[str, Any] | None = None) -> str:
        """Send one prompt and return the first candidate's text.

        Raises
        ------
        InsightServiceError
            On transport errors, non-2xx responses or an empty answer.
        """
        url = f"{self.config.base_url}/models/{self.config.model}:generateContent"
        body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }

        try:
            response = self._http().post(url, json=body, headers={"x-goog-api-key": self.config.api_key or ""})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise InsightServiceError(f"Insight request failed: {exc}") from exc
        except ValueError as exc:
            raise InsightServiceError("Insight service returned invalid JSON") from exc

        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise InsightServiceError("Insight service returned no candidate text") from exc
        if not text:
            raise InsightServiceError("Insight service returned an empty answer")
        return text

    def generate_client_insights(self, customer: ScoredCustomer) -> list[InsightResult]:
        """Up to a handful of tactical suggestions for one customer.

        Returns an empty list when the service is disabled or fails.
        """
        if not self.enabled:
            logger.debug("Insight service disabled; no API key configured")
            return []

        try:
            text = self.generate_text(build_client_prompt(customer, self.config.history_sample), INSIGHT_SCHEMA)
            return parse_insights(text)
        except InsightServiceError as exc:
            logger.warning(
                "Client insights unavailable for %s: %s", customer.id, exc, extra={"customer_id": customer.id}
            )
            return []

    def generate_portfolio_analysis(self, customers: Sequence[ScoredCustomer]) -> str:
        """Markdown report on the whole portfolio, or a fixed fallback text."""
        if not self.enabled:
            return PORTFOLIO_UNAVAILABLE

        try:
            return self.generate_text(build_portfolio_prompt(customers, self.config.portfolio_sample))
        except InsightServiceError as exc:
            logger.warning("Portfolio analysis unavailable: %s", exc)
            return PORTFOLIO_UNAVAILABLE


def parse_insights(text: str) -> list[InsightResult]:
    """Decode the JSON answer, dropping records that do not fit the contract.

    Raises
    ------
    InsightServiceError
        If the text is not a JSON array.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InsightServiceError("Insight answer is not JSON") from exc
    if not isinstance(raw, list):
        raise InsightServiceError("Insight answer is not a list")

    results: list[InsightResult] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            category = InsightCategory(item.get("category"))
        except ValueError:
            continue
        title, description = item.get("title"), item.get("description")
        if not isinstance(title, str) or not isinstance(description, str):
            continue
        results.append(InsightResult(category=category, title=title, description=description))
    return results


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def build_client_prompt(customer: ScoredCustomer, history_sample: int = 10) -> str:
    recent = "\n".join(
        f"{t.date.isoformat()}: R${_money(t.value)} ({t.origin} -> {t.destination})"
        for t in customer.history[-history_sample:]
    )
    return (
        "Analise este cliente de logística B2B. Evite obviedades; quero insights táticos e numéricos.\n\n"
        f"Cliente: {customer.name}\n"
        f"Segmento: {customer.segment.value} (Score: {customer.health_value})\n"
        f"Receita Total: R$ {_money(customer.total_revenue)}\n"
        f"Recência: {customer.recency} dias\n"
        f"Ticket Médio: R$ {_money(customer.average_ticket)}\n\n"
        f"Transações Recentes:\n{recent}\n\n"
        "Gere 3 sugestões JSON. Category: 'opportunity' | 'risk' | 'attention' | 'retention'."
    )


def build_portfolio_prompt(customers: Sequence[ScoredCustomer], sample: int = 50) -> str:
    top = sorted(customers, key=lambda c: c.total_revenue, reverse=True)[:sample]
    context = {
        "portfolio_stats": {
            "total_revenue": float(sum((c.total_revenue for c in customers), Decimal("0"))),
            "total_clients": len(customers),
            "active_clients": sum(1 for c in customers if c.recency <= ACTIVE_MAX_RECENCY),
        },
        "top_clients_sample": [
            {
                "name": c.name,
                "revenue": float(c.total_revenue),
                "shipments": c.total_shipments,
                "recency": c.recency,
                "health": c.health_value,
            }
            for c in top
        ],
    }
    return (
        "Analise esta carteira de clientes de logística e gere um relatório executivo em Markdown. "
        "Seja crítico e direto; foque em riscos de concentração e oportunidades perdidas.\n\n"
        f"DADOS JSON:\n{json.dumps(context, ensure_ascii=False)}"
    )
