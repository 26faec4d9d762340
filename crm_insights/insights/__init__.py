"""Optional narrative insights from a generative text service."""

from crm_insights.insights.client import NarrativeInsightClient, parse_insights

__all__ = ["NarrativeInsightClient", "parse_insights"]
