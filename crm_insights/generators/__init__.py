"""Synthetic ledger generators."""

from crm_insights.generators.ledger import CustomerBehavior, LedgerGenerator, LedgerRow

__all__ = ["CustomerBehavior", "LedgerGenerator", "LedgerRow"]
