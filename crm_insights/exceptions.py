"""Custom exception hierarchy for crm-insights."""


class CrmInsightsError(Exception):
    """Base exception for all crm-insights errors."""


class ConfigurationError(CrmInsightsError):
    """Raised when configuration is invalid or missing."""


class LedgerSourceError(CrmInsightsError):
    """Raised when the raw ledger cannot be fetched or read."""


class InsightServiceError(CrmInsightsError):
    """Raised when the narrative insight service fails or answers garbage."""


class ExportError(CrmInsightsError):
    """Raised when a sink cannot write its output."""
