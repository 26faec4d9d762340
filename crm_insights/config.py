"""Configuration management for crm-insights."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from crm_insights.exceptions import ConfigurationError

DEFAULT_SHEET_ID = "1tT6SxM22Cf4yTfbAWM3S3CNLf5btfspQElczKVBm_uw"
DEFAULT_SHEET_GID = "2053409294"
DEFAULT_LEDGER_URL = (
    f"https://docs.google.com/spreadsheets/d/{DEFAULT_SHEET_ID}/export?format=csv&gid={DEFAULT_SHEET_GID}"
)

# Shipping-volume calendar, January first. Q1 trough, November peak.
DEFAULT_SEASONALITY: tuple[Decimal, ...] = tuple(
    Decimal(v)
    for v in (
        "0.82", "0.85", "0.93", "0.96", "0.98", "1.00",
        "1.02", "1.05", "1.08", "1.12", "1.20", "1.06",
    )
)


@dataclass
class SourceConfig:
    """Ledger source configuration."""

    ledger_url: str = DEFAULT_LEDGER_URL
    timeout_seconds: float = 20.0


@dataclass
class ScoringConfig:
    """Thresholds used by the segmentation and scoring engine."""

    lost_after_days: int = 180
    at_risk_after_days: int = 90
    new_customer_tenure_days: int = 90
    champion_revenue: Decimal = Decimal("100000")
    abc_a_share: Decimal = Decimal("0.80")
    abc_b_share: Decimal = Decimal("0.95")
    premium_ticket: Decimal = Decimal("5000")
    high_volume_revenue: Decimal = Decimal("50000")
    recoverable_shipments: int = 10

    def validate(self) -> None:
        """Check threshold ordering.

        Raises
        ------
        ConfigurationError
            If the thresholds cannot produce a consistent segmentation.
        """
        if self.at_risk_after_days >= self.lost_after_days:
            raise ConfigurationError("at_risk_after_days must be lower than lost_after_days")
        if not Decimal("0") < self.abc_a_share <= self.abc_b_share <= Decimal("1"):
            raise ConfigurationError("ABC shares must satisfy 0 < A <= B <= 1")


@dataclass
class ProjectionConfig:
    """Revenue projection tuning constants."""

    history_months: int = 12
    horizon_months: int = 12
    base_window_months: int = 6
    safety_margin: Decimal = Decimal("0.85")
    seasonality: tuple[Decimal, ...] = DEFAULT_SEASONALITY

    def validate(self) -> None:
        """Check the projection constants.

        Raises
        ------
        ConfigurationError
            If the seasonality table is not a 12-slot table or a window is empty.
        """
        if len(self.seasonality) != 12:
            raise ConfigurationError(f"seasonality needs 12 monthly factors, got {len(self.seasonality)}")
        if self.history_months < 1 or self.horizon_months < 1 or self.base_window_months < 1:
            raise ConfigurationError("projection windows must be at least one month")
        if self.safety_margin <= 0:
            raise ConfigurationError("safety_margin must be positive")


@dataclass
class AlertConfig:
    """Anomaly detector thresholds."""

    ticket_window: int = 3
    ticket_drop_ratio: Decimal = Decimal("0.70")
    ticket_max_recency_days: int = 90
    frequency_min_shipments: int = 5
    frequency_interval_multiplier: Decimal = Decimal("2.5")
    frequency_floor_days: int = 15
    frequency_max_recency_days: int = 180


@dataclass
class InsightConfig:
    """Narrative insight service configuration."""

    api_key: str | None = None
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 60.0
    history_sample: int = 10
    portfolio_sample: int = 50

    @property
    def enabled(self) -> bool:
        """Whether an API key is configured."""
        return bool(self.api_key)


@dataclass
class OutputConfig:
    """Output configuration."""

    output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class CrmInsightsConfig:
    """Main configuration for crm-insights."""

    source: SourceConfig = field(default_factory=SourceConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    insights: InsightConfig = field(default_factory=InsightConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    def validate(self) -> None:
        """Validate every section that has constraints."""
        self.scoring.validate()
        self.projection.validate()

    @classmethod
    def from_env(cls) -> "CrmInsightsConfig":
        """Create config from environment variables."""
        import os

        source = SourceConfig(
            ledger_url=os.getenv("LEDGER_URL", DEFAULT_LEDGER_URL),
            timeout_seconds=float(os.getenv("LEDGER_TIMEOUT", "20")),
        )

        insights = InsightConfig(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None,
            model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            timeout_seconds=float(os.getenv("INSIGHT_TIMEOUT", "60")),
        )

        output = OutputConfig(
            output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        projection = ProjectionConfig()
        margin = os.getenv("SAFETY_MARGIN")
        if margin:
            try:
                projection.safety_margin = Decimal(margin)
            except ArithmeticError as exc:
                raise ConfigurationError(f"SAFETY_MARGIN is not a number: {margin!r}") from exc

        config = cls(
            source=source,
            projection=projection,
            insights=insights,
            output=output,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
        config.validate()
        return config
