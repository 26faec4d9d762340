"""Tests for config and logging."""

import io
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

import pytest

from crm_insights.config import (
    DEFAULT_LEDGER_URL,
    DEFAULT_SEASONALITY,
    AlertConfig,
    CrmInsightsConfig,
    InsightConfig,
    OutputConfig,
    ProjectionConfig,
    ScoringConfig,
    SourceConfig,
)
from crm_insights.exceptions import ConfigurationError
from crm_insights.logging import JsonFormatter, setup_logging, setup_logging_from_config

ENV_VARS = [
    "LEDGER_URL",
    "LEDGER_TIMEOUT",
    "GEMINI_API_KEY",
    "API_KEY",
    "GEMINI_MODEL",
    "INSIGHT_TIMEOUT",
    "OUTPUT_DIR",
    "PRETTY_JSON",
    "SAFETY_MARGIN",
    "LOG_LEVEL",
    "LOG_FORMAT",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Environment without any crm-insights variable."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSectionDefaults:
    """Tests for the default thresholds of each section."""

    def test_source(self) -> None:
        config = SourceConfig()

        assert config.ledger_url == DEFAULT_LEDGER_URL
        assert "format=csv" in config.ledger_url
        assert config.timeout_seconds == 20.0

    def test_scoring(self) -> None:
        config = ScoringConfig()

        assert config.lost_after_days == 180
        assert config.at_risk_after_days == 90
        assert config.new_customer_tenure_days == 90
        assert config.champion_revenue == Decimal("100000")
        assert config.abc_a_share == Decimal("0.80")
        assert config.abc_b_share == Decimal("0.95")

    def test_projection(self) -> None:
        config = ProjectionConfig()

        assert config.history_months == 12
        assert config.horizon_months == 12
        assert config.base_window_months == 6
        assert config.safety_margin == Decimal("0.85")
        assert len(config.seasonality) == 12
        assert config.seasonality[10] == max(DEFAULT_SEASONALITY)

    def test_alerts(self) -> None:
        config = AlertConfig()

        assert config.ticket_window == 3
        assert config.ticket_drop_ratio == Decimal("0.70")
        assert config.frequency_interval_multiplier == Decimal("2.5")
        assert config.frequency_floor_days == 15

    def test_insights_disabled_without_key(self) -> None:
        assert InsightConfig().enabled is False
        assert InsightConfig(api_key="abc").enabled is True

    def test_output(self) -> None:
        config = OutputConfig()

        assert config.output_dir == Path("output")
        assert config.pretty_json is False


class TestValidation:
    """Tests for config validation."""

    def test_defaults_are_valid(self) -> None:
        CrmInsightsConfig().validate()

    def test_inverted_inactivity_thresholds(self) -> None:
        with pytest.raises(ConfigurationError, match="at_risk_after_days"):
            ScoringConfig(at_risk_after_days=200).validate()

    def test_abc_shares_out_of_order(self) -> None:
        with pytest.raises(ConfigurationError):
            ScoringConfig(abc_a_share=Decimal("0.96")).validate()

    def test_short_seasonality_table(self) -> None:
        with pytest.raises(ConfigurationError, match="12 monthly factors"):
            ProjectionConfig(seasonality=DEFAULT_SEASONALITY[:6]).validate()

    def test_non_positive_margin(self) -> None:
        with pytest.raises(ConfigurationError):
            ProjectionConfig(safety_margin=Decimal("0")).validate()

    def test_empty_window(self) -> None:
        with pytest.raises(ConfigurationError):
            ProjectionConfig(base_window_months=0).validate()


class TestCrmInsightsConfig:
    """Tests for CrmInsightsConfig."""

    def test_default_values(self) -> None:
        config = CrmInsightsConfig()

        assert isinstance(config.source, SourceConfig)
        assert isinstance(config.scoring, ScoringConfig)
        assert isinstance(config.projection, ProjectionConfig)
        assert isinstance(config.alerts, AlertConfig)
        assert config.log_level == "INFO"
        assert config.log_format == "standard"

    def test_from_env_default(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test creating config from environment with defaults."""
        config = CrmInsightsConfig.from_env()

        assert config.source.ledger_url == DEFAULT_LEDGER_URL
        assert config.insights.api_key is None
        assert config.output.output_dir == Path("output")
        assert config.projection.safety_margin == Decimal("0.85")

    def test_from_env_custom(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test creating config from custom environment variables."""
        clean_env.setenv("LEDGER_URL", "https://example.com/ledger.csv")
        clean_env.setenv("LEDGER_TIMEOUT", "5")
        clean_env.setenv("GEMINI_API_KEY", "secret")
        clean_env.setenv("GEMINI_MODEL", "gemini-pro")
        clean_env.setenv("OUTPUT_DIR", "/data/output")
        clean_env.setenv("PRETTY_JSON", "true")
        clean_env.setenv("SAFETY_MARGIN", "0.9")
        clean_env.setenv("LOG_LEVEL", "DEBUG")
        clean_env.setenv("LOG_FORMAT", "json")

        config = CrmInsightsConfig.from_env()

        assert config.source.ledger_url == "https://example.com/ledger.csv"
        assert config.source.timeout_seconds == 5.0
        assert config.insights.api_key == "secret"
        assert config.insights.model == "gemini-pro"
        assert config.output.output_dir == Path("/data/output")
        assert config.output.pretty_json is True
        assert config.projection.safety_margin == Decimal("0.9")
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_from_env_legacy_api_key(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("API_KEY", "legacy")

        assert CrmInsightsConfig.from_env().insights.api_key == "legacy"

    def test_from_env_bad_margin(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SAFETY_MARGIN", "muito")

        with pytest.raises(ConfigurationError, match="SAFETY_MARGIN"):
            CrmInsightsConfig.from_env()

    def test_from_env_negative_margin(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SAFETY_MARGIN", "-1")

        with pytest.raises(ConfigurationError):
            CrmInsightsConfig.from_env()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        """Test default logging setup."""
        setup_logging()

        assert logging.getLogger("crm_insights").level == logging.INFO

    def test_setup_logging_debug(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        """Test logging with invalid level defaults to INFO."""
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        setup_logging(format_type="json")

        assert any(isinstance(h.formatter, JsonFormatter) for h in logging.getLogger().handlers)

    def test_setup_logging_replaces_handlers(self) -> None:
        """Test that setup_logging replaces existing handlers."""
        root = logging.getLogger()
        root.addHandler(logging.StreamHandler())
        root.addHandler(logging.StreamHandler())

        setup_logging()

        assert len(root.handlers) == 1

    def test_custom_stream(self) -> None:
        stream = io.StringIO()
        setup_logging(stream=stream)

        logging.getLogger("crm_insights.test").warning("Planilha vazia")

        assert "WARNING  | crm_insights.test | Planilha vazia" in stream.getvalue()

    def test_from_config(self) -> None:
        setup_logging_from_config(CrmInsightsConfig(log_level="WARNING", log_format="json"))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_level_override(self) -> None:
        setup_logging_from_config(CrmInsightsConfig(log_level="WARNING"), level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_external_loggers_quieted(self) -> None:
        """HTTP and Faker loggers stay at WARNING regardless of main level."""
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
        assert logging.getLogger("faker").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def _record(self, **kwargs) -> logging.LogRecord:
        defaults = dict(
            name="crm_insights.test",
            level=logging.INFO,
            pathname="/path/to/file.py",
            lineno=42,
            msg="Cliente %s processado",
            args=("Alfa",),
            exc_info=None,
        )
        defaults.update(kwargs)
        return logging.LogRecord(**defaults)

    def test_format_basic(self) -> None:
        data = json.loads(JsonFormatter().format(self._record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "crm_insights.test"
        assert data["message"] == "Cliente Alfa processado"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(self._record(level=logging.ERROR, exc_info=exc_info)))

        assert data["level"] == "ERROR"
        assert "ValueError" in data["exception"]

    def test_context_fields(self) -> None:
        """Known ``extra=`` attributes are kept, others are not."""
        record = self._record()
        record.customer_id = "00012345678900"
        record.reference_date = "2024-12-01"
        record.unrelated = "x"

        data = json.loads(JsonFormatter().format(record))

        assert data["customer_id"] == "00012345678900"
        assert data["reference_date"] == "2024-12-01"
        assert "unrelated" not in data

    def test_extra_through_logger(self) -> None:
        stream = io.StringIO()
        setup_logging(format_type="json", stream=stream)

        logging.getLogger("crm_insights.ingestion").info("Parsed", extra={"rows_skipped": 3})

        data = json.loads(stream.getvalue().splitlines()[-1])
        assert data["rows_skipped"] == 3
        assert data["logger"] == "crm_insights.ingestion"

    def test_non_ascii_is_kept(self) -> None:
        result = JsonFormatter().format(self._record(msg="Atenção", args=()))

        assert "Atenção" in result



class TestPackageInit:
    """Tests for crm_insights __init__.py."""

    def test_version_exported(self) -> None:
        from crm_insights import __version__

        assert isinstance(__version__, str)
