"""Analytics settings.

Every tunable constant of the calculators lives here, grouped by the
calculator that reads it.  Values come from an optional TOML file and
``TRADE_ANALYTICS_*`` environment variables (``__`` for nesting).
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class TradeMetricsConfig(BaseModel):
    assumed_risk_pct: Decimal = Decimal("0.02")  # Risk per trade, fraction of entry notional


class PerformanceConfig(BaseModel):
    profit_factor_sentinel: Decimal = Decimal("999")  # Gross loss == 0, gross win > 0


class RiskConfig(BaseModel):
    trading_days_per_year: int = 252
    ruin_horizon_trades: int = 50  # Exponent of the simplified ruin estimate


class TimingConfig(BaseModel):
    losing_entry_baseline: Decimal = Decimal("25")
    neutral_exit_baseline: Decimal = Decimal("50")


class DistributionConfig(BaseModel):
    # Upper bounds (exclusive) of each duration class, in hours
    duration_thresholds_hours: list[int] = Field(
        default_factory=lambda: [1, 8, 24, 24 * 7, 24 * 30]
    )
    # Upper bounds (exclusive) of each position-size class, entry notional
    size_thresholds: list[Decimal] = Field(
        default_factory=lambda: [
            Decimal("1000"),
            Decimal("5000"),
            Decimal("20000"),
            Decimal("50000"),
        ]
    )

    @field_validator("duration_thresholds_hours")
    @classmethod
    def _duration_ascending(cls, v: list[int]) -> list[int]:
        if len(v) != 5 or any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError("duration thresholds must be 5 strictly ascending values")
        return v

    @field_validator("size_thresholds")
    @classmethod
    def _size_ascending(cls, v: list[Decimal]) -> list[Decimal]:
        if len(v) != 4 or any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError("size thresholds must be 4 strictly ascending values")
        return v


class ScoringConfig(BaseModel):
    # Placeholder sub-scores carried as constants (not derived from data)
    market_condition_score: Decimal = Decimal("15")
    stop_loss_adherence_score: Decimal = Decimal("15")
    min_group_size: int = 2  # Composite scores only
    top_n: int = 3


class TaxonomyConfig(BaseModel):
    allow_custom_categories: bool = True


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {v!r}")
        return level


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class AnalyticsSettings(BaseSettings):
    """Top-level analytics settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    trade_metrics: TradeMetricsConfig = Field(default_factory=TradeMetricsConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    distribution: DistributionConfig = Field(default_factory=DistributionConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    taxonomy: TaxonomyConfig = Field(default_factory=TaxonomyConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADE_ANALYTICS_", "env_nested_delimiter": "__"}


def _merge(base: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AnalyticsSettings:
    """Build settings from an optional TOML file, then *overrides*.

    A missing file is treated as empty.  Overrides are merged section by
    section, so ``{"scoring": {"top_n": 5}}`` keeps the file's other
    scoring keys.  Environment variables (``TRADE_ANALYTICS_*``) fill in
    whatever the file and overrides leave unset.

    Raises:
        ConfigError: if the file exists but is not valid TOML.
    """
    from .errors import ConfigError

    data: dict[str, Any] = {}
    path = Path(config_path) if config_path else None

    if path is not None and path.is_file():
        import tomli

        try:
            data = tomli.loads(path.read_text(encoding="utf-8"))
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    return AnalyticsSettings(**_merge(data, overrides or {}))
