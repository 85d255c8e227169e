"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Defaults are the standard scoring constants
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()


class MatcherConfig(BaseModel):
    """Symptom-disease matching configuration."""

    min_match_score: float = Field(
        default=0.3, ge=0.0, description="Diseases must score strictly above this to be ranked"
    )
    max_ranked_diseases: int = Field(
        default=5, gt=0, description="Maximum number of ranked diseases returned"
    )
    critical_match_bonus: float = Field(
        default=0.5, ge=0.0, description="Extra share of weight added for a matched critical symptom"
    )
    clamp_match_scores: bool = Field(
        default=False, description="Clamp match scores to 1.0 (scores are unclamped by default)"
    )


class UrgencyConfig(BaseModel):
    """Urgency scoring configuration."""

    persistent_symptom_days: int = Field(
        default=7, gt=0, description="Symptoms older than this add the persistence bonus"
    )
    no_match_score: float = Field(
        default=30.0, ge=0.0, le=100.0, description="Urgency reported when nothing matches"
    )


class InsightConfig(BaseModel):
    ttl_days: int = Field(default=7, gt=0, description="Days until a generated insight expires")


class RiskConfig(BaseModel):
    """Risk prediction configuration."""

    metrics_lookback_months: int = Field(
        default=6, gt=0, description="Only metrics measured within this window are scored"
    )
    disease_validity_months: int = Field(
        default=6, gt=0, description="Validity of cardiovascular and diabetes predictions"
    )
    trend_validity_months: int = Field(
        default=3, gt=0, description="Validity of weight trend predictions"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    urgency: UrgencyConfig = Field(default_factory=UrgencyConfig)
    insight: InsightConfig = Field(default_factory=InsightConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _parse_bool(val: str | None, default: bool) -> bool:
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "on"}

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    matcher_config = MatcherConfig(
        min_match_score=float(os.getenv("MIN_MATCH_SCORE", "0.3")),
        max_ranked_diseases=int(os.getenv("MAX_RANKED_DISEASES", "5")),
        clamp_match_scores=_parse_bool(os.getenv("CLAMP_MATCH_SCORES"), False),
    )

    urgency_config = UrgencyConfig(
        persistent_symptom_days=int(os.getenv("PERSISTENT_SYMPTOM_DAYS", "7")),
    )

    insight_config = InsightConfig(ttl_days=int(os.getenv("INSIGHT_TTL_DAYS", "7")))

    risk_config = RiskConfig(
        metrics_lookback_months=int(os.getenv("METRICS_LOOKBACK_MONTHS", "6")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        matcher=matcher_config,
        urgency=urgency_config,
        insight=insight_config,
        risk=risk_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()
