"""
Configuration management with environment variable support and validation.

Design principles:
- User thresholds are validated once, at configuration time
- Calculators receive plain values and never re-validate
- Type safety with Pydantic
"""

import os
from functools import lru_cache
from typing import Literal, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from insight_core.domain.result import ConfigurationError

# Load environment variables from .env file
load_dotenv()

SUPPORTED_REPORT_PERIODS = (7, 14, 30, 90)


class TargetRange(BaseModel):
    """User-configured target glucose band, in mg/dL."""

    min_mg_dl: float = Field(default=70.0, gt=0.0, description="Lower bound of the target band")
    max_mg_dl: float = Field(default=180.0, gt=0.0, description="Upper bound of the target band")

    @model_validator(mode="after")
    def max_above_min(self) -> "TargetRange":
        if self.max_mg_dl <= self.min_mg_dl:
            raise ConfigurationError(
                f"target max ({self.max_mg_dl}) must be greater than target min ({self.min_mg_dl})"
            )
        return self

    @property
    def midpoint(self) -> float:
        return (self.min_mg_dl + self.max_mg_dl) / 2


class UserPreferences(BaseModel):
    """Display and body settings supplied by the user."""

    glucose_unit: Literal["mg/dL", "mmol/L"] = Field(
        default="mg/dL", description="Unit the caller displays; the engine computes in mg/dL"
    )
    carb_goal_grams: float = Field(default=150.0, gt=0.0, description="Daily carbohydrate goal")
    body_weight: float = Field(default=0.0, ge=0.0, description="0 means unknown")
    weight_unit: Literal["kg", "lbs"] = Field(default="kg")
    local_timezone: str = Field(default="UTC", description="IANA zone used for calendar days")

    @field_validator("local_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"unknown timezone: {v!r}") from exc
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.local_timezone)


class EngineSettings(BaseModel):
    """Tunables for the calculators."""

    report_period_days: int = Field(default=30, description="Default analysis window")
    insulin_active_hours: float = Field(
        default=4.0, gt=0.0, description="Duration of insulin action for IOB decay"
    )
    streak_lookback_days: int = Field(default=365, gt=0)

    @field_validator("report_period_days")
    @classmethod
    def validate_period(cls, v: int) -> int:
        if v not in SUPPORTED_REPORT_PERIODS:
            raise ConfigurationError(
                f"report period must be one of {SUPPORTED_REPORT_PERIODS}, got {v}"
            )
        return v


class BolusSettings(BaseModel):
    """Personal dosing factors for the advisory bolus calculator."""

    carb_ratio: float = Field(default=10.0, gt=0.0, description="Grams of carbs covered by 1u")
    sensitivity_factor: float = Field(
        default=50.0, gt=0.0, description="mg/dL drop expected from 1u"
    )
    target_mg_dl: float | None = Field(
        default=None, gt=0.0, description="Correction target; defaults to the range midpoint"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    targets: TargetRange = Field(default_factory=TargetRange)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    bolus: BolusSettings = Field(default_factory=BolusSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self

    @model_validator(mode="after")
    def bolus_target_inside_range(self) -> "AppConfig":
        target = self.bolus.target_mg_dl
        if target is not None and not (
            self.targets.min_mg_dl <= target <= self.targets.max_mg_dl
        ):
            raise ConfigurationError("bolus target must lie inside the target glucose range")
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

    def _optional_float(val: str | None) -> float | None:
        if val is None or not val.strip():
            return None
        return float(val)

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    targets = TargetRange(
        min_mg_dl=float(os.getenv("TARGET_GLUCOSE_MIN", "70")),
        max_mg_dl=float(os.getenv("TARGET_GLUCOSE_MAX", "180")),
    )

    preferences = UserPreferences(
        glucose_unit=cast(Literal["mg/dL", "mmol/L"], os.getenv("GLUCOSE_UNIT", "mg/dL")),
        carb_goal_grams=float(os.getenv("CARB_GOAL_GRAMS", "150")),
        body_weight=float(os.getenv("BODY_WEIGHT", "0")),
        weight_unit=cast(Literal["kg", "lbs"], os.getenv("WEIGHT_UNIT", "kg").strip().lower()),
        local_timezone=os.getenv("LOCAL_TIMEZONE", "UTC"),
    )

    engine = EngineSettings(
        report_period_days=int(os.getenv("REPORT_PERIOD_DAYS", "30")),
        insulin_active_hours=float(os.getenv("INSULIN_ACTIVE_HOURS", "4")),
    )

    bolus = BolusSettings(
        carb_ratio=float(os.getenv("BOLUS_CARB_RATIO", "10")),
        sensitivity_factor=float(os.getenv("BOLUS_SENSITIVITY_FACTOR", "50")),
        target_mg_dl=_optional_float(os.getenv("BOLUS_TARGET_MG_DL")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        targets=targets,
        preferences=preferences,
        engine=engine,
        bolus=bolus,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def print_config_summary(config: AppConfig | None = None) -> None:
    """Print configuration summary for debugging."""
    config = config or get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\nTARGETS")
    print(f"Target Range: {config.targets.min_mg_dl:g}-{config.targets.max_mg_dl:g} mg/dL")
    print(f"Display Unit: {config.preferences.glucose_unit}")
    print(f"Carb Goal: {config.preferences.carb_goal_grams:g} g")
    print(f"Timezone: {config.preferences.local_timezone}")

    print("\nENGINE")
    print(f"Report Period: {config.engine.report_period_days} days")
    print(f"Insulin Active Duration: {config.engine.insulin_active_hours:g} h")


def validate_config() -> AppConfig:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"Configuration loaded for {config.environment} environment")
    except Exception as e:
        print(f"Configuration validation failed: {e}")
        raise
    return config
