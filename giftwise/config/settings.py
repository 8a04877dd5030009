"""
Configuration Management for Giftwise

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The settlement functions take explicit arguments where a caller wants to
stay independent of the environment, and fall back to these values otherwise.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettlementSettings(BaseSettings):
    """Balance and settlement engine configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="GIFTWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    epsilon: Decimal = Field(
        default=Decimal("0.01"),
        gt=0,
        description="Balances within +/- epsilon are treated as settled"
    )
    payment_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Allowed gap between total paid and expense amount"
    )
    currency_symbol: str = Field(
        default="€",
        min_length=1,
        max_length=5,
        description="Currency symbol used when rendering balances"
    )


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="GIFTWISE_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (otherwise console format)"
    )
    
    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    
    @property
    def settlement(self) -> SettlementSettings:
        return SettlementSettings()
    
    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" entry for each failing section.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.settlement
        results["settlement"] = True
    except Exception as e:
        results["settlement"] = False
        results["settlement_error"] = str(e)
    
    try:
        _ = settings.logging
        results["logging"] = True
    except Exception as e:
        results["logging"] = False
        results["logging_error"] = str(e)
    
    return results
