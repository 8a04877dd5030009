"""Configuration package."""

from giftwise.config.settings import (
    LoggingSettings,
    SettlementSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "LoggingSettings",
    "SettlementSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
