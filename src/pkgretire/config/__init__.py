from .settings import (
    DatabaseConfig,
    DispatcherConfig,
    LoggingConfig,
    RedisConfig,
    RetirementConfig,
    Settings,
    StorageConfig,
    configure_logging,
    get_settings,
    reset_settings,
)
from .validated_settings import SettingsModel, load_validated_settings

__all__ = [
    "DatabaseConfig",
    "DispatcherConfig",
    "LoggingConfig",
    "RedisConfig",
    "RetirementConfig",
    "Settings",
    "StorageConfig",
    "SettingsModel",
    "configure_logging",
    "get_settings",
    "load_validated_settings",
    "reset_settings",
]
