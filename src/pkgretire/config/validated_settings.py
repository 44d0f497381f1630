"""
Pydantic validation for the YAML config.

SettingsModel ignores unknown keys and converts to the Settings dataclass.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
import yaml

from .settings import (
    DatabaseConfig,
    DispatcherConfig,
    LoggingConfig,
    RedisConfig,
    RetirementConfig,
    Settings,
    StorageConfig,
)


class DatabaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str = "sqlite:///data/pkgretire.db"
    timeout: float = Field(5.0, gt=0)


class RedisConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    host: str = "127.0.0.1"
    port: int = Field(6379, ge=1, le=65535)
    database: int = Field(0, ge=0)
    password: Optional[str] = None


class RetirementConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    owner_count_policy: Literal["individuals_only", "all_owners"] = "individuals_only"
    timeout_seconds: Optional[float] = Field(10.0, gt=0)


class DispatcherConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    batch_size: int = Field(100, ge=1, le=10_000)
    interval_seconds: int = Field(10, ge=1, le=3600)


class StorageConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    root: str = "data/storage"
    git_index_root: str = "data/git-index"
    sparse_index_root: Optional[str] = None


class LoggingConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SettingsModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    database: DatabaseConfigModel = DatabaseConfigModel()
    redis: RedisConfigModel = RedisConfigModel()
    retirement: RetirementConfigModel = RetirementConfigModel()
    dispatcher: DispatcherConfigModel = DispatcherConfigModel()
    storage: StorageConfigModel = StorageConfigModel()
    logging: LoggingConfigModel = LoggingConfigModel()
    audit_enabled: bool = True

    def to_dataclass(self) -> Settings:
        s = Settings()
        s.database = DatabaseConfig(**self.database.model_dump())
        s.redis = RedisConfig(**self.redis.model_dump())
        s.retirement = RetirementConfig(**self.retirement.model_dump())
        s.dispatcher = DispatcherConfig(**self.dispatcher.model_dump())
        s.storage = StorageConfig(**self.storage.model_dump())
        s.logging = LoggingConfig(**self.logging.model_dump())
        s.audit_enabled = self.audit_enabled
        return s


def load_validated_settings(config_path: Optional[str] = None) -> Settings:
    """Validate the YAML file with pydantic and return the Settings dataclass."""
    default_path = os.getenv("PKGRETIRE_CONFIG") or Path(__file__).parent / "config.yaml"
    cfg_file = Path(config_path) if config_path else Path(default_path)
    data = {}
    if cfg_file.exists():
        data = yaml.safe_load(cfg_file.read_text(encoding="utf-8")) or {}
    model = SettingsModel(**data)
    return model.to_dataclass()
