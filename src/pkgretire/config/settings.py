# pkgretire/config/settings.py

import logging
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict


@dataclass
class DatabaseConfig:
    """Relational store"""
    url: str = "sqlite:///data/pkgretire.db"
    timeout: float = 5.0  # lock wait, seconds


@dataclass
class RedisConfig:
    """ARQ / Redis connection"""
    host: str = "127.0.0.1"
    port: int = 6379
    database: int = 0
    password: Optional[str] = None


@dataclass
class RetirementConfig:
    """Deletion policy"""
    owner_count_policy: str = "individuals_only"  # individuals_only / all_owners
    timeout_seconds: Optional[float] = 10.0


@dataclass
class DispatcherConfig:
    """Outbox -> ARQ dispatcher"""
    batch_size: int = 100
    interval_seconds: int = 10


@dataclass
class StorageConfig:
    """Downstream index and blob storage locations"""
    root: str = "data/storage"
    git_index_root: str = "data/git-index"
    sparse_index_root: Optional[str] = None  # defaults to <root>/index

    def resolved_sparse_index_root(self) -> str:
        return self.sparse_index_root or str(Path(self.root) / "index")


@dataclass
class LoggingConfig:
    """Logging"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Top-level settings"""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    retirement: RetirementConfig = field(default_factory=RetirementConfig)
    dispatcher: DispatcherConfig = field(default_factory=DispatcherConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    audit_enabled: bool = True

    @classmethod
    def load_from_file(cls, config_path: Optional[str] = None) -> 'Settings':
        """Load from YAML; missing file means defaults."""
        if config_path is None:
            config_path = os.getenv("PKGRETIRE_CONFIG") or Path(__file__).parent / "config.yaml"

        config_path = Path(config_path)

        if not config_path.exists():
            return cls()

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> 'Settings':
        settings = cls()

        if 'database' in config_data:
            settings.database = DatabaseConfig(**config_data['database'])

        if 'redis' in config_data:
            settings.redis = RedisConfig(**config_data['redis'])

        if 'retirement' in config_data:
            settings.retirement = RetirementConfig(**config_data['retirement'])

        if 'dispatcher' in config_data:
            settings.dispatcher = DispatcherConfig(**config_data['dispatcher'])

        if 'storage' in config_data:
            settings.storage = StorageConfig(**config_data['storage'])

        if 'logging' in config_data:
            settings.logging = LoggingConfig(**config_data['logging'])

        if 'audit_enabled' in config_data:
            settings.audit_enabled = bool(config_data['audit_enabled'])

        return settings

    def load_environment_variables(self) -> 'Settings':
        """Environment overrides (PKGRETIRE_*)."""
        db_url = os.getenv('PKGRETIRE_DB_URL')
        if db_url:
            self.database.url = db_url
        db_timeout = os.getenv('PKGRETIRE_DB_TIMEOUT')
        if db_timeout:
            try:
                self.database.timeout = float(db_timeout)
            except ValueError:
                pass

        self.redis.host = os.getenv('PKGRETIRE_REDIS_HOST', self.redis.host)
        redis_port = os.getenv('PKGRETIRE_REDIS_PORT')
        if redis_port:
            self.redis.port = int(redis_port)
        redis_db = os.getenv('PKGRETIRE_REDIS_DB')
        if redis_db:
            self.redis.database = int(redis_db)
        self.redis.password = os.getenv('PKGRETIRE_REDIS_PASSWORD') or self.redis.password

        policy = os.getenv('PKGRETIRE_OWNER_COUNT_POLICY')
        if policy:
            self.retirement.owner_count_policy = policy
        timeout = os.getenv('PKGRETIRE_RETIRE_TIMEOUT')
        if timeout:
            try:
                self.retirement.timeout_seconds = float(timeout)
            except ValueError:
                pass

        storage_root = os.getenv('PKGRETIRE_STORAGE_ROOT')
        if storage_root:
            self.storage.root = storage_root
        git_index = os.getenv('PKGRETIRE_GIT_INDEX_ROOT')
        if git_index:
            self.storage.git_index_root = git_index
        sparse_index = os.getenv('PKGRETIRE_SPARSE_INDEX_ROOT')
        if sparse_index:
            self.storage.sparse_index_root = sparse_index

        log_level = os.getenv('PKGRETIRE_LOG_LEVEL')
        if log_level:
            self.logging.level = log_level

        audit = os.getenv('PKGRETIRE_AUDIT_ENABLED')
        if audit is not None:
            self.audit_enabled = _env_bool(audit)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def configure_logging(config: LoggingConfig) -> None:
    logging.basicConfig(level=config.level.upper(), format=config.format)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings: YAML (validated) then environment."""
    global _settings
    if _settings is None:
        from .validated_settings import load_validated_settings

        _settings = load_validated_settings().load_environment_variables()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
