"""
Registers the retirement workflow's dependencies in the container.
"""

from __future__ import annotations

from typing import Optional

from pkgretire.application.ports.event_log_port import EventLogPort
from pkgretire.application.workflows.retire_package import RetirementExecutor
from pkgretire.config.settings import Settings, get_settings
from pkgretire.core.di.container import Container
from pkgretire.domain.retirement.eligibility import OwnerCountPolicy
from pkgretire.infrastructure.downstream.index import LocalIndex
from pkgretire.infrastructure.downstream.storage import LocalFileStorage
from pkgretire.infrastructure.event_log.logging_event_log import LoggingEventLog
from pkgretire.infrastructure.queue.outbox import SqlAlchemyJobOutbox
from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore
from pkgretire.infrastructure.stores.ownership import SqlAlchemyOwnershipResolver
from pkgretire.infrastructure.stores.sqlalchemy_db import SessionProvider


class GitIndex(LocalIndex):
    pass


class SparseIndex(LocalIndex):
    pass


def bootstrap_dependencies(settings: Optional[Settings] = None, *, container: Optional[Container] = None) -> Container:
    """Register singletons built from `settings` (default: process settings)."""
    settings = settings or get_settings()
    container = container or Container.instance()

    container.register_instance(Settings, settings)
    container.register(
        SessionProvider,
        lambda: SessionProvider(settings.database.url, timeout=settings.database.timeout),
        singleton=True,
    )
    container.register(
        SqlAlchemyCrateStore,
        lambda: SqlAlchemyCrateStore(settings.database.url, provider=container.resolve(SessionProvider)),
        singleton=True,
    )
    container.register(SqlAlchemyOwnershipResolver, SqlAlchemyOwnershipResolver, singleton=True)
    container.register(SqlAlchemyJobOutbox, SqlAlchemyJobOutbox, singleton=True)
    container.register(EventLogPort, LoggingEventLog, singleton=True)
    container.register(
        RetirementExecutor,
        lambda: RetirementExecutor(
            container.resolve(SqlAlchemyCrateStore),
            container.resolve(SqlAlchemyOwnershipResolver),
            container.resolve(SqlAlchemyJobOutbox),
            event_log=container.resolve(EventLogPort) if settings.audit_enabled else None,
            owner_count_policy=OwnerCountPolicy(settings.retirement.owner_count_policy),
            deadline_seconds=settings.retirement.timeout_seconds,
        ),
        singleton=True,
    )
    container.register(
        GitIndex,
        lambda: GitIndex(settings.storage.git_index_root, label="git-index"),
        singleton=True,
    )
    container.register(
        SparseIndex,
        lambda: SparseIndex(settings.storage.resolved_sparse_index_root(), label="sparse-index"),
        singleton=True,
    )
    container.register(LocalFileStorage, lambda: LocalFileStorage(settings.storage.root), singleton=True)
    return container
