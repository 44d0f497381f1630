from __future__ import annotations

from typing import Any, Dict, List

from arq import cron
from arq.connections import RedisSettings
from loguru import logger

from pkgretire.config.settings import Settings, configure_logging, get_settings
from pkgretire.core.di.bootstrap import GitIndex, SparseIndex, bootstrap_dependencies
from pkgretire.core.di.container import Container
from pkgretire.infrastructure.downstream.index import LocalIndex
from pkgretire.infrastructure.downstream.storage import LocalFileStorage
from pkgretire.infrastructure.queue.dispatcher import OutboxDispatcher
from pkgretire.infrastructure.queue.outbox import SqlAlchemyJobOutbox
from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore


def build_redis_settings(settings: Settings | None = None) -> RedisSettings:
    cfg = (settings or get_settings()).redis
    return RedisSettings(
        host=cfg.host,
        port=cfg.port,
        database=cfg.database,
        password=cfg.password,
    )


def _container(ctx) -> Container:
    container = ctx.get("container")
    if container is None:
        container = bootstrap_dependencies()
        ctx["container"] = container
    return container


def _still_published(container: Container, name: str) -> bool:
    store = container.resolve(SqlAlchemyCrateStore)
    with store.provider.session() as session:
        return store.find_by_name(session, name) is not None


def _sync_index(ctx, index: LocalIndex, name: str) -> Dict[str, Any]:
    container = _container(ctx)
    if _still_published(container, name):
        # Entry is current; only retired crates are removed here.
        logger.info("{}: {} is still published, leaving entry in place", index.label, name)
        return {"name": name, "status": "unchanged"}
    removed = index.remove(name)
    return {"name": name, "status": "removed" if removed else "absent"}


async def sync_to_git_index(ctx, name: str) -> Dict[str, Any]:
    """ARQ job: bring the git-style index entry for `name` in line with the database."""
    return _sync_index(ctx, _container(ctx).resolve(GitIndex), name)


async def sync_to_sparse_index(ctx, name: str) -> Dict[str, Any]:
    """ARQ job: bring the sparse index file for `name` in line with the database."""
    return _sync_index(ctx, _container(ctx).resolve(SparseIndex), name)


async def delete_crate_from_storage(ctx, name: str) -> Dict[str, Any]:
    """ARQ job: purge archives, readmes and the per-crate feed of a retired crate."""
    storage = _container(ctx).resolve(LocalFileStorage)
    removed = storage.delete_all_crate_files(name)
    logger.info("Purged {} stored file(s) for {}", len(removed), name)
    return {"name": name, "removed": removed}


async def cron_dispatch_outbox(ctx) -> Dict[str, Any]:
    """
    Cron entrypoint: move committed outbox rows onto the queue.
    """
    redis = ctx.get("redis")
    if redis is None:
        return {"status": "error", "error": "redis not available"}

    container = _container(ctx)
    store = container.resolve(SqlAlchemyCrateStore)
    settings = container.resolve(Settings)
    dispatcher = OutboxDispatcher(
        store.provider,
        container.resolve(SqlAlchemyJobOutbox),
        redis,
        batch_size=settings.dispatcher.batch_size,
    )
    report = await dispatcher.dispatch_once()
    return {"status": "ok", **report.to_dict()}


def _dispatch_schedule(interval_seconds: int) -> Dict[str, Any]:
    interval = max(1, int(interval_seconds))
    if interval < 60:
        return {"second": set(range(0, 60, interval))}
    minutes = max(1, interval // 60)
    return {"minute": set(range(0, 60, minutes)), "second": 0}


def _build_cron_jobs(settings: Settings | None = None) -> List[Any]:
    settings = settings or get_settings()
    schedule = _dispatch_schedule(settings.dispatcher.interval_seconds)
    return [cron(cron_dispatch_outbox, run_at_startup=True, **schedule)]


async def startup(ctx) -> None:
    settings = get_settings()
    configure_logging(settings.logging)
    ctx["container"] = bootstrap_dependencies(settings)


async def shutdown(ctx) -> None:
    container = ctx.get("container")
    if container is not None:
        container.resolve(SqlAlchemyCrateStore).close()


class WorkerSettings:
    functions = [sync_to_git_index, sync_to_sparse_index, delete_crate_from_storage]
    redis_settings = build_redis_settings()
    on_startup = startup
    on_shutdown = shutdown

    cron_jobs = _build_cron_jobs()
