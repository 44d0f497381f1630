"""
Outbox Dispatcher - moves committed `background_jobs` rows onto the ARQ queue.

Delivery is at-least-once: a row is deleted only after ARQ accepted it, and
the ARQ job id is derived from the row's `job_key` so a row dispatched twice
(crash between enqueue and delete, or two dispatchers racing) is queued once.
Keys are never reused, so a new row cannot be mistaken for an old job whose
result ARQ still keeps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from arq.connections import ArqRedis
from sqlalchemy.exc import SQLAlchemyError

from pkgretire.infrastructure.queue.outbox import OutboxRecord, SqlAlchemyJobOutbox
from pkgretire.infrastructure.stores.sqlalchemy_db import SessionProvider

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    dispatched: List[int] = field(default_factory=list)
    duplicates: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def removed(self) -> int:
        return len(self.dispatched) + len(self.duplicates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dispatched": self.dispatched,
            "duplicates": self.duplicates,
            "failed": self.failed,
        }


class OutboxDispatcher:
    """
    Usage:
        dispatcher = OutboxDispatcher(provider, SqlAlchemyJobOutbox(), pool)
        report = await dispatcher.dispatch_once()
    """

    def __init__(self, provider: SessionProvider, outbox: SqlAlchemyJobOutbox, pool: ArqRedis, *, batch_size: int = 100):
        self.provider = provider
        self.outbox = outbox
        self.pool = pool
        self.batch_size = batch_size

    def _pending(self) -> List[OutboxRecord]:
        with self.provider.session() as session:
            return self.outbox.pending(session, limit=self.batch_size)

    def _remove(self, ids: List[int]) -> None:
        if not ids:
            return
        with self.provider.transaction() as session:
            self.outbox.remove(session, ids)

    async def _enqueue(self, record: OutboxRecord) -> Optional[str]:
        job = await self.pool.enqueue_job(record.job_type, _job_id=record.arq_job_id, **record.data)
        return job.job_id if job is not None else None

    async def dispatch_once(self) -> DispatchReport:
        report = DispatchReport()
        for record in self._pending():
            try:
                job_id = await self._enqueue(record)
            except Exception as e:
                # Row stays in the outbox and is retried on the next run.
                logger.warning("Dispatch of outbox job %s (%s) failed: %s", record.id, record.job_type, e)
                report.failed.append(record.id)
                continue
            if job_id is None:
                # ARQ already holds a job with this id.
                report.duplicates.append(record.id)
            else:
                report.dispatched.append(record.id)

        try:
            self._remove(report.dispatched + report.duplicates)
        except SQLAlchemyError as e:
            # Queued jobs will be offered again; ARQ dedupes on the job id.
            logger.warning("Could not clear %d dispatched outbox row(s): %s", report.removed, e)

        if report.dispatched or report.failed:
            logger.info("Outbox dispatch: %s", report.to_dict())
        return report

    async def drain(self, max_rounds: int = 100) -> DispatchReport:
        """Dispatch until the outbox is empty or a round makes no progress."""
        total = DispatchReport()
        for _ in range(max_rounds):
            report = await self.dispatch_once()
            total.dispatched.extend(report.dispatched)
            total.duplicates.extend(report.duplicates)
            total.failed.extend(report.failed)
            if report.removed == 0:
                break
        return total
