"""
Transactional outbox for follow-up jobs.

ARQ lives in Redis and cannot take part in a SQL transaction, so jobs are
first written to `background_jobs` through the caller's session. The
dispatcher later moves committed rows to ARQ.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from pkgretire.application.ports.job_queue_port import JobSubmissionPort
from pkgretire.domain.retirement.jobs import RetirementJob
from pkgretire.infrastructure.stores.models import BackgroundJobModel


@dataclass
class OutboxRecord:
    id: int
    job_type: str
    job_key: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def arq_job_id(self) -> str:
        # Stable per row and never reused: re-dispatching a row never queues a
        # second ARQ job, and a later row never collides with an old job.
        return f"outbox-{self.job_key}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_type": self.job_type,
            "job_key": self.job_key,
            "data": self.data,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class SqlAlchemyJobOutbox(JobSubmissionPort):
    def __init__(self, priority: int = 0):
        self.priority = priority

    def enqueue(self, session: Session, job: RetirementJob) -> int:
        row = BackgroundJobModel(
            job_key=uuid.uuid4().hex,
            job_type=job.kind.value,
            priority=self.priority,
            created_at=datetime.now(timezone.utc),
        )
        row.set_data(job.payload)
        session.add(row)
        session.flush()
        return row.id

    def enqueue_all(self, session: Session, jobs: Iterable[RetirementJob]) -> List[int]:
        return [self.enqueue(session, job) for job in jobs]

    def pending(self, session: Session, limit: int = 100) -> List[OutboxRecord]:
        rows = session.execute(
            select(BackgroundJobModel)
            .order_by(BackgroundJobModel.priority.desc(), BackgroundJobModel.id.asc())
            .limit(limit)
        ).scalars()
        return [
            OutboxRecord(id=r.id, job_type=r.job_type, job_key=r.job_key, data=r.get_data(), created_at=r.created_at)
            for r in rows
        ]

    def remove(self, session: Session, ids: Iterable[int]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        result = session.execute(delete(BackgroundJobModel).where(BackgroundJobModel.id.in_(ids)))
        return int(result.rowcount or 0)

    def count(self, session: Session) -> int:
        return int(session.execute(select(func.count()).select_from(BackgroundJobModel)).scalar_one())
