from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from sqlalchemy.orm import Session

from pkgretire.domain.retirement.jobs import RetirementJob


@runtime_checkable
class JobSubmissionPort(Protocol):
    """
    Enqueue-only interface to the durable job queue.

    `enqueue` writes through the caller's session so the jobs commit or roll
    back together with whatever else that transaction changed.
    """

    def enqueue(self, session: Session, job: RetirementJob) -> int:
        """Stage one job in the caller's transaction and return its id."""

    def enqueue_all(self, session: Session, jobs: Iterable[RetirementJob]) -> list[int]:
        """Stage several jobs in the caller's transaction."""
