"""
Retire (hard-delete) a package and schedule downstream cleanup.

Everything after the package lookup runs in one transaction: owners,
download total and reverse dependencies are read under the same scope that
deletes the row and stages the three follow-up jobs, so a concurrent
download bump or dependency publish cannot slip in between the decision
and the commit.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pkgretire.application.audit import make_event
from pkgretire.application.ports.event_log_port import EventLogPort
from pkgretire.application.ports.job_queue_port import JobSubmissionPort
from pkgretire.application.ports.ownership_port import OwnershipResolverPort
from pkgretire.core.errors import (
    ForbiddenError,
    NotFoundError,
    RegistryError,
    Result,
    TransientStoreError,
    UnprocessableEntityError,
    crate_not_found,
)
from pkgretire.domain.package import Requester, Rights
from pkgretire.domain.retirement.eligibility import Decision, OwnerCountPolicy, evaluate
from pkgretire.domain.retirement.jobs import retirement_jobs
from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore

TEAM_MEMBER_MESSAGE = "team members don't have permission to delete crates"
NOT_OWNER_MESSAGE = "only owners have permission to delete crates"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RetirementExecutor:
    """
    Usage:
        executor = RetirementExecutor(store, SqlAlchemyOwnershipResolver(), SqlAlchemyJobOutbox())
        result = executor.retire("foo", requester)
        if not result.is_ok():
            raise result.error
    """

    def __init__(
        self,
        store: SqlAlchemyCrateStore,
        ownership: OwnershipResolverPort,
        jobs: JobSubmissionPort,
        *,
        event_log: Optional[EventLogPort] = None,
        owner_count_policy: OwnerCountPolicy = OwnerCountPolicy.INDIVIDUALS_ONLY,
        deadline_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.ownership = ownership
        self.jobs = jobs
        self.event_log = event_log
        self.owner_count_policy = owner_count_policy
        self.deadline_seconds = deadline_seconds
        self.clock = clock

    def retire(self, name: str, requester: Requester, *, request_id: Optional[str] = None) -> Result[None, RegistryError]:
        started = time.monotonic()
        job_ids: List[int] = []
        try:
            with self.store.provider.transaction() as session:
                job_ids = self._retire_in_transaction(session, name, requester, started)
        except RegistryError as e:
            result: Result[None, RegistryError] = Result.err(e)
        except SQLAlchemyError as e:
            logger.warning("Retirement of {} rolled back: {}", name, e)
            result = Result.err(
                TransientStoreError(
                    message="the registry could not complete the request, please try again",
                    context={"name": name, "cause": type(e).__name__},
                )
            )
        else:
            logger.info("Retired crate {} (requested by {}), jobs {}", name, requester.login, job_ids)
            result = Result.ok(None)

        self._audit(name, requester, result, request_id=request_id, job_ids=job_ids)
        return result

    def _retire_in_transaction(self, session: Session, name: str, requester: Requester, started: float) -> List[int]:
        package = self.store.find_by_name(session, name, for_update=True)
        if package is None:
            raise crate_not_found(name)

        owners = self.ownership.resolve_owners(session, package.id)
        rights = self.ownership.effective_rights(session, requester, owners)
        if rights is Rights.PUBLISH:
            raise ForbiddenError(message=TEAM_MEMBER_MESSAGE, context={"name": name, "rights": rights.value})
        if rights is Rights.NONE:
            raise ForbiddenError(message=NOT_OWNER_MESSAGE, context={"name": name, "rights": rights.value})

        decision = self.decide(session, package, owners)
        if not decision.allowed:
            raise UnprocessableEntityError(
                message=decision.reason,
                context={"name": name, "rule": decision.rule.value},
            )

        if not self.store.delete(session, package.id):
            # Another request deleted it after our lookup.
            raise crate_not_found(name)

        try:
            job_ids = self.jobs.enqueue_all(session, retirement_jobs(package.name))
        except (RegistryError, SQLAlchemyError):
            raise
        except Exception as e:
            raise TransientStoreError(
                message="the registry could not schedule follow-up work, please try again",
                context={"name": name, "cause": type(e).__name__},
            ) from e

        if self._deadline_passed(started):
            raise TransientStoreError(
                message="the request timed out before it could be committed, please try again",
                context={"name": name, "deadline_seconds": self.deadline_seconds},
            )
        return job_ids

    def decide(self, session: Session, package, owners) -> Decision:
        """Read the remaining inputs in `session` and evaluate eligibility."""
        return evaluate(
            package,
            owners,
            self.store.download_total(session, package.id),
            self.store.has_reverse_dependency(session, package.id),
            self.clock(),
            owner_count_policy=self.owner_count_policy,
        )

    def check(self, name: str, requester: Optional[Requester] = None) -> Result[Decision, RegistryError]:
        """Dry run: evaluate eligibility (and rights, given a requester) without writing."""
        try:
            with self.store.provider.session() as session:
                package = self.store.find_by_name(session, name)
                if package is None:
                    raise crate_not_found(name)
                owners = self.ownership.resolve_owners(session, package.id)
                if requester is not None:
                    rights = self.ownership.effective_rights(session, requester, owners)
                    if rights is not Rights.FULL:
                        msg = TEAM_MEMBER_MESSAGE if rights is Rights.PUBLISH else NOT_OWNER_MESSAGE
                        raise ForbiddenError(message=msg, context={"name": name})
                return Result.ok(self.decide(session, package, owners))
        except RegistryError as e:
            return Result.err(e)
        except SQLAlchemyError as e:
            logger.warning("Dry run for {} failed: {}", name, type(e).__name__)
            return Result.err(
                TransientStoreError(
                    message="the registry could not complete the request, please try again",
                    context={"name": name, "cause": type(e).__name__},
                )
            )

    def _deadline_passed(self, started: float) -> bool:
        if self.deadline_seconds is None:
            return False
        return time.monotonic() - started > self.deadline_seconds

    def _audit(self, name: str, requester: Requester, result: Result, *, request_id: Optional[str], job_ids: List[int]) -> None:
        if self.event_log is None:
            return
        if result.is_ok():
            event_type = "retired"
            payload = {"job_ids": job_ids}
        else:
            err = result.error
            event_type = {
                NotFoundError: "not_found",
                ForbiddenError: "forbidden",
                UnprocessableEntityError: "denied",
            }.get(type(err), "failed")
            payload = {"code": err.code, "detail": err.message, **(err.context or {})}
        self.event_log.append(
            make_event(
                subject=name,
                type=event_type,
                actor=requester.login,
                request_id=request_id,
                payload=payload,
            )
        )
