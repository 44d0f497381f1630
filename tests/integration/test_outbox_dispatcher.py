from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

import pytest

from pkgretire.domain.retirement.jobs import retirement_jobs
from pkgretire.infrastructure.queue.dispatcher import OutboxDispatcher
from pkgretire.infrastructure.queue.outbox import SqlAlchemyJobOutbox


class _Job:
    def __init__(self, job_id: str):
        self.job_id = job_id


class _FakeArqPool:
    """Mimics ArqRedis.enqueue_job: returns None when the job id is already known."""

    def __init__(self, fail_types: Optional[Set[str]] = None):
        self.known: Set[str] = set()
        self.calls: List[Dict[str, Any]] = []
        self.fail_types = set(fail_types or ())

    async def enqueue_job(self, function: str, *args, _job_id: Optional[str] = None, **kwargs):
        if function in self.fail_types:
            raise ConnectionError("redis unavailable")
        self.calls.append({"function": function, "job_id": _job_id, "kwargs": kwargs})
        if _job_id in self.known:
            return None
        self.known.add(_job_id)
        return _Job(_job_id)


def _stage(store, outbox: SqlAlchemyJobOutbox, *names: str) -> List[int]:
    ids: List[int] = []
    with store.provider.transaction() as s:
        for name in names:
            ids.extend(outbox.enqueue_all(s, retirement_jobs(name)))
    return ids


def _arq_job_ids(store, outbox) -> List[str]:
    with store.provider.session() as s:
        return [r.arq_job_id for r in outbox.pending(s)]


def _pending_count(store, outbox) -> int:
    with store.provider.session() as s:
        return outbox.count(s)


@pytest.mark.asyncio
async def test_dispatch_moves_rows_to_queue(store):
    outbox = SqlAlchemyJobOutbox()
    ids = _stage(store, outbox, "foo")
    job_ids = _arq_job_ids(store, outbox)
    pool = _FakeArqPool()

    report = await OutboxDispatcher(store.provider, outbox, pool).dispatch_once()

    assert report.dispatched == ids
    assert _pending_count(store, outbox) == 0
    assert [c["function"] for c in pool.calls] == [
        "sync_to_git_index",
        "sync_to_sparse_index",
        "delete_crate_from_storage",
    ]
    assert [c["job_id"] for c in pool.calls] == job_ids
    assert len(set(job_ids)) == 3
    assert all(c["kwargs"] == {"name": "foo"} for c in pool.calls)


@pytest.mark.asyncio
async def test_already_queued_rows_are_cleared_as_duplicates(store):
    outbox = SqlAlchemyJobOutbox()
    ids = _stage(store, outbox, "foo")
    pool = _FakeArqPool()
    pool.known.add(_arq_job_ids(store, outbox)[0])

    report = await OutboxDispatcher(store.provider, outbox, pool).dispatch_once()

    assert report.duplicates == [ids[0]]
    assert report.dispatched == ids[1:]
    assert report.removed == 3
    assert _pending_count(store, outbox) == 0


@pytest.mark.asyncio
async def test_failed_enqueue_keeps_row_for_retry(store):
    outbox = SqlAlchemyJobOutbox()
    ids = _stage(store, outbox, "foo")
    pool = _FakeArqPool(fail_types={"delete_crate_from_storage"})
    dispatcher = OutboxDispatcher(store.provider, outbox, pool)

    report = await dispatcher.dispatch_once()
    assert report.failed == [ids[2]]
    assert _pending_count(store, outbox) == 1

    pool.fail_types.clear()
    report = await dispatcher.dispatch_once()
    assert report.dispatched == [ids[2]]
    assert _pending_count(store, outbox) == 0


@pytest.mark.asyncio
async def test_drain_processes_in_batches(store):
    outbox = SqlAlchemyJobOutbox()
    ids = _stage(store, outbox, "foo", "bar")
    pool = _FakeArqPool()

    report = await OutboxDispatcher(store.provider, outbox, pool, batch_size=2).drain()

    assert sorted(report.dispatched) == sorted(ids)
    assert report.failed == []
    assert _pending_count(store, outbox) == 0


@pytest.mark.asyncio
async def test_drain_stops_when_nothing_progresses(store):
    outbox = SqlAlchemyJobOutbox()
    _stage(store, outbox, "foo")
    pool = _FakeArqPool(fail_types={"sync_to_git_index", "sync_to_sparse_index", "delete_crate_from_storage"})

    report = await OutboxDispatcher(store.provider, outbox, pool).drain(max_rounds=5)

    assert len(report.failed) == 3
    assert _pending_count(store, outbox) == 3


@pytest.mark.asyncio
async def test_retired_crate_jobs_reach_the_queue(executor, store, seed):
    from pkgretire.domain.package import Requester

    alice = seed.user("alice")
    seed.crate("foo", users=[alice])
    assert executor.retire("foo", Requester(user_id=alice, login="alice")).is_ok()

    pool = _FakeArqPool()
    report = await OutboxDispatcher(store.provider, SqlAlchemyJobOutbox(), pool).drain()

    assert len(report.dispatched) == 3
    assert {c["kwargs"]["name"] for c in pool.calls} == {"foo"}


@pytest.mark.asyncio
async def test_retirement_after_drain_gets_fresh_job_ids(executor, store, seed):
    from pkgretire.domain.package import Requester

    alice = seed.user("alice")
    seed.crate("foo", users=[alice])
    seed.crate("bar", users=[alice])
    requester = Requester(user_id=alice, login="alice")
    outbox = SqlAlchemyJobOutbox()
    # ARQ keeps finished job results, so old ids stay "known" to the pool.
    pool = _FakeArqPool()
    dispatcher = OutboxDispatcher(store.provider, outbox, pool)

    assert executor.retire("foo", requester).is_ok()
    first = await dispatcher.dispatch_once()
    assert len(first.dispatched) == 3
    assert _pending_count(store, outbox) == 0

    assert executor.retire("bar", requester).is_ok()
    bar_job_ids = _arq_job_ids(store, outbox)
    second = await dispatcher.dispatch_once()

    assert second.duplicates == []
    assert len(second.dispatched) == 3
    bar_calls = [c for c in pool.calls if c["kwargs"] == {"name": "bar"}]
    assert [c["job_id"] for c in bar_calls] == bar_job_ids
    assert [c["function"] for c in bar_calls] == [
        "sync_to_git_index",
        "sync_to_sparse_index",
        "delete_crate_from_storage",
    ]
    assert not set(bar_job_ids) & {c["job_id"] for c in pool.calls if c["kwargs"] == {"name": "foo"}}


def test_job_keys_are_not_reused_with_row_ids(store):
    outbox = SqlAlchemyJobOutbox()
    first_ids = _stage(store, outbox, "foo")
    first_job_ids = _arq_job_ids(store, outbox)
    with store.provider.transaction() as s:
        outbox.remove(s, first_ids)

    _stage(store, outbox, "bar")
    second_job_ids = _arq_job_ids(store, outbox)

    assert len(second_job_ids) == 3
    assert not set(first_job_ids) & set(second_job_ids)
