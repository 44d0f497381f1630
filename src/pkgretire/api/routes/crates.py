"""
Crate API Route

DELETE retires a crate; GET reports whether it (still) exists.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request, Response

from pkgretire.api.auth import require_session
from pkgretire.application.audit import new_request_id
from pkgretire.application.workflows.retire_package import RetirementExecutor
from pkgretire.core.errors import crate_not_found
from pkgretire.domain.package import Requester
from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore

router = APIRouter()


@router.get("/v1/crates/{name}")
async def get_crate(name: str, http_request: Request):
    store = http_request.app.state.container.resolve(SqlAlchemyCrateStore)
    found = await asyncio.to_thread(store.lookup, name)
    if found is None:
        raise crate_not_found(name)
    return found.to_dict()


@router.delete("/v1/crates/{name}")
async def delete_crate(name: str, http_request: Request, requester: Requester = Depends(require_session)):
    executor = http_request.app.state.container.resolve(RetirementExecutor)
    request_id = http_request.headers.get("X-Request-Id") or new_request_id()
    # The executor blocks on the database; keep it off the event loop.
    result = await asyncio.to_thread(executor.retire, name, requester, request_id=request_id)
    result.unwrap()
    return Response(status_code=200)
