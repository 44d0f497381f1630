from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pkgretire.core.errors import ErrorSeverity, RegistryError

logger = logging.getLogger(__name__)


def error_body(detail: str) -> dict:
    return {"errors": [{"detail": detail}]}


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    if exc.severity is ErrorSeverity.CRITICAL:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s denied: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistryError, registry_error_handler)
