from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from app.services.filter_errors import FilterError

_LOG = logging.getLogger("app.http")


def _detail(exc: FilterError) -> str:
    if exc.criterion is not None:
        return f"{exc.message} (filter: {exc.criterion.describe()})"
    return exc.message


def filter_error_to_http(exc: FilterError) -> HTTPException:
    return HTTPException(status_code=400, detail=_detail(exc))


def install_filter_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(FilterError)
    async def _filter_error_handler(request: Request, exc: FilterError):
        _LOG.info(
            "%s %s rejected filter: %s",
            request.method,
            request.url.path,
            exc.message,
        )
        return JSONResponse(
            status_code=400,
            content={"detail": _detail(exc), "error": type(exc).__name__},
        )
