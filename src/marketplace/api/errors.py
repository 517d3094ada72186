"""Exception handlers that turn failures into the standard response envelope.

Every failure body has the shape::

    {"success": false, "message": "...", "error": "<code>", "fields": [...]}

``fields`` is present only for validation failures.  Domain errors keep the
status code they declare; anything unexpected is a 500 whose details are
logged (and forwarded to Sentry) but never returned to the caller.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from marketplace.domain.errors import MarketplaceError, StoreError, ValidationError

logger = structlog.get_logger()

# Leading loc segment FastAPI adds to say where a value came from.
_LOCATIONS = {"body", "query", "path", "header"}


def failure_body(
    message: str, code: str, fields: list[str] | None = None
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message, "error": code}
    if fields:
        body["fields"] = fields
    return body


def _request_fields(exc: RequestValidationError) -> list[str]:
    fields: list[str] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATIONS:
            loc = loc[1:]
        path = ".".join(loc) or "body"
        if path not in fields:
            fields.append(path)
    return fields


async def handle_marketplace_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, MarketplaceError)
    if isinstance(exc, StoreError):
        logger.error(
            "store_failure",
            method=request.method,
            path=request.url.path,
            error=exc.message,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=failure_body("Internal server error", exc.code),
        )

    logger.warning(
        "request_rejected",
        method=request.method,
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.code,
        message=exc.message,
    )
    fields = exc.fields if isinstance(exc, ValidationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=failure_body(exc.message, exc.code, fields),
    )


async def handle_request_validation(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    fields = _request_fields(exc)
    logger.warning(
        "request_rejected",
        method=request.method,
        path=request.url.path,
        status_code=422,
        error=ValidationError.code,
        fields=fields,
    )
    return JSONResponse(
        status_code=422,
        content=failure_body(
            f"Invalid request: {', '.join(fields)}", ValidationError.code, fields
        ),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=failure_body("Internal server error", "internal_error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on *app*."""
    app.add_exception_handler(MarketplaceError, handle_marketplace_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
