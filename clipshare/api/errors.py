"""
Clipshare API — error rendering.

Every failure leaves as ``{"success": false, "kind", "message"}`` with the
status code of its kind. Context and tracebacks stay in the logs.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clipshare.core.errors import ClipshareError, InvalidInput

logger = logging.getLogger(__name__)


def _render(status_code: int, kind: str, message: str, retryable: bool = False) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "kind": kind, "message": message, "retryable": retryable},
    )


def install_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(ClipshareError)
    async def handle_clipshare_error(request: Request, exc: ClipshareError):
        if exc.retryable:
            logger.warning(f"{request.method} {request.url.path} -> {exc.kind}: {exc.message} {exc.context}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{where}: {first.get('msg', 'invalid value')}" if where else first.get("msg", "Invalid request")
        return _render(400, InvalidInput.kind, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        kind = "Unauthorized" if exc.status_code == 401 else "HTTPError"
        return _render(exc.status_code, kind, str(exc.detail))
