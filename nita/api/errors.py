"""Exception handlers rendering every failure as {"status": "error", "message": ...}."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nita.core.errors import AuthSystemError, NitaError

logger = logging.getLogger(__name__)


def error_body(
    message: str,
    errors: dict[str, list[str]] | None = None,
    debug: str | None = None,
) -> dict:
    body: dict = {"status": "error", "message": message}
    if errors:
        body["errors"] = errors
    if debug:
        body["debug"] = debug
    return body


def _field_name(loc: tuple) -> str:
    # ("body", "service_ids", 2) -> "service_ids.2"; ("query", "page") -> "page"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


async def handle_nita_error(request: Request, exc: NitaError) -> JSONResponse:
    debug = exc.debug if isinstance(exc, AuthSystemError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.errors, debug),
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed."
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        msg = err.get("msg", "Invalid value.")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(_field_name(tuple(err.get("loc", ()))), []).append(msg)
    first = next(iter(errors.values()))[0] if errors else "The given data was invalid."
    extra = len(errors) - 1
    message = first if extra <= 0 else f"{first} (and {extra} more error{'s' if extra > 1 else ''})"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(message, errors),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NitaError, handle_nita_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
