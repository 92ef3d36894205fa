from __future__ import annotations

import logging
from typing import Any, Dict, cast

from fastapi import HTTPException as FastAPIHTTPException
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


logger = logging.getLogger(__name__)


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: list[dict[str, str]] | None = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    return payload


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _render(request: Request, status_code: int, message: str, **extra: Any) -> JSONResponse:
    payload = error_envelope(
        code=_status_to_code(status_code),
        message=message,
        err_type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=_request_id(request),
        **extra,
    )
    return JSONResponse(status_code=status_code, content=payload)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, FastAPIHTTPException):
        return await exception_handler(request, exc)
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _render(request, exc.status_code, detail)


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Engine boundary errors (bad FEN, bad square, illegal move) are client errors
    logger.info(
        "rejected request", extra={"request_id": _request_id(request), "reason": str(exc)}
    )
    return _render(request, status.HTTP_400_BAD_REQUEST, str(exc) or "bad request")


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        return await http_exception_handler(request, exc)
    logger.exception("Unhandled exception", extra={"request_id": _request_id(request)})
    return _render(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    # Map Pydantic/FastAPI validation errors to our structured envelope with 422
    errors = []
    rve = cast(RequestValidationError, exc)
    for e in rve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []) if p is not None)
        msg = e.get("msg", "invalid value")
        typ = e.get("type", "value_error")
        errors.append({"field": loc, "code": typ, "message": msg})
    return _render(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        field_errors=errors or None,
    )


_CODES = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "unprocessable_entity",
}


def _status_to_code(status_code: int) -> str:
    if status_code in _CODES:
        return _CODES[status_code]
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"
