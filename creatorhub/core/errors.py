"""Error normalization and handlers."""

import logging
import builtins
import json
from typing import Any, List, Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import Request

from creatorhub.core.logging import get_request_id


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id


class AuthenticationError(AppError):
    code = "unauthorized"
    status_code = 401


class ValidationError(AppError, ValueError):
    """Request body failed schema validation; `errors` holds the field-level list."""
    code = "validation_error"
    status_code = 400

    def __init__(self, message: str = "Validation failed", *, errors: Optional[List[dict]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        # Round-trip through JSON so ctx values (e.g. raised ValueErrors) serialize.
        return cls("Validation failed", errors=json.loads(exc.json(include_url=False)))


class BusinessRuleError(AppError, ValueError):
    code = "business_rule_violation"
    status_code = 400


class NotFoundError(AppError, ValueError):
    code = "not_found"
    status_code = 404


class PermissionError(AppError, builtins.PermissionError):
    code = "forbidden"
    status_code = 403


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _error_payload(code: str, message: str, request_id: str, errors: Optional[List[Any]] = None) -> dict:
    payload = {
        "error": {"code": code, "message": message, "request_id": request_id},
        "detail": message,
    }
    if errors is not None:
        payload["errors"] = errors
    return payload


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    errors = exc.errors if isinstance(exc, ValidationError) else None
    payload = _error_payload(exc.code, exc.message, rid, errors)
    logger = logging.getLogger("creatorhub")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    rid = _extract_request_id(request)
    errors = json.loads(json.dumps(exc.errors(), default=str))
    payload = _error_payload("validation_error", "Validation failed", rid, errors)
    logger = logging.getLogger("creatorhub")
    logger.warning("validation.error", extra={"request_id": rid, "error_code": "validation_error", "status": 400})
    response = JSONResponse(status_code=400, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    message = exc.detail if exc.detail else "HTTP error"
    payload = _error_payload(code, message, rid)
    logger = logging.getLogger("creatorhub")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger("creatorhub")
    logger.error(
        "unhandled.exception",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"request_id": rid, "error_code": "internal_error"},
    )
    payload = _error_payload("internal_error", "Internal server error", rid)
    response = JSONResponse(status_code=500, content=payload)
    response.headers["x-request-id"] = rid
    return response
