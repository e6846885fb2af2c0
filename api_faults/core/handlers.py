"""Exception handler registration for FastAPI applications.

FastAPI and Starlette exceptions are first translated into framework-neutral
faults, then answered by a ``FaultDispatcher``.
"""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api_faults.core.dispatcher import FaultDispatcher
from api_faults.core.dispatcher import build_dispatcher
from api_faults.core.error_codes import error_code_for_status
from api_faults.core.errors import ApplicationError
from api_faults.core.errors import MalformedPayloadError
from api_faults.core.errors import MethodNotAllowedError
from api_faults.core.errors import RouteNotFoundError
from api_faults.core.errors import TypeMismatchError
from api_faults.core.validation import PARAMETER_LOCATIONS
from api_faults.core.validation import BodyValidationError
from api_faults.core.validation import ParameterValidationError
from api_faults.core.validation import Violation
from api_faults.core.validation import violations_from_errors

COERCION_ERROR_TYPES = frozenset({"enum", "bool_type", "uuid_type"})


def _is_coercion_error(violation: Violation) -> bool:
    if violation.location not in PARAMETER_LOCATIONS or violation.kind is None:
        return False
    return violation.kind.endswith("_parsing") or violation.kind in COERCION_ERROR_TYPES


def translate_validation_error(exc: RequestValidationError) -> Exception:
    """Map one FastAPI validation error onto the most specific fault kind."""
    errors: Sequence[Mapping[str, Any]] = exc.errors()

    for issue in errors:
        if issue.get("type") == "json_invalid":
            ctx = issue.get("ctx") or {}
            return MalformedPayloadError(detail=str(ctx.get("error", issue.get("msg", ""))))

    violations = violations_from_errors(errors)
    for violation in violations:
        if _is_coercion_error(violation):
            return TypeMismatchError(
                parameter=violation.field or "request",
                value=violation.rejected_value,
                expected=violation.kind,
            )

    if any(violation.location == "body" for violation in violations):
        return BodyValidationError(violations)
    return ParameterValidationError(violations)


def _allowed_methods(headers: Mapping[str, str] | None) -> list[str]:
    if not headers:
        return []
    raw = next((value for key, value in headers.items() if key.lower() == "allow"), "")
    return [method.strip() for method in raw.split(",") if method.strip()]


def translate_http_exception(request: Request, exc: StarletteHTTPException) -> Exception:
    """Map Starlette routing errors and explicit HTTP exceptions to faults."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return MethodNotAllowedError(method=request.method, allowed_methods=_allowed_methods(exc.headers))

    if exc.status_code == status.HTTP_404_NOT_FOUND and "endpoint" not in request.scope:
        return RouteNotFoundError(path=request.url.path)

    if exc.status_code == status.HTTP_400_BAD_REQUEST and isinstance(exc.__cause__, ValueError):
        return MalformedPayloadError(detail=str(exc.__cause__))

    message: str | None = None
    if isinstance(exc.detail, str) and exc.detail and exc.detail != _status_phrase(exc.status_code):
        message = exc.detail
    return ApplicationError(error_code_for_status(exc.status_code), message=message)


def _status_phrase(status_code: int) -> str | None:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return None


def translate_exception(request: Request, exc: Exception) -> Exception:
    if isinstance(exc, ApplicationError):
        return exc
    if isinstance(exc, RequestValidationError):
        return translate_validation_error(exc)
    if isinstance(exc, StarletteHTTPException):
        return translate_http_exception(request, exc)
    return exc


def build_error_handler(dispatcher: FaultDispatcher) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    """Create the single handler installed for every fault kind."""

    async def fault_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code, payload = dispatcher.dispatch(translate_exception(request, exc))
        headers = None
        if isinstance(exc, StarletteHTTPException) and exc.status_code == status_code and exc.headers:
            headers = dict(exc.headers)
        return JSONResponse(
            status_code=status_code,
            content=jsonable_encoder(payload.to_content()),
            headers=headers,
        )

    return fault_exception_handler


def register_error_handlers(app: FastAPI, dispatcher: FaultDispatcher | None = None) -> FaultDispatcher:
    """Attach fault translation to a FastAPI app instance."""
    if dispatcher is None:
        dispatcher = build_dispatcher()

    handler = build_error_handler(dispatcher)
    app.state.fault_dispatcher = dispatcher
    app.add_exception_handler(ApplicationError, handler)
    app.add_exception_handler(RequestValidationError, handler)
    app.add_exception_handler(StarletteHTTPException, handler)
    app.add_exception_handler(Exception, handler)
    return dispatcher
