"""Fault types raised by application code or translated from the transport layer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from api_faults.core.error_codes import ErrorCode
from api_faults.core.error_codes import GlobalErrorCode


class ApplicationError(Exception):
    """Base business exception carrying an error code and message arguments.

    ``error_args`` are interpolated into the code's message template in order.
    An explicit ``message`` replaces the template entirely.
    """

    def __init__(self, error_code: ErrorCode, *error_args: Any, message: str | None = None) -> None:
        super().__init__(message if message is not None else error_code.code)
        self.error_code = error_code
        self.error_args = tuple(error_args)
        self.message = message

    @property
    def code(self) -> str:
        return self.error_code.code

    @property
    def status_code(self) -> int:
        return self.error_code.status


class BadRequestError(ApplicationError):
    """Convenience exception for rejected requests."""

    def __init__(self, *error_args: Any, message: str | None = None) -> None:
        super().__init__(GlobalErrorCode.BAD_REQUEST, *error_args, message=message)


class UnauthorizedError(ApplicationError):
    """Convenience exception for unauthenticated callers."""

    def __init__(self, *error_args: Any, message: str | None = None) -> None:
        super().__init__(GlobalErrorCode.UNAUTHORIZED, *error_args, message=message)


class ForbiddenError(ApplicationError):
    """Convenience exception for callers lacking permission."""

    def __init__(self, *error_args: Any, message: str | None = None) -> None:
        super().__init__(GlobalErrorCode.FORBIDDEN, *error_args, message=message)


class NotFoundError(ApplicationError):
    """Convenience exception for missing resources."""

    def __init__(self, *error_args: Any, message: str | None = None) -> None:
        super().__init__(GlobalErrorCode.NOT_FOUND, *error_args, message=message)


class TransportFault(Exception):
    """Request could not be routed or decoded; no field-level detail."""


class MethodNotAllowedError(TransportFault):
    def __init__(self, *, method: str, allowed_methods: Sequence[str] = ()) -> None:
        super().__init__(f"Method {method} not allowed")
        self.method = method
        self.allowed_methods = tuple(allowed_methods)

    @property
    def message_argument(self) -> str:
        """Value shown to the client: the supported methods, else the attempted one."""
        if self.allowed_methods:
            return ", ".join(self.allowed_methods)
        return self.method


class MalformedPayloadError(TransportFault):
    def __init__(self, *, detail: str = "") -> None:
        super().__init__(detail or "Malformed request payload")
        self.detail = detail


class TypeMismatchError(TransportFault):
    """A path/query value could not be converted to its declared type."""

    def __init__(self, *, parameter: str, value: Any, expected: str | None = None) -> None:
        super().__init__(f"Parameter {parameter} cannot accept value {value!r}")
        self.parameter = parameter
        self.value = value
        self.expected = expected


class RouteNotFoundError(TransportFault):
    def __init__(self, *, path: str) -> None:
        super().__init__(f"No route matches {path}")
        self.path = path
