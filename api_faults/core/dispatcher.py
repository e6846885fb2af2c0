"""Turn any raised fault into a status code and error envelope.

Faults are classified by an ordered rule table; the first rule whose predicate
matches answers. Business errors come first so that an ``ApplicationError``
subclass that also looks like another fault kind keeps its own code, and the
catch-all comes last so every failure gets a response.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any
from typing import NamedTuple

from api_faults.core.config import FaultSettings
from api_faults.core.error_codes import GlobalErrorCode
from api_faults.core.errors import ApplicationError
from api_faults.core.errors import MalformedPayloadError
from api_faults.core.errors import MethodNotAllowedError
from api_faults.core.errors import RouteNotFoundError
from api_faults.core.errors import TypeMismatchError
from api_faults.core.validation import BodyValidationError
from api_faults.core.validation import ParameterValidationError
from api_faults.core.validation import RequestValidationFault
from api_faults.core.validation import extract_field_errors
from api_faults.messages.resolver import MessageResolver
from api_faults.messages.resolver import build_message_resolver
from api_faults.schemas.error import ErrorResponse
from api_faults.schemas.error import FieldError

logger = logging.getLogger(__name__)

DispatchResult = tuple[int, ErrorResponse]


class FaultRule(NamedTuple):
    name: str
    matches: Callable[[BaseException], bool]
    handle: Callable[[Any], DispatchResult]


def _always(_: BaseException) -> bool:
    return True


class FaultDispatcher:
    """Classify faults by priority and build the response envelope."""

    def __init__(self, resolver: MessageResolver) -> None:
        self._resolver = resolver
        self._rules: tuple[FaultRule, ...] = (
            FaultRule(
                "application_error",
                lambda exc: isinstance(exc, ApplicationError),
                self._handle_application_error,
            ),
            FaultRule("body_validation", lambda exc: isinstance(exc, BodyValidationError), self._handle_validation),
            FaultRule(
                "parameter_validation",
                lambda exc: isinstance(exc, ParameterValidationError),
                self._handle_validation,
            ),
            FaultRule(
                "method_not_allowed",
                lambda exc: isinstance(exc, MethodNotAllowedError),
                self._handle_method_not_allowed,
            ),
            FaultRule(
                "malformed_payload",
                lambda exc: isinstance(exc, MalformedPayloadError),
                self._handle_malformed_payload,
            ),
            FaultRule("type_mismatch", lambda exc: isinstance(exc, TypeMismatchError), self._handle_type_mismatch),
            FaultRule(
                "route_not_found",
                lambda exc: isinstance(exc, RouteNotFoundError),
                self._handle_route_not_found,
            ),
            FaultRule("unhandled", _always, self._handle_unexpected),
        )

    @property
    def rule_names(self) -> list[str]:
        return [rule.name for rule in self._rules]

    def classify(self, exc: BaseException) -> FaultRule:
        """Return the first rule matching ``exc``."""
        for rule in self._rules:
            if rule.matches(exc):
                return rule
        return self._rules[-1]

    def dispatch(self, exc: BaseException) -> DispatchResult:
        rule = self.classify(exc)
        try:
            return rule.handle(exc)
        except Exception:
            logger.exception("Fault rule %s failed while handling %s", rule.name, type(exc).__name__)

        try:
            return self._handle_unexpected(exc)
        except Exception:
            logger.exception("Message resolution failed while answering %s", type(exc).__name__)
            error_code = GlobalErrorCode.INTERNAL_SERVER_ERROR
            return error_code.status, ErrorResponse(code=error_code.code, message=error_code.code)

    def _handle_application_error(self, exc: ApplicationError) -> DispatchResult:
        logger.warning("[%s] code=%s args=%s", type(exc).__name__, exc.code, exc.error_args, exc_info=exc)

        if exc.message is not None:
            message = exc.message
        else:
            message = self._resolver.resolve(exc.code, *exc.error_args)
        return exc.status_code, ErrorResponse(code=exc.code, message=message)

    def _handle_validation(self, exc: RequestValidationFault) -> DispatchResult:
        logger.warning(
            "[%s] violations=%s",
            type(exc).__name__,
            [(violation.field, violation.description) for violation in exc.violations],
        )

        error_code = GlobalErrorCode.VALIDATION_ERROR
        return error_code.status, ErrorResponse[list[FieldError]](
            code=error_code.code,
            message=self._resolver.resolve(error_code.code),
            details=extract_field_errors(exc.violations),
        )

    def _handle_method_not_allowed(self, exc: MethodNotAllowedError) -> DispatchResult:
        logger.warning("[%s] method=%s allowed=%s", type(exc).__name__, exc.method, exc.allowed_methods)
        return self._respond(GlobalErrorCode.METHOD_NOT_ALLOWED, exc.message_argument)

    def _handle_malformed_payload(self, exc: MalformedPayloadError) -> DispatchResult:
        logger.warning("[%s] %s", type(exc).__name__, exc.detail or exc)
        return self._respond(GlobalErrorCode.INVALID_JSON)

    def _handle_type_mismatch(self, exc: TypeMismatchError) -> DispatchResult:
        logger.warning(
            "[%s] parameter=%s value=%r expected=%s",
            type(exc).__name__,
            exc.parameter,
            exc.value,
            exc.expected,
        )
        return self._respond(GlobalErrorCode.TYPE_MISMATCH, exc.parameter, exc.value)

    def _handle_route_not_found(self, exc: RouteNotFoundError) -> DispatchResult:
        logger.warning("[%s] path=%s", type(exc).__name__, exc.path)
        return self._respond(GlobalErrorCode.NO_RESOURCE_FOUND)

    def _handle_unexpected(self, exc: BaseException) -> DispatchResult:
        logger.error("[%s] unhandled exception", type(exc).__name__, exc_info=exc)
        return self._respond(GlobalErrorCode.INTERNAL_SERVER_ERROR)

    def _respond(self, error_code: GlobalErrorCode, *args: object) -> DispatchResult:
        message = self._resolver.resolve(error_code.code, *args)
        return error_code.status, ErrorResponse(code=error_code.code, message=message)


def build_dispatcher(settings: FaultSettings | None = None) -> FaultDispatcher:
    """Dispatcher backed by the default message catalog."""
    return FaultDispatcher(build_message_resolver(settings))
