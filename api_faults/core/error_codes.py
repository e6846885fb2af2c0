"""Error code registry shared by every API fault."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
import re
from typing import Protocol

from fastapi import status


class ErrorCode(Protocol):
    """Anything carrying a stable wire code and its HTTP status."""

    @property
    def code(self) -> str: ...

    @property
    def status(self) -> int: ...


class GlobalErrorCode(Enum):
    """Codes every service understands out of the box."""

    BAD_REQUEST = (status.HTTP_400_BAD_REQUEST, "BAD_REQUEST")
    VALIDATION_ERROR = (status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")
    UNAUTHORIZED = (status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED")
    FORBIDDEN = (status.HTTP_403_FORBIDDEN, "FORBIDDEN")
    NOT_FOUND = (status.HTTP_404_NOT_FOUND, "NOT_FOUND")
    NO_RESOURCE_FOUND = (status.HTTP_404_NOT_FOUND, "NO_RESOURCE_FOUND")
    METHOD_NOT_ALLOWED = (status.HTTP_405_METHOD_NOT_ALLOWED, "METHOD_NOT_ALLOWED")
    CONFLICT = (status.HTTP_409_CONFLICT, "CONFLICT")
    TOO_MANY_REQUESTS = (status.HTTP_429_TOO_MANY_REQUESTS, "TOO_MANY_REQUESTS")
    INVALID_JSON = (status.HTTP_400_BAD_REQUEST, "INVALID_JSON")
    TYPE_MISMATCH = (status.HTTP_400_BAD_REQUEST, "TYPE_MISMATCH")
    INTERNAL_SERVER_ERROR = (status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR")
    SERVICE_UNAVAILABLE = (status.HTTP_503_SERVICE_UNAVAILABLE, "SERVICE_UNAVAILABLE")

    def __init__(self, status_code: int, code: str) -> None:
        self._status = status_code
        self._code = code

    @property
    def status(self) -> int:
        return self._status

    @property
    def code(self) -> str:
        return self._code


@dataclass(frozen=True)
class HttpStatusErrorCode:
    """Code for an HTTP status that has no registry member; the status is kept as-is."""

    status: int
    code: str

    @classmethod
    def from_status(cls, status_code: int) -> HttpStatusErrorCode:
        try:
            phrase = HTTPStatus(status_code).phrase
        except ValueError:
            return cls(status=status_code, code=f"HTTP_{status_code}")
        return cls(status=status_code, code=re.sub(r"[^A-Z0-9]+", "_", phrase.upper()).strip("_"))


# Statuses shared by several members resolve to the general-purpose one.
_STATUS_DEFAULTS: dict[int, GlobalErrorCode] = {
    status.HTTP_400_BAD_REQUEST: GlobalErrorCode.BAD_REQUEST,
    status.HTTP_404_NOT_FOUND: GlobalErrorCode.NOT_FOUND,
}


def error_code_for_status(status_code: int) -> ErrorCode:
    """Pick the code for a bare HTTP status without changing the status."""
    if status_code in _STATUS_DEFAULTS:
        return _STATUS_DEFAULTS[status_code]
    for member in GlobalErrorCode:
        if member.status == status_code:
            return member
    return HttpStatusErrorCode.from_status(status_code)
