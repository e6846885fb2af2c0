"""Normalize validation failures into ordered field-level diagnostics."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from api_faults.schemas.error import FieldError

LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})
PARAMETER_LOCATIONS = frozenset({"query", "path", "header", "cookie"})


@dataclass(frozen=True)
class Violation:
    """One constraint violation reported by the validation engine.

    ``field`` is None for cross-field or whole-object violations.
    """

    description: str
    field: str | None = None
    rejected_value: Any = None
    location: str | None = None
    kind: str | None = None

    @property
    def is_global(self) -> bool:
        return self.field is None


class RequestValidationFault(Exception):
    """Base for validation failures that carry field-level detail."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        super().__init__(f"{len(violations)} validation violation(s)")
        self.violations = list(violations)


class BodyValidationError(RequestValidationFault):
    """The request payload violates declared constraints."""


class ParameterValidationError(RequestValidationFault):
    """Path, query, header or cookie parameters violate declared constraints."""


def extract_field_errors(violations: Iterable[Violation]) -> list[FieldError]:
    """Field-scoped errors first, then global ones, keeping source order in each group."""
    field_errors: list[FieldError] = []
    global_errors: list[FieldError] = []
    for violation in violations:
        if violation.is_global:
            global_errors.append(FieldError.global_error(violation.description))
        else:
            field_errors.append(FieldError.of(violation.field, violation.rejected_value, violation.description))
    return field_errors + global_errors


def violations_from_errors(errors: Iterable[Mapping[str, Any]]) -> list[Violation]:
    """Convert pydantic/FastAPI error dicts into violations."""
    violations: list[Violation] = []
    for issue in errors:
        location = issue.get("loc", ())
        kind = issue.get("type")
        field = format_location(location)
        rejected_value = None if kind == "missing" else issue.get("input")
        violations.append(
            Violation(
                description=str(issue.get("msg", "Invalid value")),
                field=field,
                rejected_value=rejected_value if field is not None else None,
                location=location_source(location),
                kind=str(kind) if kind is not None else None,
            )
        )
    return violations


def location_source(location: Any) -> str | None:
    """Return ``body``/``query``/... when the location starts with one."""
    if isinstance(location, (tuple, list)) and location and location[0] in LOCATION_PREFIXES:
        return str(location[0])
    return None


def format_location(location: tuple[Any, ...] | list[Any] | Any) -> str | None:
    """Dotted field path without the source prefix; None when nothing remains."""
    if not isinstance(location, (tuple, list)):
        return str(location) if location not in (None, "") else None

    parts = list(location)
    if parts and parts[0] in LOCATION_PREFIXES:
        parts = parts[1:]
    if not parts:
        return None
    return ".".join(str(part) for part in parts)
