"""Unit tests for validation diagnostics extraction."""

from __future__ import annotations

from api_faults.core.validation import Violation
from api_faults.core.validation import extract_field_errors
from api_faults.core.validation import format_location
from api_faults.core.validation import violations_from_errors
from api_faults.schemas.error import FieldError


def test_field_errors_precede_global_errors_in_source_order() -> None:
    violations = [
        Violation(description="passwords must match"),
        Violation(description="must not be blank", field="name", rejected_value=""),
        Violation(description="dates overlap"),
        Violation(description="must be >= 1", field="age", rejected_value=-1),
    ]

    errors = extract_field_errors(violations)

    assert errors == [
        FieldError.of("name", "", "must not be blank"),
        FieldError.of("age", -1, "must be >= 1"),
        FieldError.global_error("passwords must match"),
        FieldError.global_error("dates overlap"),
    ]


def test_extract_keeps_duplicates_and_reasons_verbatim() -> None:
    violations = [
        Violation(description="NOT_FOUND", field="name", rejected_value="x"),
        Violation(description="NOT_FOUND", field="name", rejected_value="x"),
    ]

    errors = extract_field_errors(violations)

    assert len(errors) == 2
    assert [error.reason for error in errors] == ["NOT_FOUND", "NOT_FOUND"]


def test_extract_of_empty_violation_set_is_empty() -> None:
    assert extract_field_errors([]) == []


def test_global_error_serializes_without_rejected_value() -> None:
    error = FieldError.global_error("end must not precede start")

    assert error.model_dump(by_alias=True) == {
        "field": "global",
        "value": None,
        "reason": "end must not precede start",
    }


def test_format_location_strips_source_prefix() -> None:
    assert format_location(("body", "items", 0, "name")) == "items.0.name"
    assert format_location(("query", "limit")) == "limit"
    assert format_location(("body",)) is None
    assert format_location(()) is None
    assert format_location("limit") == "limit"


def test_violations_from_errors_maps_pydantic_error_dicts() -> None:
    errors = [
        {"type": "string_too_short", "loc": ("body", "name"), "msg": "too short", "input": ""},
        {"type": "missing", "loc": ("body", "age"), "msg": "Field required", "input": {"name": ""}},
        {"type": "value_error", "loc": ("body",), "msg": "Value error, bad period", "input": {"a": 1}},
    ]

    violations = violations_from_errors(errors)

    assert violations == [
        Violation(description="too short", field="name", rejected_value="", location="body", kind="string_too_short"),
        Violation(description="Field required", field="age", rejected_value=None, location="body", kind="missing"),
        Violation(
            description="Value error, bad period",
            field=None,
            rejected_value=None,
            location="body",
            kind="value_error",
        ),
    ]
    assert [violation.is_global for violation in violations] == [False, False, True]
