"""Error envelope schemas shared across API handlers."""

from __future__ import annotations

from typing import Any
from typing import Generic
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

GLOBAL_FIELD = "global"

DetailsT = TypeVar("DetailsT")


class FieldError(BaseModel):
    """Single field-level validation issue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field: str
    rejected_value: Any = Field(default=None, serialization_alias="value")
    reason: str

    @classmethod
    def of(cls, field: str, rejected_value: Any, reason: str) -> FieldError:
        return cls(field=field, rejected_value=rejected_value, reason=reason)

    @classmethod
    def global_error(cls, reason: str) -> FieldError:
        """Issue that belongs to the payload as a whole rather than one field."""
        return cls(field=GLOBAL_FIELD, rejected_value=None, reason=reason)


class ErrorResponse(BaseModel, Generic[DetailsT]):
    """Top-level API error response envelope."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    details: DetailsT | None = None

    def to_content(self) -> dict[str, Any]:
        """Wire representation; ``details`` is dropped rather than sent as null."""
        exclude = {"details"} if self.details is None else None
        return self.model_dump(by_alias=True, exclude=exclude)
