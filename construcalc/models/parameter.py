"""Parameter — one typed, constrained input slot of a calculation template."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParameterType(str, Enum):
    """Supported parameter input types."""

    NUMBER = "number"
    SELECT = "select"
    TEXT = "text"
    BOOLEAN = "boolean"


class Parameter(BaseModel):
    """A single input slot of a :class:`~construcalc.models.template.Template`.

    ``min`` / ``max`` only apply to number parameters and ``options`` only
    to select parameters.  The wire format uses camelCase names
    (``defaultValue``, ``typicalRange``) which are accepted as aliases.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    """Identifier, unique within a template."""

    label: str = ""
    """Display string used in validation messages."""

    type: ParameterType = ParameterType.NUMBER
    unit: str | None = None
    required: bool = False

    min: float | None = None
    max: float | None = None

    options: list[str] = Field(default_factory=list)
    """Ordered allowed values for select parameters."""

    default_value: Any = Field(default=None, alias="defaultValue")

    pattern: str | None = None
    """Optional regular expression a text value must fully match."""

    pattern_message: str | None = Field(default=None, alias="patternMessage")

    placeholder: str | None = None
    tooltip: str | None = None
    typical_range: str | None = Field(default=None, alias="typicalRange")

    @model_validator(mode="after")
    def _check_constraints(self) -> Parameter:
        if not self.name:
            raise ValueError("Parameter name must not be empty")
        if self.type is ParameterType.SELECT and not self.options:
            raise ValueError(f"Select parameter '{self.name}' requires options")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(
                f"Parameter '{self.name}': min ({self.min}) greater than max ({self.max})"
            )
        return self

    @property
    def display_label(self) -> str:
        """Label for messages, falling back to the parameter name."""
        return self.label or self.name
