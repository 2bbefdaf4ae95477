"""Template — a named, versioned bundle of parameters bound to a category."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from construcalc.models.parameter import Parameter


class Category(str, Enum):
    """Calculation categories.  Each selects one formula executor."""

    STRUCTURAL = "structural"
    ELECTRICAL = "electrical"
    ARCHITECTURAL = "architectural"
    HYDRAULIC = "hydraulic"
    CUSTOM = "custom"


class Difficulty(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Template(BaseModel):
    """A parameterized technical calculation definition.

    Templates are fetched read-only by the engine and never mutated during
    a calculation run.  ``parameters`` keeps insertion order, which is
    both the display and the evaluation order.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str = ""
    description: str = ""
    version: str = "1.0.0"

    category: Category
    """Selects which formula executor runs."""

    parameters: list[Parameter] = Field(default_factory=list)

    nec_reference: str = Field(default="", alias="necReference")
    """Normative citation, e.g. 'NEC-SB-IE, Sección 1.1'."""

    target_professions: list[str] = Field(default_factory=list, alias="targetProfessions")
    difficulty: Difficulty = Difficulty.BASIC
    tags: list[str] = Field(default_factory=list)

    usage_count: int = Field(default=0, alias="usageCount")
    average_rating: float = Field(default=0.0, alias="averageRating")
    verified: bool = Field(default=False, alias="isVerified")
    is_favorite: bool = Field(default=False, alias="isFavorite")
    author: str = ""

    @model_validator(mode="after")
    def _check_unique_names(self) -> Template:
        seen: set[str] = set()
        for param in self.parameters:
            if param.name in seen:
                raise ValueError(
                    f"Template '{self.id}' has duplicate parameter '{param.name}'"
                )
            seen.add(param.name)
        return self

    def get_parameter(self, name: str) -> Parameter | None:
        """Return the parameter called *name*, or *None*."""
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def parameter_names(self) -> list[str]:
        return [p.name for p in self.parameters]

    def default_inputs(self) -> dict[str, Any]:
        """Raw input map pre-filled with every declared default value."""
        return {
            p.name: p.default_value
            for p in self.parameters
            if p.default_value is not None
        }
