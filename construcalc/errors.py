"""Error taxonomy for the calculation engine.

Validation and execution return these as values inside outcome objects;
access clients raise :class:`AccessError` directly.
"""

from __future__ import annotations


class CalcError(Exception):
    """Base class for every engine error."""


class ValidationError(CalcError):
    """One or more inputs failed their parameter constraints."""

    def __init__(self, field_errors: dict[str, str]) -> None:
        self.field_errors = dict(field_errors)
        fields = ", ".join(self.field_errors) or "none"
        super().__init__(f"Invalid inputs: {fields}")


class ComputationError(CalcError):
    """An executor met a degenerate input after validation passed."""

    def __init__(self, message: str, *, category: str | None = None) -> None:
        self.category = category
        self.message = message
        super().__init__(message)


class AccessError(CalcError):
    """The template/result store is unreachable or answered non-2xx."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        url: str | None = None,
    ) -> None:
        self.status = status
        self.url = url
        super().__init__(message)
