"""Abstract FormulaExecutor interface.

Every calculation category is implemented by one executor.  An executor
declares a pydantic ``input_model`` (its typed input shape) and a pure
``compute`` that maps those inputs to a :class:`CalculationResult`.
"""

from __future__ import annotations

import abc
import math
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from construcalc.errors import ComputationError
from construcalc.models.result import CalculationResult
from construcalc.models.template import Category, Template


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positives, like ``Math.round``."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


class ExecutionOutcome:
    """Result of an executor run: a result or a :class:`ComputationError`."""

    def __init__(
        self,
        result: CalculationResult | None = None,
        error: ComputationError | None = None,
    ) -> None:
        if (result is None) == (error is None):
            raise ValueError("ExecutionOutcome needs exactly one of result or error")
        self.result = result
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> CalculationResult:
        """Return the result or raise the carried error."""
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result

    def __repr__(self) -> str:
        if self.error is not None:
            return f"ExecutionOutcome(error={self.error.message!r})"
        return f"ExecutionOutcome(result={self.result.primary!r})"


class FormulaExecutor(abc.ABC):
    """Base class for all category executors."""

    @property
    @abc.abstractmethod
    def category(self) -> Category:
        """Category this executor is bound to."""

    @property
    @abc.abstractmethod
    def description(self) -> str:
        """Human-readable description."""

    @property
    @abc.abstractmethod
    def input_model(self) -> type[BaseModel]:
        """Pydantic model describing the typed inputs."""

    @abc.abstractmethod
    def compute(self, inputs: Any) -> CalculationResult:
        """Run the formulas on already-typed *inputs*.

        Must raise :class:`ComputationError` for degenerate inputs instead
        of returning NaN or infinite values.
        """

    def fail(self, message: str) -> ComputationError:
        """Build a ComputationError tagged with this executor's category."""
        return ComputationError(message, category=self.category.value)

    def coerce(self, values: dict[str, Any]) -> Any:
        """Build the typed input model from validated values."""
        try:
            return self.input_model.model_validate(values)
        except PydanticValidationError as exc:
            fields = sorted({".".join(str(p) for p in e["loc"]) for e in exc.errors()})
            raise self.fail(
                f"Inputs incompatible with {self.category.value} executor: {', '.join(fields)}"
            ) from exc

    def run(
        self,
        values: dict[str, Any],
        *,
        template: Template | None = None,
    ) -> CalculationResult:
        """Coerce *values*, compute, and stamp template metadata on the result."""
        inputs = self.coerce(values)
        try:
            result = self.compute(inputs)
        except OverflowError as exc:
            raise self.fail(f"Numeric overflow in {self.category.value} calculation") from exc

        update: dict[str, Any] = {"inputs": dict(values), "category": self.category}
        if template is not None:
            update["template_id"] = template.id
            update["template_name"] = template.name
            if template.nec_reference:
                update["nec_reference"] = template.nec_reference
        return result.model_copy(update=update)
