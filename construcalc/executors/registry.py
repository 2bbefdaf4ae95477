"""ExecutorRegistry — map calculation categories to formula executors."""

from __future__ import annotations

import logging
from typing import Any

from construcalc.errors import ComputationError
from construcalc.executors.base import ExecutionOutcome, FormulaExecutor
from construcalc.models.template import Category, Template

logger = logging.getLogger(__name__)


class ExecutorRegistry:
    """Central registry for category executors.

    Adding a category means registering one more executor; dispatch never
    grows a conditional.
    """

    def __init__(self) -> None:
        self._executors: dict[Category, FormulaExecutor] = {}

    def register(self, executor: FormulaExecutor) -> None:
        """Add an executor, replacing any previous one for its category."""
        if executor.category in self._executors:
            logger.warning("Replacing executor for category %s", executor.category.value)
        self._executors[executor.category] = executor
        logger.info("Registered executor: %s", executor.category.value)

    def auto_discover(self) -> None:
        """Load all built-in executors."""
        from construcalc.executors.electrical import ElectricalDemandExecutor
        from construcalc.executors.structural import BeamDesignExecutor

        for executor_cls in [ElectricalDemandExecutor, BeamDesignExecutor]:
            self.register(executor_cls())

    def get(self, category: Category | str) -> FormulaExecutor | None:
        try:
            return self._executors.get(Category(category))
        except ValueError:
            return None

    def list_categories(self) -> list[Category]:
        return list(self._executors)

    def __contains__(self, category: object) -> bool:
        return isinstance(category, (Category, str)) and self.get(category) is not None

    def __len__(self) -> int:
        return len(self._executors)

    def execute(
        self,
        category: Category | str,
        values: dict[str, Any],
        *,
        template: Template | None = None,
    ) -> ExecutionOutcome:
        """Run the executor for *category* on validated *values*.

        Degenerate inputs and unknown categories come back as an outcome
        carrying a :class:`ComputationError`; no partial result is built.
        """
        label = category.value if isinstance(category, Category) else str(category)
        executor = self.get(category)
        if executor is None:
            logger.debug("No executor registered for category %s", label)
            return ExecutionOutcome(
                error=ComputationError(
                    f"No executor registered for category: {label}. "
                    f"Available: {[c.value for c in self._executors]}",
                    category=label,
                )
            )

        try:
            result = executor.run(values, template=template)
        except ComputationError as exc:
            logger.debug("Computation failed for %s: %s", label, exc.message)
            return ExecutionOutcome(error=exc)

        return ExecutionOutcome(result=result)


_default_registry: ExecutorRegistry | None = None


def default_registry() -> ExecutorRegistry:
    """Process-wide registry holding the built-in executors."""
    global _default_registry
    if _default_registry is None:
        registry = ExecutorRegistry()
        registry.auto_discover()
        _default_registry = registry
    return _default_registry


def execute(
    category: Category | str,
    values: dict[str, Any],
    *,
    template: Template | None = None,
) -> ExecutionOutcome:
    """Execute *category* with the default registry."""
    return default_registry().execute(category, values, template=template)
