"""CalculationEngine — the single entry point for running calculations.

Usage::

    from construcalc import CalculationEngine

    engine = CalculationEngine()
    outcome = engine.run_by_id(ELECTRICAL_DEMAND_ID, {"areaVivienda": "150", ...})
    if outcome.ok:
        print(outcome.result.to_markdown())
    else:
        print(outcome.errors)
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any

from construcalc.access.base import CalculationStore
from construcalc.access.memory import InMemoryCalculationStore
from construcalc.comparison.comparator import compare as _compare
from construcalc.comparison.table import ComparisonTable
from construcalc.config import HISTORY_SIZE, ConfigManager
from construcalc.errors import CalcError, ComputationError
from construcalc.executors.base import ExecutionOutcome
from construcalc.executors.registry import ExecutorRegistry, default_registry
from construcalc.models.result import CalculationResult
from construcalc.models.template import Template
from construcalc.templates.library import TemplateLibrary
from construcalc.validation.validator import ValidationOutcome, validate

logger = logging.getLogger(__name__)


class RunOutcome:
    """Result of :meth:`CalculationEngine.run`.

    Holds the validation outcome and, when validation passed, the
    execution outcome.  ``errors`` maps field names to messages for a
    validation failure; ``error`` is the typed error of either stage.
    """

    def __init__(
        self,
        validation: ValidationOutcome,
        execution: ExecutionOutcome | None = None,
    ) -> None:
        self.validation = validation
        self.execution = execution

    @property
    def ok(self) -> bool:
        return self.validation.ok and self.execution is not None and self.execution.ok

    @property
    def result(self) -> CalculationResult | None:
        if self.execution is None:
            return None
        return self.execution.result

    @property
    def errors(self) -> dict[str, str]:
        return dict(self.validation.errors)

    @property
    def error(self) -> CalcError | None:
        if not self.validation.ok:
            return self.validation.error()
        if self.execution is not None:
            return self.execution.error
        return None

    def unwrap(self) -> CalculationResult:
        """Return the result or raise the typed error."""
        error = self.error
        if error is not None:
            raise error
        assert self.result is not None
        return self.result

    def __repr__(self) -> str:
        if self.ok:
            return f"RunOutcome(ok, result={self.result.id!r})"
        return f"RunOutcome(error={self.error!r})"


class CalculationEngine:
    """Validate, execute, save and compare calculations.

    Parameters
    ----------
    registry:
        Executor registry.  Defaults to the built-in executors.
    library:
        Template catalogue.  Defaults to the seed templates;
        :meth:`from_config` loads ``CONSTRUCALC_TEMPLATES_PATH`` instead.
    store:
        Store used by :meth:`save` and :meth:`run_remote`.  Defaults to an
        :class:`InMemoryCalculationStore` sharing *library* and *registry*.
    """

    def __init__(
        self,
        registry: ExecutorRegistry | None = None,
        library: TemplateLibrary | None = None,
        store: CalculationStore | None = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.library = library if library is not None else TemplateLibrary()
        self.store = (
            store
            if store is not None
            else InMemoryCalculationStore(self.library, self.registry)
        )
        self._history: deque[CalculationResult] = deque(maxlen=HISTORY_SIZE)

    @classmethod
    def from_config(cls, project_path: str = ".") -> CalculationEngine:
        """Build an engine from :class:`ConfigManager` settings."""
        templates_path = ConfigManager().load_settings(project_path).templates_path
        library = TemplateLibrary.load(templates_path) if templates_path else None
        return cls(library=library)

    # -- Running --------------------------------------------------------------

    def run(
        self,
        template: Template,
        raw_inputs: dict[str, Any],
        *,
        name: str | None = None,
        project_id: str | None = None,
    ) -> RunOutcome:
        """Validate *raw_inputs* and execute *template*.

        The executor is never invoked when validation fails.
        """
        validation = validate(template, raw_inputs)
        if not validation.ok:
            logger.debug(
                "Validation failed for template %s: %s", template.id, validation.errors
            )
            return RunOutcome(validation)

        execution = self.registry.execute(
            template.category, validation.values, template=template
        )
        if execution.ok:
            update: dict[str, Any] = {}
            if name is not None:
                update["name"] = name
            if project_id is not None:
                update["project_id"] = project_id
            if update:
                execution = ExecutionOutcome(result=execution.result.model_copy(update=update))
            self._completed(template, execution.result)

        return RunOutcome(validation, execution)

    def run_by_id(
        self,
        template_id: str,
        raw_inputs: dict[str, Any],
        *,
        name: str | None = None,
        project_id: str | None = None,
    ) -> RunOutcome:
        """Run the library template *template_id*.

        An unknown id yields a failed outcome carrying a ComputationError.
        """
        template = self.library.get(template_id)
        if template is None:
            return RunOutcome(
                ValidationOutcome(),
                ExecutionOutcome(error=ComputationError(f"Unknown template: {template_id}")),
            )
        return self.run(template, raw_inputs, name=name, project_id=project_id)

    def run_remote(
        self,
        template_id: str,
        parameters: dict[str, Any],
        *,
        project_id: str | None = None,
    ) -> CalculationResult:
        """Execute through the store.  Store errors propagate as raised."""
        result = self.store.execute(template_id, parameters, project_id=project_id)
        self._history.appendleft(result)
        return result

    def _completed(self, template: Template, result: CalculationResult) -> None:
        self._history.appendleft(result)
        if template.id in self.library:
            self.library.record_usage(template.id)
        if isinstance(self.store, InMemoryCalculationStore):
            self.store.remember(result)
        logger.info(
            "Calculated %s (%s): %s", template.id, template.category.value, result.primary.value
        )

    # -- Persistence ----------------------------------------------------------

    def save(
        self,
        result: CalculationResult,
        name: str,
        notes: str | None = None,
        *,
        used_in_project: bool | None = None,
        project_id: str | None = None,
    ) -> CalculationResult:
        """Persist *result* under *name* and return the stored copy.

        Raises
        ------
        AccessError
            If the store is unreachable or rejects the request.
        """
        return self.store.save_result(
            result.id,
            name,
            notes=notes,
            used_in_project=used_in_project,
            project_id=project_id,
        )

    # -- Comparison / history -------------------------------------------------

    def compare(self, results: list[CalculationResult]) -> ComparisonTable:
        """Compare 2..4 results, labelling parameters from the library."""
        return _compare(results, templates=self.library.list_all())

    @property
    def history(self) -> list[CalculationResult]:
        """The most recent successful runs, newest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
