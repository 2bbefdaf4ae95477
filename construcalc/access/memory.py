"""In-memory store — a local CalculationStore over a TemplateLibrary.

Behaves like the calculations API without a network: executed results
are kept pending until saved, and unknown ids answer like a 404.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any

from construcalc.access.base import CalculationStore
from construcalc.config import MAX_PENDING_RESULTS
from construcalc.errors import AccessError
from construcalc.executors.registry import ExecutorRegistry, default_registry
from construcalc.models.result import CalculationResult
from construcalc.models.template import Template
from construcalc.templates.library import TemplateLibrary
from construcalc.validation.validator import validate

logger = logging.getLogger(__name__)


class InMemoryCalculationStore(CalculationStore):
    """Offline store used by embedding shells and tests.

    Parameters
    ----------
    library:
        Template catalogue.  Defaults to a library of the seed templates.
    registry:
        Executor registry.  Defaults to the built-in executors.
    max_pending:
        Executed results kept for a later save.  The oldest unsaved
        result is evicted once the limit is reached.
    """

    def __init__(
        self,
        library: TemplateLibrary | None = None,
        registry: ExecutorRegistry | None = None,
        *,
        max_pending: int = MAX_PENDING_RESULTS,
    ) -> None:
        if max_pending < 1:
            raise ValueError(f"max_pending must be at least 1, got {max_pending}")
        self.library = library if library is not None else TemplateLibrary()
        self.registry = registry if registry is not None else default_registry()
        self.max_pending = max_pending
        self._executed: OrderedDict[str, CalculationResult] = OrderedDict()
        self._saved: dict[str, CalculationResult] = {}

    @property
    def pending_count(self) -> int:
        """Number of executed results not yet saved."""
        return len(self._executed)

    def remember(self, result: CalculationResult) -> None:
        """Register a locally computed result so it can be saved by id."""
        self._executed[result.id] = result
        self._executed.move_to_end(result.id)
        while len(self._executed) > self.max_pending:
            evicted, _ = self._executed.popitem(last=False)
            logger.debug("Evicted unsaved result %s", evicted)

    def list_templates(
        self,
        *,
        types: list[str] | str | None = None,
        target_professions: list[str] | str | None = None,
        search_term: str | None = None,
    ) -> list[Template]:
        return self.library.search(
            {
                "types": types,
                "target_professions": target_professions,
                "search_term": search_term,
            }
        )

    def get_template(self, template_id: str) -> Template | None:
        return self.library.get(template_id)

    def execute(
        self,
        template_id: str,
        parameters: dict[str, Any],
        *,
        project_id: str | None = None,
    ) -> CalculationResult:
        """Validate and run *template_id* locally.

        Raises
        ------
        AccessError
            If the template does not exist (status 404).
        ValidationError
            If *parameters* fail validation.
        ComputationError
            If the executor rejects the inputs.
        """
        template = self.library.get(template_id)
        if template is None:
            raise AccessError(f"Template not found: {template_id}", status=404)

        outcome = validate(template, parameters)
        if not outcome.ok:
            raise outcome.error()

        result = self.registry.execute(
            template.category, outcome.values, template=template
        ).unwrap()
        if project_id is not None:
            result = result.model_copy(update={"project_id": project_id})

        self.library.record_usage(template_id)
        self.remember(result)
        return result

    def save_result(
        self,
        result_id: str,
        name: str,
        *,
        notes: str | None = None,
        used_in_project: bool | None = None,
        project_id: str | None = None,
    ) -> CalculationResult:
        result = self._executed.get(result_id) or self._saved.get(result_id)
        if result is None:
            raise AccessError(f"Result not found: {result_id}", status=404)

        update: dict[str, Any] = {"name": name}
        if notes is not None:
            update["notes"] = notes
        if used_in_project is not None:
            update["used_in_project"] = used_in_project
        if project_id is not None:
            update["project_id"] = project_id

        saved = result.model_copy(update=update)
        self._saved[result_id] = saved
        self._executed.pop(result_id, None)
        logger.info("Saved result %s as %r", result_id, name)
        return saved

    def list_saved(self) -> list[CalculationResult]:
        return list(self._saved.values())

    def recommendations(
        self,
        *,
        template_id: str | None = None,
        project_id: str | None = None,
        limit: int | None = None,
    ) -> list[Template]:
        return self.library.recommendations(template_id, limit=5 if limit is None else limit)

    def toggle_favorite(self, template_id: str) -> bool:
        try:
            self.library.toggle_favorite(template_id)
        except KeyError as exc:
            raise AccessError(f"Template not found: {template_id}", status=404) from exc
        return True
