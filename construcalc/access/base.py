"""Abstract CalculationStore interface.

A store supplies templates and persists results.  The engine only relies
on these read/write contracts, never on a transport.
"""

from __future__ import annotations

import abc
from typing import Any

from construcalc.models.result import CalculationResult
from construcalc.models.template import Template


class CalculationStore(abc.ABC):
    """Base class for template/result stores.

    Implementations raise :class:`~construcalc.errors.AccessError` when
    the backing store is unreachable or rejects a request.  They never
    retry on their own.
    """

    @abc.abstractmethod
    def list_templates(
        self,
        *,
        types: list[str] | str | None = None,
        target_professions: list[str] | str | None = None,
        search_term: str | None = None,
    ) -> list[Template]:
        """Return the templates matching the filters."""

    @abc.abstractmethod
    def get_template(self, template_id: str) -> Template | None:
        """Return one template, or *None* if it does not exist."""

    @abc.abstractmethod
    def execute(
        self,
        template_id: str,
        parameters: dict[str, Any],
        *,
        project_id: str | None = None,
    ) -> CalculationResult:
        """Run a calculation on the store side and return its result."""

    @abc.abstractmethod
    def save_result(
        self,
        result_id: str,
        name: str,
        *,
        notes: str | None = None,
        used_in_project: bool | None = None,
        project_id: str | None = None,
    ) -> CalculationResult:
        """Persist a previously executed result under *name*."""

    @abc.abstractmethod
    def list_saved(self) -> list[CalculationResult]:
        """Return every saved result."""

    @abc.abstractmethod
    def recommendations(
        self,
        *,
        template_id: str | None = None,
        project_id: str | None = None,
        limit: int | None = None,
    ) -> list[Template]:
        """Return templates recommended for the given context."""

    @abc.abstractmethod
    def toggle_favorite(self, template_id: str) -> bool:
        """Flip the favourite flag of a template.  Returns *True* on success."""
