"""TemplateLibrary — in-memory catalogue of calculation templates.

The library is the local source of templates for the engine.  It can be
seeded with the built-in templates and persisted to a single JSON file:

  {"version": "1", "templates": [<template>, ...]}

Templates are immutable, so favourites and usage counters replace the
stored template with an updated copy.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from construcalc.models.template import Template
from construcalc.templates.search import search as _search
from construcalc.templates.seed_data import SEED_TEMPLATES

logger = logging.getLogger(__name__)

CATALOGUE_VERSION = "1"


class TemplateLibrary:
    """Manage a catalogue of templates keyed by id.

    Parameters
    ----------
    templates:
        Initial templates.  Defaults to the built-in seed templates.
    """

    def __init__(self, templates: list[Template] | None = None) -> None:
        self._templates: dict[str, Template] = {}
        for template in SEED_TEMPLATES if templates is None else templates:
            self._templates[template.id] = template

    # -- CRUD -----------------------------------------------------------------

    def add(self, template: Template) -> None:
        """Add or replace *template*."""
        self._templates[template.id] = template
        logger.info("Added template %s (%s)", template.id, template.category.value)

    def get(self, template_id: str) -> Template | None:
        return self._templates.get(template_id)

    def remove(self, template_id: str) -> bool:
        """Remove a template.  Returns *True* if it existed."""
        removed = self._templates.pop(template_id, None)
        if removed is not None:
            logger.info("Removed template %s", template_id)
        return removed is not None

    def list_all(self) -> list[Template]:
        return list(self._templates.values())

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    # -- Search ---------------------------------------------------------------

    def search(self, query: dict[str, object] | None = None) -> list[Template]:
        """Filter templates.  See :func:`construcalc.templates.search.matches`."""
        return _search(self._templates.values(), query or {})

    def recommendations(
        self,
        template_id: str | None = None,
        *,
        limit: int = 5,
    ) -> list[Template]:
        """Suggest templates related to *template_id*.

        Templates of the same category come first, then the rest; within
        each group the most used and best rated lead.  The reference
        template itself is excluded.
        """
        reference = self._templates.get(template_id) if template_id else None
        candidates = [t for t in self._templates.values() if t.id != template_id]

        def _key(t: Template) -> tuple[int, int, float]:
            same = 0 if reference is not None and t.category == reference.category else 1
            return (same, -t.usage_count, -t.average_rating)

        return sorted(candidates, key=_key)[: max(limit, 0)]

    # -- Stats ----------------------------------------------------------------

    def toggle_favorite(self, template_id: str) -> bool:
        """Flip the favourite flag.  Returns the new state.

        Raises
        ------
        KeyError
            If *template_id* is unknown.
        """
        template = self._require(template_id)
        updated = template.model_copy(update={"is_favorite": not template.is_favorite})
        self._templates[template_id] = updated
        return updated.is_favorite

    def record_usage(self, template_id: str) -> int:
        """Increment the usage counter.  Returns the new count."""
        template = self._require(template_id)
        updated = template.model_copy(update={"usage_count": template.usage_count + 1})
        self._templates[template_id] = updated
        return updated.usage_count

    def _require(self, template_id: str) -> Template:
        template = self._templates.get(template_id)
        if template is None:
            raise KeyError(f"Template not found: {template_id}")
        return template

    # -- Persistence ----------------------------------------------------------

    def save(self, path: str | Path) -> Path:
        """Atomically write the catalogue to *path* as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "version": CATALOGUE_VERSION,
            "templates": [
                t.model_dump(mode="json", by_alias=True) for t in self._templates.values()
            ],
        }
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".templates_", suffix=".json")
        try:
            with open(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
            Path(tmp).replace(path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return path

    @classmethod
    def load(cls, path: str | Path) -> TemplateLibrary:
        """Read a catalogue written by :meth:`save`.

        Invalid entries are skipped with a warning; a missing or corrupt
        file yields an empty library.
        """
        path = Path(path)
        library = cls(templates=[])
        if not path.is_file():
            return library
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("Corrupt template catalogue at %s, starting empty", path)
            return library

        for raw in data.get("templates", []):
            try:
                template = Template.model_validate(raw)
            except PydanticValidationError:
                logger.warning(
                    "Skipping invalid template %s in %s", raw.get("id", "?"), path
                )
                continue
            library._templates[template.id] = template
        return library
