"""Filter templates by category, profession, difficulty, or keyword.

All searches run against the in-memory catalogue.  The query keys mirror
the ``GET /calculations/templates`` filters: ``types``,
``targetProfessions``, ``searchTerm`` and ``difficulty`` (snake_case
spellings are accepted too).
"""

from __future__ import annotations

from collections.abc import Iterable

from construcalc.models.template import Template

_KEY_ALIASES = {
    "types": "types",
    "category": "types",
    "targetProfessions": "target_professions",
    "target_professions": "target_professions",
    "profession": "target_professions",
    "searchTerm": "search_term",
    "search_term": "search_term",
    "difficulty": "difficulty",
    "favorites": "favorites",
    "verified": "verified",
}


def matches(template: Template, query: dict[str, object]) -> bool:
    """Return *True* if *template* satisfies every filter in *query*.

    * ``types`` — category in the given list (case-insensitive)
    * ``target_professions`` — at least one profession in common
    * ``search_term`` — substring of name, description or any tag
    * ``difficulty`` — exact match
    * ``favorites`` / ``verified`` — flag must be set when *True*
    """
    for raw_key, value in query.items():
        if value is None or value == "" or value == []:
            continue
        key = _KEY_ALIASES.get(raw_key)
        if key is None:
            continue

        if key == "types":
            wanted = [v.lower() for v in _as_list(value)]
            if template.category.value not in wanted:
                return False

        elif key == "target_professions":
            wanted = {v.lower() for v in _as_list(value)}
            have = {p.lower() for p in template.target_professions}
            if not wanted & have:
                return False

        elif key == "search_term":
            term = str(value).lower()
            blob = " ".join(
                [template.name, template.description, *template.tags]
            ).lower()
            if term not in blob:
                return False

        elif key == "difficulty":
            if template.difficulty.value != str(value).lower():
                return False

        elif key == "favorites":
            if value and not template.is_favorite:
                return False

        elif key == "verified":
            if value and not template.verified:
                return False

    return True


def search(templates: Iterable[Template], query: dict[str, object]) -> list[Template]:
    """Return the templates satisfying every filter in *query*, in order."""
    return [t for t in templates if matches(t, query)]


def _as_list(value: object) -> list[str]:
    """Coerce a string (comma-separated allowed) or list to ``list[str]``."""
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(getattr(v, "value", v)) for v in value]
    return [str(getattr(value, "value", value))]
