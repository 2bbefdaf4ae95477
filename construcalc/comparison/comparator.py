"""Result comparator — align metrics across results and tag the extremes.

Usage::

    from construcalc.comparison import compare

    table = compare([result_a, result_b, result_c])
    table.metric_row("Demanda Total").tags()   # ['lowest', 'highest', 'equal']

Tags are position-wise: every value equal to the maximum is 'highest',
every value equal to the minimum is 'lowest', and ties at an extreme are
not broken.  The input results are never modified.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from construcalc.comparison.table import (
    ComparisonCell,
    ComparisonRow,
    ComparisonTable,
    ComparisonTag,
)
from construcalc.config import MAX_COMPARISON_RESULTS, MIN_COMPARISON_RESULTS
from construcalc.models.result import CalculationResult
from construcalc.models.template import Template

logger = logging.getLogger(__name__)

# One number, optionally with thousands separators
_NUMBER = re.compile(r"-?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|-?\.\d+")


def extract_numeric(value: Any) -> float | None:
    """Best-effort numeric reading of a metric value.

    Numbers are used as-is.  A string is read only when it holds exactly
    one number, with optional thousands separators and surrounding units
    ("28.67 A", "1,200 W").  Anything else (no number, several digit
    groups, non-finite) yields *None* and is left out of the ranking.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        tokens = _NUMBER.findall(value)
        # "3φ16" or "4φ20 + 2φ16" carry several numbers: not rankable
        if len(tokens) != 1:
            return None
        number = float(tokens[0].replace(",", ""))
    else:
        return None
    return number if math.isfinite(number) else None


def rank_values(values: list[float | None]) -> list[ComparisonTag | None]:
    """Tag each value against the others present in the same row.

    *None* entries stay untagged.  With fewer than two numeric values
    nothing is ranked.
    """
    present = [v for v in values if v is not None]
    if len(present) < 2:
        return [None] * len(values)

    highest = max(present)
    lowest = min(present)
    tags: list[ComparisonTag | None] = []
    for value in values:
        if value is None:
            tags.append(None)
        elif highest == lowest:
            tags.append("equal")
        elif value == highest:
            tags.append("highest")
        elif value == lowest:
            tags.append("lowest")
        else:
            tags.append("equal")
    return tags


def _build_row(key: str, label: str, cells: list[ComparisonCell]) -> ComparisonRow:
    numbers = [extract_numeric(c.value) if c.present else None for c in cells]
    tagged = [
        cell.model_copy(update={"tag": tag})
        for cell, tag in zip(cells, rank_values(numbers))
    ]
    return ComparisonRow(key=key, label=label, cells=tagged)


def _parameter_label(
    key: str,
    results: list[CalculationResult],
    templates: dict[str, Template],
) -> tuple[str, dict[str, str | None]]:
    """Resolve a display label and per-template unit for input *key*."""
    label = key
    units: dict[str, str | None] = {}
    for result in results:
        template = templates.get(result.template_id)
        if template is None:
            continue
        param = template.get_parameter(key)
        if param is None:
            continue
        if label == key:
            label = param.display_label
        units[result.template_id] = param.unit
    return label, units


def compare(
    results: list[CalculationResult],
    *,
    templates: dict[str, Template] | list[Template] | None = None,
) -> ComparisonTable:
    """Build a :class:`ComparisonTable` for 2-4 results.

    Parameters
    ----------
    results:
        Results to compare, possibly from different templates.
    templates:
        Optional templates (by id, or a list) used to label parameter
        rows and attach their units.

    Raises
    ------
    ValueError
        If fewer than two or more than four results are given.
    """
    if not MIN_COMPARISON_RESULTS <= len(results) <= MAX_COMPARISON_RESULTS:
        raise ValueError(
            f"Comparison needs {MIN_COMPARISON_RESULTS}-{MAX_COMPARISON_RESULTS} "
            f"results, got {len(results)}"
        )

    if isinstance(templates, list):
        templates = {t.id: t for t in templates}
    templates = templates or {}

    # Union of input keys, first-seen order
    param_keys: list[str] = []
    for result in results:
        for key in result.inputs:
            if key not in param_keys:
                param_keys.append(key)

    parameter_rows: list[ComparisonRow] = []
    for key in param_keys:
        label, units = _parameter_label(key, results, templates)
        cells = [
            ComparisonCell(
                value=r.inputs[key],
                unit=units.get(r.template_id),
            )
            if key in r.inputs
            else ComparisonCell(present=False)
            for r in results
        ]
        parameter_rows.append(_build_row(key, label, cells))

    # Union of metric labels, first-seen order
    metric_labels: list[str] = []
    for result in results:
        for metric in result.metrics():
            if metric.label not in metric_labels:
                metric_labels.append(metric.label)

    metric_rows: list[ComparisonRow] = []
    for label in metric_labels:
        cells = []
        for result in results:
            metric = result.get_metric(label)
            if metric is None:
                cells.append(ComparisonCell(present=False))
            else:
                cells.append(ComparisonCell(value=metric.value, unit=metric.unit))
        metric_rows.append(_build_row(label, label, cells))

    logger.debug(
        "Compared %d results: %d parameter rows, %d metric rows",
        len(results),
        len(parameter_rows),
        len(metric_rows),
    )

    return ComparisonTable(
        result_ids=[r.id for r in results],
        result_names=[r.name or r.template_name for r in results],
        parameters=parameter_rows,
        metrics=metric_rows,
    )
