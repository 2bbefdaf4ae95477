"""ComparisonTable model and Markdown rendering."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ComparisonTag = Literal["highest", "lowest", "equal"]

MISSING = "—"


class ComparisonCell(BaseModel):
    """One result's value for one row.

    ``tag`` is *None* when the value is missing or not numeric, or when
    fewer than two results have a numeric value for the row.
    """

    present: bool = True
    value: Any = None
    unit: str | None = None
    tag: ComparisonTag | None = None

    @property
    def display(self) -> str:
        if not self.present:
            return MISSING
        text = f"{self.value}"
        if self.unit:
            text = f"{text} {self.unit}"
        return text


class ComparisonRow(BaseModel):
    key: str
    """Join key: parameter name or metric label."""

    label: str
    cells: list[ComparisonCell] = Field(default_factory=list)

    def tags(self) -> list[ComparisonTag | None]:
        return [c.tag for c in self.cells]


class ComparisonTable(BaseModel):
    """Side-by-side view of 2-4 results, one column per result."""

    result_ids: list[str] = Field(default_factory=list)
    result_names: list[str] = Field(default_factory=list)
    parameters: list[ComparisonRow] = Field(default_factory=list)
    metrics: list[ComparisonRow] = Field(default_factory=list)

    def parameter_row(self, key: str) -> ComparisonRow | None:
        return next((r for r in self.parameters if r.key == key), None)

    def metric_row(self, label: str) -> ComparisonRow | None:
        return next((r for r in self.metrics if r.key == label), None)

    def summary(self) -> dict[int, dict[str, int]]:
        """Count highest/lowest tags per result column across all rows."""
        counts = {i: {"highest": 0, "lowest": 0} for i in range(len(self.result_ids))}
        for row in [*self.parameters, *self.metrics]:
            for index, cell in enumerate(row.cells):
                if cell.tag in ("highest", "lowest"):
                    counts[index][cell.tag] += 1
        return counts

    def to_markdown(self) -> str:
        """Render both sections as Markdown tables."""
        lines: list[str] = []
        lines.append("# Comparación de Cálculos")
        lines.append("")
        for index, name in enumerate(self.result_names, start=1):
            lines.append(f"- **Cálculo {index}:** {name or self.result_ids[index - 1]}")
        lines.append("")

        for title, header, rows in (
            ("Parámetros", "Parámetro", self.parameters),
            ("Resultados", "Métrica", self.metrics),
        ):
            if not rows:
                continue
            columns = " | ".join(f"Cálculo {i}" for i in range(1, len(self.result_ids) + 1))
            lines.append(f"## {title}")
            lines.append("")
            lines.append(f"| {header} | {columns} |")
            lines.append("|" + "---|" * (len(self.result_ids) + 1))
            for row in rows:
                cells = " | ".join(_render_cell(c) for c in row.cells)
                lines.append(f"| {row.label} | {cells} |")
            lines.append("")

        return "\n".join(lines)


def _render_cell(cell: ComparisonCell) -> str:
    marker = {"highest": " ↑", "lowest": " ↓"}.get(cell.tag or "", "")
    return (cell.display + marker).replace("|", "\\|")
