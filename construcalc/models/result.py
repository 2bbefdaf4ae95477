"""CalculationResult model and Markdown report generation."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from construcalc.models.template import Category

MetricValue = float | int | str | bool


class Metric(BaseModel):
    """One labelled output value.

    ``label`` is the join key used when comparing results of the same
    template, so executors must keep it stable.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    value: MetricValue
    unit: str | None = None
    factor: str | None = None
    """Optional annotation such as '(FD: 0.70)'."""


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success", "info", "warning", "error"] = "info"
    title: str
    description: str = ""


class Compliance(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    is_compliant: bool = Field(alias="isCompliant")
    notes: list[str] = Field(default_factory=list)


class CalculationResult(BaseModel):
    """Structured output of one successful calculation run.

    Results are immutable.  A correction produces a new result, which is
    what :meth:`model_copy` with ``update=`` gives the caller.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    template_id: str = Field(default="", alias="templateId")
    template_name: str = Field(default="", alias="templateName")
    category: Category | None = None
    name: str = ""
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )

    inputs: dict[str, Any] = Field(default_factory=dict)
    """Validated, typed values keyed by parameter name."""

    primary: Metric
    secondary: list[Metric] = Field(default_factory=list)
    compliance: Compliance
    recommendations: list[Recommendation] = Field(default_factory=list)

    nec_reference: str = Field(default="", alias="necReference")
    notes: str = ""
    project_id: str | None = Field(default=None, alias="projectId")
    used_in_project: bool = Field(default=False, alias="usedInProject")

    def metrics(self) -> list[Metric]:
        """Primary metric followed by the secondary metrics, in order."""
        return [self.primary, *self.secondary]

    def get_metric(self, label: str) -> Metric | None:
        for metric in self.metrics():
            if metric.label == label:
                return metric
        return None

    @property
    def compliance_status(self) -> str:
        """'compliant', 'warning' or 'non-compliant'."""
        if not self.compliance.is_compliant:
            return "non-compliant"
        if any(r.kind in ("warning", "error") for r in self.recommendations):
            return "warning"
        return "compliant"

    def to_markdown(self) -> str:
        """Render the result as a Markdown calculation report."""
        lines: list[str] = []

        lines.append(f"# {self.name or self.template_name or 'Cálculo'}")
        lines.append("")
        if self.template_name:
            lines.append(f"**Plantilla:** {self.template_name}")
        if self.nec_reference:
            lines.append(f"**Referencia:** {self.nec_reference}")
        lines.append(f"**Fecha:** {self.created_at.strftime('%Y-%m-%d %H:%M UTC')}")
        lines.append("")

        lines.append(f"## {self.primary.label}")
        lines.append("")
        lines.append(f"**{_format_value(self.primary)}**")
        lines.append("")

        if self.inputs:
            lines.append("## Parámetros")
            lines.append("")
            lines.append("| Parámetro | Valor |")
            lines.append("|-----------|-------|")
            for key, value in self.inputs.items():
                lines.append(f"| {key} | {value} |")
            lines.append("")

        if self.secondary:
            lines.append("## Desglose")
            lines.append("")
            lines.append("| Métrica | Valor |")
            lines.append("|---------|-------|")
            for metric in self.secondary:
                lines.append(f"| {metric.label} | {_format_value(metric)} |")
            lines.append("")

        if self.recommendations:
            lines.append("## Recomendaciones")
            lines.append("")
            for rec in self.recommendations:
                lines.append(f"- **{rec.title}** ({rec.kind}): {rec.description}")
            lines.append("")

        verdict = "CUMPLE" if self.compliance.is_compliant else "NO CUMPLE"
        lines.append(f"## Cumplimiento: {verdict}")
        lines.append("")
        for note in self.compliance.notes:
            lines.append(f"- {note}")
        lines.append("")

        return "\n".join(lines)


def _format_value(metric: Metric) -> str:
    text = f"{metric.value}"
    if metric.unit:
        text = f"{text} {metric.unit}"
    if metric.factor:
        text = f"{text} {metric.factor}"
    return text
