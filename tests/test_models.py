"""Tests for the core data models.

Covers: Parameter constraints, Template helpers and wire aliases,
CalculationResult metrics, compliance status and Markdown rendering.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from construcalc.models import (
    CalculationResult,
    Category,
    Compliance,
    Metric,
    Parameter,
    ParameterType,
    Recommendation,
    Template,
)
from construcalc.templates.seed_data import ELECTRICAL_DEMAND


def _result(**overrides: object) -> CalculationResult:
    data: dict[str, object] = {
        "primary": Metric(label="Demanda Total", value=6880, unit="W"),
        "secondary": [Metric(label="Corriente Total", value=28.67, unit="A")],
        "compliance": Compliance(is_compliant=True, notes=["ok"]),
    }
    data.update(overrides)
    return CalculationResult(**data)


# ---------------------------------------------------------------------------
# Parameter
# ---------------------------------------------------------------------------


class TestParameter:
    def test_defaults(self) -> None:
        p = Parameter(name="area")
        assert p.type is ParameterType.NUMBER
        assert p.required is False
        assert p.options == []
        assert p.display_label == "area"

    def test_select_requires_options(self) -> None:
        with pytest.raises(PydanticValidationError):
            Parameter(name="v", type=ParameterType.SELECT)

    def test_min_greater_than_max_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Parameter(name="x", min=10, max=1)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Parameter(name="")

    def test_camel_case_aliases(self) -> None:
        p = Parameter.model_validate(
            {"name": "v", "type": "select", "options": ["120"], "defaultValue": "120"}
        )
        assert p.default_value == "120"

    def test_frozen(self) -> None:
        p = Parameter(name="x")
        with pytest.raises(PydanticValidationError):
            p.name = "y"


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------


class TestTemplate:
    def test_duplicate_parameter_names_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Template(
                id="t",
                category=Category.CUSTOM,
                parameters=[Parameter(name="a"), Parameter(name="a")],
            )

    def test_get_parameter(self) -> None:
        assert ELECTRICAL_DEMAND.get_parameter("areaVivienda").unit == "m²"
        assert ELECTRICAL_DEMAND.get_parameter("missing") is None

    def test_parameter_order_preserved(self) -> None:
        names = ELECTRICAL_DEMAND.parameter_names()
        assert names[0] == "areaVivienda"
        assert names[-1] == "voltajeNominal"

    def test_default_inputs(self) -> None:
        assert ELECTRICAL_DEMAND.default_inputs() == {"voltajeNominal": "240"}

    def test_wire_round_trip(self) -> None:
        data = ELECTRICAL_DEMAND.model_dump(mode="json", by_alias=True)
        assert data["necReference"] == "NEC-SB-IE, Sección 1.1"
        assert data["isVerified"] is True
        assert Template.model_validate(data) == ELECTRICAL_DEMAND


# ---------------------------------------------------------------------------
# CalculationResult
# ---------------------------------------------------------------------------


class TestCalculationResult:
    def test_metrics_order(self) -> None:
        labels = [m.label for m in _result().metrics()]
        assert labels == ["Demanda Total", "Corriente Total"]

    def test_get_metric(self) -> None:
        r = _result()
        assert r.get_metric("Corriente Total").value == 28.67
        assert r.get_metric("Nada") is None

    def test_unique_ids(self) -> None:
        assert _result().id != _result().id

    def test_compliance_status_compliant(self) -> None:
        assert _result().compliance_status == "compliant"

    def test_compliance_status_warning(self) -> None:
        r = _result(recommendations=[Recommendation(kind="warning", title="Revisar")])
        assert r.compliance_status == "warning"

    def test_compliance_status_non_compliant(self) -> None:
        r = _result(compliance=Compliance(is_compliant=False))
        assert r.compliance_status == "non-compliant"

    def test_immutable(self) -> None:
        r = _result()
        with pytest.raises(PydanticValidationError):
            r.name = "otro"

    def test_model_copy_produces_new_result(self) -> None:
        r = _result()
        renamed = r.model_copy(update={"name": "Casa A"})
        assert renamed.name == "Casa A"
        assert r.name == ""

    def test_accepts_wire_names(self) -> None:
        r = CalculationResult.model_validate(
            {
                "templateId": "abc",
                "primary": {"label": "X", "value": 1},
                "compliance": {"isCompliant": True},
                "projectId": "p1",
            }
        )
        assert r.template_id == "abc"
        assert r.project_id == "p1"

    def test_to_markdown(self) -> None:
        md = _result(name="Casa A", inputs={"areaVivienda": 150.0}).to_markdown()
        assert "# Casa A" in md
        assert "**6880 W**" in md
        assert "| areaVivienda | 150.0 |" in md
        assert "Cumplimiento: CUMPLE" in md
