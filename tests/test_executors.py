"""Tests for the formula executors and the executor registry.

Covers: residential electrical demand, RC beam design, degenerate inputs,
half-up rounding and category dispatch.

All tests run offline.
"""

from __future__ import annotations

import math

import pytest

from construcalc.errors import ComputationError
from construcalc.executors import (
    BeamDesignExecutor,
    ElectricalDemandExecutor,
    ExecutionOutcome,
    ExecutorRegistry,
    FormulaExecutor,
    execute,
)
from construcalc.executors.base import round_half_up
from construcalc.executors.electrical import breaker_bucket, classify_dwelling, special_loads_factor
from construcalc.executors.structural import bar_area_cm2
from construcalc.models import Category, Metric
from construcalc.templates.seed_data import BEAM_DESIGN, ELECTRICAL_DEMAND
from construcalc.validation import validate


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


ELECTRICAL_VALUES = {
    "areaVivienda": 150.0,
    "circuitosIluminacion": 4.0,
    "puntosIluminacion": 6.0,
    "circuitosTomacorrientes": 3.0,
    "puntosTomacorriente": 4.0,
    "cantidadCargasEspeciales": 2.0,
    "sumaCargasEspeciales": 5000.0,
    "voltajeNominal": "240",
}

BEAM_VALUES = {
    "length": 6.0,
    "load": 15000.0,
    "concreteStrength": "21",
    "steelStrength": "420",
    "beamHeight": 0.6,
    "beamWidth": 0.3,
    "barDiameter": "16",
}


@pytest.fixture
def registry() -> ExecutorRegistry:
    reg = ExecutorRegistry()
    reg.auto_discover()
    return reg


def _value(outcome: ExecutionOutcome, label: str) -> object:
    metric = outcome.unwrap().get_metric(label)
    assert metric is not None, label
    return metric.value


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(28.666666, 2) == 28.67

    @pytest.mark.parametrize(
        "area,expected",
        [(50, "Pequeña"), (80, "Mediana"), (199.9, "Mediana"), (200, "Mediana grande"),
         (300, "Grande"), (1000, "Grande")],
    )
    def test_classify_dwelling(self, area: float, expected: str) -> None:
        assert classify_dwelling(area)[0] == expected

    def test_demand_factors_by_size(self) -> None:
        assert classify_dwelling(150)[1:] == (0.70, 0.50)
        assert classify_dwelling(250)[1:] == (0.55, 0.40)

    def test_special_loads_branch_order(self) -> None:
        assert special_loads_factor(1, 20000) == 1.0
        assert special_loads_factor(0, 0) == 1.0
        assert special_loads_factor(2, 5000) == 0.8
        assert special_loads_factor(3, 10000) == 0.75

    def test_breaker_bucket(self) -> None:
        assert breaker_bucket(28.67) == 40
        assert breaker_bucket(12.0) == 15
        assert breaker_bucket(160.0) == 200
        assert breaker_bucket(161.0) is None

    def test_bar_area(self) -> None:
        assert bar_area_cm2(16) == pytest.approx(2.0106, abs=1e-4)


# ---------------------------------------------------------------------------
# Electrical demand
# ---------------------------------------------------------------------------


class TestElectricalDemand:
    def test_reference_dwelling(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.ELECTRICAL, ELECTRICAL_VALUES)
        assert outcome.ok
        result = outcome.unwrap()

        assert result.primary.label == "Demanda Total"
        assert result.primary.value == 6880
        assert result.primary.unit == "W"
        assert _value(outcome, "Tipo de Vivienda") == "Mediana"
        assert _value(outcome, "FD Iluminación") == 0.70
        assert _value(outcome, "FD Tomacorrientes") == 0.50
        assert _value(outcome, "Potencia Iluminación") == 2400
        assert _value(outcome, "Demanda Iluminación") == 1680
        assert _value(outcome, "Potencia Tomacorrientes") == 2400
        assert _value(outcome, "Demanda Tomacorrientes") == 1200
        assert _value(outcome, "FD Cargas Especiales") == 0.8
        assert _value(outcome, "Demanda Cargas Especiales") == 4000
        assert _value(outcome, "Corriente Total") == 28.67
        assert _value(outcome, "Breaker Recomendado") == 40

    def test_secondary_order(self, registry: ExecutorRegistry) -> None:
        result = registry.execute(Category.ELECTRICAL, ELECTRICAL_VALUES).unwrap()
        assert [m.label for m in result.secondary] == [
            "Tipo de Vivienda",
            "Potencia Iluminación",
            "FD Iluminación",
            "Demanda Iluminación",
            "Potencia Tomacorrientes",
            "FD Tomacorrientes",
            "Demanda Tomacorrientes",
            "FD Cargas Especiales",
            "Demanda Cargas Especiales",
            "Corriente Total",
            "Breaker Recomendado",
        ]

    def test_recommendations(self, registry: ExecutorRegistry) -> None:
        result = registry.execute(Category.ELECTRICAL, ELECTRICAL_VALUES).unwrap()
        by_title = {r.title: r.description for r in result.recommendations}
        assert by_title["Tablero principal"] == "Recomendado: 36A"
        assert by_title["Conductor alimentador"] == "12 AWG Cu"
        assert by_title["Protección"] == "Breaker principal: 32A"
        assert result.compliance.is_compliant
        assert result.compliance_status == "compliant"

    def test_heavy_feeder(self, registry: ExecutorRegistry) -> None:
        values = {**ELECTRICAL_VALUES, "voltajeNominal": "120"}
        result = registry.execute(Category.ELECTRICAL, values).unwrap()
        by_title = {r.title: r.description for r in result.recommendations}
        assert by_title["Conductor alimentador"] == "10 AWG Cu"

    def test_oversized_service_non_compliant(self, registry: ExecutorRegistry) -> None:
        values = {**ELECTRICAL_VALUES, "sumaCargasEspeciales": 50000.0, "voltajeNominal": "120"}
        result = registry.execute(Category.ELECTRICAL, values).unwrap()
        assert not result.compliance.is_compliant
        assert _value(registry.execute(Category.ELECTRICAL, values), "Breaker Recomendado") == (
            "Requiere estudio"
        )
        assert any(r.kind == "error" for r in result.recommendations)

    def test_zero_voltage_is_computation_error(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.ELECTRICAL, {**ELECTRICAL_VALUES, "voltajeNominal": 0})
        assert not outcome.ok
        assert outcome.result is None
        assert isinstance(outcome.error, ComputationError)
        assert outcome.error.category == "electrical"
        with pytest.raises(ComputationError):
            outcome.unwrap()

    def test_overflowing_demand_is_computation_error(self, registry: ExecutorRegistry) -> None:
        values = {**ELECTRICAL_VALUES, "circuitosIluminacion": 1e200, "puntosIluminacion": 1e200}
        outcome = registry.execute(Category.ELECTRICAL, values)
        assert not outcome.ok
        assert isinstance(outcome.error, ComputationError)
        assert "rango" in outcome.error.message

    def test_overflowing_current_is_computation_error(self, registry: ExecutorRegistry) -> None:
        values = {**ELECTRICAL_VALUES, "sumaCargasEspeciales": 1e300, "voltajeNominal": 1e-300}
        outcome = registry.execute(Category.ELECTRICAL, values)
        assert not outcome.ok
        assert outcome.error.category == "electrical"

    def test_template_metadata_stamped(self, registry: ExecutorRegistry) -> None:
        result = registry.execute(
            Category.ELECTRICAL, ELECTRICAL_VALUES, template=ELECTRICAL_DEMAND
        ).unwrap()
        assert result.template_id == ELECTRICAL_DEMAND.id
        assert result.template_name == ELECTRICAL_DEMAND.name
        assert result.category is Category.ELECTRICAL
        assert result.inputs == ELECTRICAL_VALUES
        assert result.nec_reference == "NEC-SB-IE, Sección 1.1"

    def test_validated_inputs_execute(self, registry: ExecutorRegistry) -> None:
        raw = {k: str(v) for k, v in ELECTRICAL_VALUES.items()}
        outcome = validate(ELECTRICAL_DEMAND, raw)
        result = registry.execute(ELECTRICAL_DEMAND.category, outcome.values).unwrap()
        assert result.primary.value == 6880

    def test_deterministic(self, registry: ExecutorRegistry) -> None:
        a = registry.execute(Category.ELECTRICAL, ELECTRICAL_VALUES).unwrap()
        b = registry.execute(Category.ELECTRICAL, ELECTRICAL_VALUES).unwrap()
        assert a.metrics() == b.metrics()


# ---------------------------------------------------------------------------
# Beam design
# ---------------------------------------------------------------------------


class TestBeamDesign:
    def test_reference_beam(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.STRUCTURAL, BEAM_VALUES)
        assert outcome.ok
        result = outcome.unwrap()

        assert result.primary.label == "Refuerzo Recomendado"
        assert result.primary.value == "3φ16"
        assert _value(outcome, "Momento Máximo") == 67.5
        assert _value(outcome, "Altura de Viga") == 0.6
        assert _value(outcome, "Ancho de Viga") == 0.3
        assert _value(outcome, "Altura Recomendada") == 0.6
        assert _value(outcome, "Ancho Recomendado") == 0.3
        assert _value(outcome, "Peralte Efectivo") == 0.55
        assert _value(outcome, "Acero Requerido") == 3.73
        assert _value(outcome, "Acero Mínimo") == 5.94
        assert _value(outcome, "Acero Final") == 5.94
        assert _value(outcome, "Número de Varillas") == 3
        assert _value(outcome, "Espaciamiento") == 10
        assert result.compliance.is_compliant
        assert result.recommendations[0].kind == "success"

    def test_required_steel_formula(self) -> None:
        expected = (67.5 * 1000) / (0.9 * 0.55 * (420e6 / 1.15)) * 1e4
        assert expected == pytest.approx(3.7338, abs=1e-4)

    def test_dimensions_default_to_recommended(self, registry: ExecutorRegistry) -> None:
        values = {k: v for k, v in BEAM_VALUES.items() if k not in ("beamHeight", "beamWidth")}
        values["length"] = 8.0
        outcome = registry.execute(Category.STRUCTURAL, values)
        assert _value(outcome, "Altura de Viga") == 0.8
        assert _value(outcome, "Ancho de Viga") == 0.4

    def test_over_reinforced(self, registry: ExecutorRegistry) -> None:
        values = {**BEAM_VALUES, "length": 20.0, "load": 100000.0,
                  "beamHeight": 0.3, "beamWidth": 0.15, "barDiameter": "25"}
        result = registry.execute(Category.STRUCTURAL, values).unwrap()
        assert not result.compliance.is_compliant
        assert result.compliance_status == "non-compliant"
        assert any(r.kind == "warning" for r in result.recommendations)

    def test_concrete_strength_reported(self, registry: ExecutorRegistry) -> None:
        result = registry.execute(Category.STRUCTURAL, {**BEAM_VALUES, "concreteStrength": "28"}).unwrap()
        assert any("f'c = 28 MPa" in note for note in result.compliance.notes)

    def test_single_bar_is_computation_error(self, registry: ExecutorRegistry) -> None:
        values = {**BEAM_VALUES, "length": 1.0, "load": 1000.0,
                  "beamHeight": 0.2, "beamWidth": 0.15, "barDiameter": "25"}
        outcome = registry.execute(Category.STRUCTURAL, values)
        assert not outcome.ok
        assert isinstance(outcome.error, ComputationError)

    def test_narrow_width_is_computation_error(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.STRUCTURAL, {**BEAM_VALUES, "beamWidth": 0.1})
        assert not outcome.ok

    def test_shallow_beam_is_computation_error(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.STRUCTURAL, {**BEAM_VALUES, "beamHeight": 0.05})
        assert not outcome.ok
        assert "Peralte" in outcome.error.message

    def test_zero_length_is_computation_error(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.STRUCTURAL, {**BEAM_VALUES, "length": 0.0})
        assert not outcome.ok

    def test_overflowing_moment_is_computation_error(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.STRUCTURAL, {**BEAM_VALUES, "load": 1e308, "length": 100.0})
        assert not outcome.ok
        assert isinstance(outcome.error, ComputationError)

    def test_overflowing_span_is_computation_error(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.STRUCTURAL, {**BEAM_VALUES, "length": 1e200})
        assert not outcome.ok
        assert outcome.error.category == "structural"

    def test_overflowing_section_is_computation_error(self, registry: ExecutorRegistry) -> None:
        values = {**BEAM_VALUES, "beamHeight": 1e200, "beamWidth": 1e200}
        outcome = registry.execute(Category.STRUCTURAL, values)
        assert not outcome.ok

    def test_no_nan_or_infinity(self, registry: ExecutorRegistry) -> None:
        for metric in registry.execute(Category.STRUCTURAL, BEAM_VALUES).unwrap().metrics():
            if isinstance(metric.value, float):
                assert math.isfinite(metric.value)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_auto_discover(self, registry: ExecutorRegistry) -> None:
        assert len(registry) == 2
        assert set(registry.list_categories()) == {Category.ELECTRICAL, Category.STRUCTURAL}
        assert "electrical" in registry
        assert Category.HYDRAULIC not in registry

    def test_get(self, registry: ExecutorRegistry) -> None:
        assert isinstance(registry.get("structural"), BeamDesignExecutor)
        assert isinstance(registry.get(Category.ELECTRICAL), ElectricalDemandExecutor)
        assert registry.get("nonsense") is None

    def test_unknown_category(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.HYDRAULIC, {})
        assert not outcome.ok
        assert outcome.error.category == "hydraulic"

    def test_incompatible_inputs(self, registry: ExecutorRegistry) -> None:
        outcome = registry.execute(Category.STRUCTURAL, {"length": "abc"})
        assert not outcome.ok
        assert isinstance(outcome.error, ComputationError)

    def test_register_custom_executor(self, registry: ExecutorRegistry) -> None:
        from pydantic import BaseModel

        from construcalc.models import CalculationResult, Compliance

        class FlowInputs(BaseModel):
            caudal: float

        class FlowExecutor(FormulaExecutor):
            @property
            def category(self) -> Category:
                return Category.HYDRAULIC

            @property
            def description(self) -> str:
                return "Caudal"

            @property
            def input_model(self) -> type[BaseModel]:
                return FlowInputs

            def compute(self, inputs: FlowInputs) -> CalculationResult:
                return CalculationResult(
                    primary=Metric(label="Caudal", value=inputs.caudal, unit="l/s"),
                    compliance=Compliance(is_compliant=True),
                )

        registry.register(FlowExecutor())
        result = registry.execute("hydraulic", {"caudal": 2.5}).unwrap()
        assert result.primary.value == 2.5
        assert result.category is Category.HYDRAULIC

    def test_module_level_execute(self) -> None:
        assert execute("electrical", ELECTRICAL_VALUES).unwrap().primary.value == 6880

    def test_outcome_requires_exactly_one(self) -> None:
        with pytest.raises(ValueError):
            ExecutionOutcome()
