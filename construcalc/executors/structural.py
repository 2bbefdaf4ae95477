"""Reinforced-concrete beam preliminary design (NEC-SE-HM).

Simply supported span under uniform load.  Units: span and section in
metres, load in N/m, strengths in MPa, bar diameter in millimetres,
steel areas in cm².
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, ConfigDict, Field

from construcalc.executors.base import FormulaExecutor, round_half_up
from construcalc.models.result import CalculationResult, Compliance, Metric, Recommendation
from construcalc.models.template import Category

logger = logging.getLogger(__name__)

NEC_REFERENCE = "NEC-SE-HM, Capítulo 4.2"

COVER_ALLOWANCE_M = 0.05
"""Distance from the extreme fibre to the steel centroid."""

SIDE_COVER_M = 0.10
"""Total lateral cover subtracted from the width before spacing bars."""

STEEL_SAFETY_FACTOR = 1.15
LEVER_ARM_FACTOR = 0.9
MIN_STEEL_RATIO = 0.0033
MAX_STEEL_RATIO = 0.025
SPAN_TO_DEPTH = 10.0
WIDTH_TO_DEPTH = 0.5
M2_TO_CM2 = 10000.0


class BeamDesignInputs(BaseModel):
    """Typed inputs for the beam design calculation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    length: float
    load: float
    concrete_strength: float = Field(default=21.0, alias="concreteStrength")
    steel_strength: float = Field(default=420.0, alias="steelStrength")
    beam_height: float | None = Field(default=None, alias="beamHeight")
    beam_width: float | None = Field(default=None, alias="beamWidth")
    bar_diameter: float = Field(default=16.0, alias="barDiameter")


def bar_area_cm2(diameter_mm: float) -> float:
    """Cross-section area of one bar in cm²."""
    return math.pi * (diameter_mm / 20) ** 2


def _bar_label(bars: int, diameter_mm: float) -> str:
    return f"{bars}φ{diameter_mm:g}"


class BeamDesignExecutor(FormulaExecutor):
    """Flexural reinforcement for a simply supported RC beam."""

    @property
    def category(self) -> Category:
        return Category.STRUCTURAL

    @property
    def description(self) -> str:
        return "Diseño preliminar a flexión de viga de hormigón armado simplemente apoyada."

    @property
    def input_model(self) -> type[BaseModel]:
        return BeamDesignInputs

    def compute(self, inputs: BeamDesignInputs) -> CalculationResult:
        span = inputs.length
        if span <= 0:
            raise self.fail(f"La luz de la viga debe ser positiva (recibido {span:g} m)")
        if inputs.steel_strength <= 0:
            raise self.fail("La resistencia del acero debe ser positiva")
        if inputs.bar_diameter <= 0:
            raise self.fail("El diámetro de varilla debe ser positivo")

        load_kn_m = inputs.load / 1000
        max_moment = load_kn_m * span ** 2 / 8
        if not math.isfinite(max_moment):
            raise self.fail("El momento máximo excede el rango numérico representable")

        recommended_height = span / SPAN_TO_DEPTH
        recommended_width = WIDTH_TO_DEPTH * recommended_height

        height = inputs.beam_height if inputs.beam_height and inputs.beam_height > 0 else recommended_height
        width = inputs.beam_width if inputs.beam_width and inputs.beam_width > 0 else recommended_width

        d = height - COVER_ALLOWANCE_M
        if d <= 0:
            raise self.fail(
                f"Peralte efectivo no positivo: altura {height:g} m menor que el recubrimiento"
            )

        fy = inputs.steel_strength * 1e6
        required_as = (max_moment * 1000) / (LEVER_ARM_FACTOR * d * (fy / STEEL_SAFETY_FACTOR))
        required_as_cm2 = required_as * M2_TO_CM2
        gross_section_cm2 = width * height * M2_TO_CM2
        min_as = MIN_STEEL_RATIO * gross_section_cm2
        final_as = max(required_as_cm2, min_as)
        if not math.isfinite(final_as):
            raise self.fail("El acero requerido excede el rango numérico representable")

        bar_area = bar_area_cm2(inputs.bar_diameter)
        bars_count = math.ceil(final_as / bar_area)
        if bars_count < 2:
            raise self.fail(
                f"Una sola varilla de {inputs.bar_diameter:g} mm cubre el acero; "
                "el espaciamiento no está definido"
            )

        clear_width = width - SIDE_COVER_M
        if clear_width <= 0:
            raise self.fail(
                f"Ancho de viga {width:g} m insuficiente para el recubrimiento lateral"
            )
        spacing = int(round_half_up((clear_width / (bars_count - 1)) * 100))

        max_as = MAX_STEEL_RATIO * gross_section_cm2
        is_over_reinforced = final_as > max_as

        secondary = [
            Metric(label="Momento Máximo", value=round_half_up(max_moment, 2), unit="kN·m"),
            Metric(label="Altura de Viga", value=round_half_up(height, 2), unit="m"),
            Metric(label="Ancho de Viga", value=round_half_up(width, 2), unit="m"),
            Metric(label="Altura Recomendada", value=round_half_up(recommended_height, 2), unit="m"),
            Metric(label="Ancho Recomendado", value=round_half_up(recommended_width, 2), unit="m"),
            Metric(label="Peralte Efectivo", value=round_half_up(d, 2), unit="m"),
            Metric(label="Acero Requerido", value=round_half_up(required_as_cm2, 2), unit="cm²"),
            Metric(label="Acero Mínimo", value=round_half_up(min_as, 2), unit="cm²"),
            Metric(label="Acero Final", value=round_half_up(final_as, 2), unit="cm²"),
            Metric(label="Número de Varillas", value=bars_count),
            Metric(label="Espaciamiento", value=spacing, unit="cm"),
        ]

        notes = [
            f"f'c = {inputs.concrete_strength:g} MPa, fy = {inputs.steel_strength:g} MPa",
            f"Sección {width:g} x {height:g} m, peralte efectivo {d:.2f} m",
        ]
        if min_as >= required_as_cm2:
            notes.append("Gobierna el acero mínimo (cuantía 0.33%)")
        recommendations: list[Recommendation] = []

        if is_over_reinforced:
            notes.append(
                f"Viga sobre-reforzada: As = {final_as:.2f} cm² excede la cuantía "
                f"máxima de 2.5% ({max_as:.2f} cm²); requiere revisión"
            )
            recommendations.append(
                Recommendation(
                    kind="warning",
                    title="Sección insuficiente",
                    description="Aumentar la altura o el ancho de la viga para reducir la cuantía.",
                )
            )
        else:
            notes.append("Cuantía dentro de los límites 0.33% - 2.5%")
            recommendations.append(
                Recommendation(
                    kind="success",
                    title="Armado longitudinal",
                    description=f"{_bar_label(bars_count, inputs.bar_diameter)} con espaciamiento de {spacing} cm",
                )
            )

        logger.debug(
            "Beam design: Mu=%.2f kN·m, As=%.2f cm², %d bars", max_moment, final_as, bars_count
        )

        return CalculationResult(
            primary=Metric(
                label="Refuerzo Recomendado",
                value=_bar_label(bars_count, inputs.bar_diameter),
                unit="mm",
            ),
            secondary=secondary,
            compliance=Compliance(is_compliant=not is_over_reinforced, notes=notes),
            recommendations=recommendations,
            nec_reference=NEC_REFERENCE,
        )
