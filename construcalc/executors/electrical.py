"""Residential electrical demand (NEC-SB-IE).

Demand factors depend on dwelling size; special loads are derated by
count and total power.  All powers are in watts.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, ConfigDict, Field

from construcalc.executors.base import FormulaExecutor, round_half_up
from construcalc.models.result import CalculationResult, Compliance, Metric, Recommendation
from construcalc.models.template import Category

logger = logging.getLogger(__name__)

NEC_REFERENCE = "NEC-SB-IE, Sección 1.1"

# Installed power per point
WATTS_PER_LIGHTING_POINT = 100
WATTS_PER_OUTLET_POINT = 200

# (upper area bound in m², dwelling type, FD lighting, FD outlets)
DWELLING_CLASSES: list[tuple[float, str, float, float]] = [
    (80.0, "Pequeña", 0.70, 0.50),
    (200.0, "Mediana", 0.70, 0.50),
    (300.0, "Mediana grande", 0.55, 0.40),
    (math.inf, "Grande", 0.55, 0.40),
]

SPECIAL_LOADS_SUM_THRESHOLD = 10000.0

# Standard breaker ratings in amperes
BREAKER_SIZES = [15, 20, 30, 40, 50, 60, 70, 80, 100, 125, 150, 175, 200]
BREAKER_SAFETY_FACTOR = 1.25
PROTECTION_FACTOR = 1.1
FEEDER_THRESHOLD_A = 40.0


class ElectricalDemandInputs(BaseModel):
    """Typed inputs for the residential demand calculation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    area_vivienda: float = Field(alias="areaVivienda")
    circuitos_iluminacion: float = Field(alias="circuitosIluminacion")
    puntos_iluminacion: float = Field(alias="puntosIluminacion")
    circuitos_tomacorrientes: float = Field(alias="circuitosTomacorrientes")
    puntos_tomacorriente: float = Field(alias="puntosTomacorriente")
    cantidad_cargas_especiales: float = Field(default=0.0, alias="cantidadCargasEspeciales")
    suma_cargas_especiales: float = Field(default=0.0, alias="sumaCargasEspeciales")
    voltaje_nominal: float = Field(alias="voltajeNominal")


def classify_dwelling(area: float) -> tuple[str, float, float]:
    """Return ``(dwelling type, FD lighting, FD outlets)`` for *area* in m²."""
    for upper, kind, fd_lighting, fd_outlets in DWELLING_CLASSES:
        if area < upper:
            return kind, fd_lighting, fd_outlets
    # Unreachable: the last bound is infinite
    raise AssertionError(f"No dwelling class for area {area}")


def special_loads_factor(count: float, total_watts: float) -> float:
    """Demand factor for special loads.

    The count check is evaluated first; the power threshold only applies
    when there is more than one special load.
    """
    if count <= 1:
        return 1.0
    if total_watts < SPECIAL_LOADS_SUM_THRESHOLD:
        return 0.8
    return 0.75


def breaker_bucket(current: float) -> int | None:
    """Smallest standard breaker covering ``current * 1.25``, or *None*."""
    required = current * BREAKER_SAFETY_FACTOR
    for size in BREAKER_SIZES:
        if size >= required:
            return size
    return None


class ElectricalDemandExecutor(FormulaExecutor):
    """Residential electrical demand per the NEC demand-factor table."""

    @property
    def category(self) -> Category:
        return Category.ELECTRICAL

    @property
    def description(self) -> str:
        return "Demanda eléctrica residencial con factores de demanda NEC-SB-IE."

    @property
    def input_model(self) -> type[BaseModel]:
        return ElectricalDemandInputs

    def compute(self, inputs: ElectricalDemandInputs) -> CalculationResult:
        if inputs.voltaje_nominal <= 0:
            raise self.fail(
                f"Voltaje nominal debe ser positivo (recibido {inputs.voltaje_nominal:g} V)"
            )

        tipo, fd_iluminacion, fd_tomas = classify_dwelling(inputs.area_vivienda)

        potencia_iluminacion = (
            inputs.circuitos_iluminacion * inputs.puntos_iluminacion * WATTS_PER_LIGHTING_POINT
        )
        demanda_iluminacion = potencia_iluminacion * fd_iluminacion

        potencia_tomas = (
            inputs.circuitos_tomacorrientes * inputs.puntos_tomacorriente * WATTS_PER_OUTLET_POINT
        )
        demanda_tomas = potencia_tomas * fd_tomas

        fd_especiales = special_loads_factor(
            inputs.cantidad_cargas_especiales, inputs.suma_cargas_especiales
        )
        demanda_especiales = inputs.suma_cargas_especiales * fd_especiales

        demanda_total = demanda_iluminacion + demanda_tomas + demanda_especiales
        if not math.isfinite(demanda_total):
            raise self.fail("La demanda total excede el rango numérico representable")
        corriente_exacta = demanda_total / inputs.voltaje_nominal
        if not math.isfinite(corriente_exacta):
            raise self.fail("La corriente excede el rango numérico representable")
        corriente_total = round_half_up(corriente_exacta, 2)

        breaker = breaker_bucket(corriente_exacta)

        secondary = [
            Metric(label="Tipo de Vivienda", value=tipo),
            Metric(label="Potencia Iluminación", value=_watts(potencia_iluminacion), unit="W"),
            Metric(label="FD Iluminación", value=fd_iluminacion),
            Metric(
                label="Demanda Iluminación",
                value=_watts(demanda_iluminacion),
                unit="W",
                factor=f"(FD: {fd_iluminacion:.2f})",
            ),
            Metric(label="Potencia Tomacorrientes", value=_watts(potencia_tomas), unit="W"),
            Metric(label="FD Tomacorrientes", value=fd_tomas),
            Metric(
                label="Demanda Tomacorrientes",
                value=_watts(demanda_tomas),
                unit="W",
                factor=f"(FD: {fd_tomas:.2f})",
            ),
            Metric(label="FD Cargas Especiales", value=fd_especiales),
            Metric(
                label="Demanda Cargas Especiales",
                value=_watts(demanda_especiales),
                unit="W",
                factor=f"(FD: {fd_especiales:.2f})",
            ),
            Metric(label="Corriente Total", value=corriente_total, unit="A"),
            Metric(
                label="Breaker Recomendado",
                value=breaker if breaker is not None else "Requiere estudio",
                unit="A" if breaker is not None else None,
            ),
        ]

        recommendations = [
            Recommendation(
                kind="success",
                title="Tablero principal",
                description=f"Recomendado: {math.ceil(corriente_exacta * BREAKER_SAFETY_FACTOR)}A",
            ),
            Recommendation(
                kind="info",
                title="Conductor alimentador",
                description="10 AWG Cu" if corriente_exacta > FEEDER_THRESHOLD_A else "12 AWG Cu",
            ),
            Recommendation(
                kind="info",
                title="Protección",
                description=f"Breaker principal: {math.ceil(corriente_exacta * PROTECTION_FACTOR)}A",
            ),
        ]

        notes = [
            f"Vivienda {tipo} ({inputs.area_vivienda:g} m²): FD iluminación "
            f"{fd_iluminacion:.2f}, FD tomacorrientes {fd_tomas:.2f}",
            f"Factor de cargas especiales {fd_especiales:.2f} aplicado a "
            f"{inputs.cantidad_cargas_especiales:g} carga(s)",
        ]
        if breaker is None:
            is_compliant = False
            notes.append(
                f"La capacidad requerida ({corriente_exacta * BREAKER_SAFETY_FACTOR:.1f} A) "
                f"excede el servicio residencial de {BREAKER_SIZES[-1]} A; "
                "se requiere estudio de carga"
            )
            recommendations.append(
                Recommendation(
                    kind="error",
                    title="Servicio eléctrico",
                    description="Demanda fuera de la tabla residencial, solicitar estudio de carga.",
                )
            )
        else:
            is_compliant = True
            notes.insert(0, "Cálculo conforme a normativa ecuatoriana NEC-SB-IE")

        logger.debug(
            "Electrical demand: %s W, %s A (%s)", demanda_total, corriente_total, tipo
        )

        return CalculationResult(
            primary=Metric(label="Demanda Total", value=_watts(demanda_total), unit="W"),
            secondary=secondary,
            compliance=Compliance(is_compliant=is_compliant, notes=notes),
            recommendations=recommendations,
            nec_reference=NEC_REFERENCE,
        )


def _watts(value: float) -> int:
    return int(round_half_up(value))
