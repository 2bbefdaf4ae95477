"""Built-in calculation templates shipped with the engine."""

from __future__ import annotations

from construcalc.models.parameter import Parameter, ParameterType
from construcalc.models.template import Category, Difficulty, Template

ELECTRICAL_DEMAND_ID = "015b5150-c52c-4a73-9001-68c02b96b7da"
BEAM_DESIGN_ID = "03b600f3-5188-42e0-a334-a29e38e13828"

_NUMBER = ParameterType.NUMBER
_SELECT = ParameterType.SELECT

ELECTRICAL_DEMAND = Template(
    id=ELECTRICAL_DEMAND_ID,
    name="Cálculo de Demanda Eléctrica Residencial (NEC-SB-IE)",
    description=(
        "Calcula la demanda eléctrica de una vivienda residencial según la "
        "Norma Ecuatoriana de la Construcción."
    ),
    version="1.0",
    category=Category.ELECTRICAL,
    nec_reference="NEC-SB-IE, Sección 1.1",
    target_professions=["electrical_engineer"],
    difficulty=Difficulty.INTERMEDIATE,
    tags=["demanda", "residencial", "eléctrico", "NEC"],
    usage_count=245,
    average_rating=4.5,
    verified=True,
    author="Sistema CONSTRU",
    parameters=[
        Parameter(
            name="areaVivienda", label="Área de la vivienda", type=_NUMBER, unit="m²",
            required=True, min=30, max=1000, placeholder="150",
            tooltip="Área total construida de la vivienda en metros cuadrados",
        ),
        Parameter(
            name="circuitosIluminacion", label="Número de circuitos de iluminación",
            type=_NUMBER, unit="circuitos", required=True, min=1, max=20, placeholder="4",
        ),
        Parameter(
            name="puntosIluminacion", label="Puntos de iluminación por circuito",
            type=_NUMBER, unit="puntos", required=True, min=1, max=10, placeholder="6",
        ),
        Parameter(
            name="circuitosTomacorrientes", label="Número de circuitos de tomacorrientes",
            type=_NUMBER, unit="circuitos", required=True, min=1, max=15, placeholder="3",
        ),
        Parameter(
            name="puntosTomacorriente", label="Puntos por circuito de tomacorrientes",
            type=_NUMBER, unit="puntos", required=True, min=1, max=8, placeholder="4",
        ),
        Parameter(
            name="cantidadCargasEspeciales", label="Cantidad de cargas especiales",
            type=_NUMBER, unit="cargas", required=True, min=0, max=10, placeholder="2",
        ),
        Parameter(
            name="sumaCargasEspeciales", label="Suma de potencia de cargas especiales",
            type=_NUMBER, unit="W", required=True, min=0, max=50000, placeholder="5000",
        ),
        Parameter(
            name="voltajeNominal", label="Voltaje nominal del sistema", type=_SELECT,
            unit="V", required=True, options=["120", "240", "208", "480"],
            default_value="240",
        ),
    ],
)

BEAM_DESIGN = Template(
    id=BEAM_DESIGN_ID,
    name="Diseño de Viga de Hormigón Armado",
    description=(
        "Calcula el diseño preliminar de una viga de hormigón armado según la "
        "norma ecuatoriana de construcción (NEC)."
    ),
    version="1.0",
    category=Category.STRUCTURAL,
    nec_reference="NEC-SE-HM, Capítulo 4.2",
    target_professions=["civil_engineer"],
    difficulty=Difficulty.ADVANCED,
    tags=["viga", "hormigón armado", "estructural", "NEC"],
    usage_count=189,
    average_rating=4.2,
    verified=True,
    author="Sistema CONSTRU",
    parameters=[
        Parameter(
            name="length", label="Longitud de la viga", type=_NUMBER, unit="m",
            required=True, min=1, max=20, placeholder="6.0",
            tooltip="Luz libre de la viga en metros",
        ),
        Parameter(
            name="load", label="Carga uniformemente distribuida", type=_NUMBER,
            unit="N/m", required=True, min=1000, max=100000, placeholder="15000",
        ),
        Parameter(
            name="concreteStrength", label="Resistencia del concreto f'c", type=_SELECT,
            unit="MPa", required=True, options=["21", "28", "35", "42"], default_value="21",
        ),
        Parameter(
            name="steelStrength", label="Resistencia del acero fy", type=_SELECT,
            unit="MPa", required=True, options=["420", "500", "520"], default_value="420",
        ),
        Parameter(
            name="beamHeight", label="Altura de la viga (opcional)", type=_NUMBER,
            unit="m", required=False, min=0.2, max=2, placeholder="0.60",
        ),
        Parameter(
            name="beamWidth", label="Ancho de la viga (opcional)", type=_NUMBER,
            unit="m", required=False, min=0.15, max=1, placeholder="0.30",
        ),
        Parameter(
            name="barDiameter", label="Diámetro de varilla", type=_SELECT, unit="mm",
            required=True, options=["8", "10", "12", "16", "20", "25"], default_value="16",
        ),
    ],
)

SEED_TEMPLATES: list[Template] = [ELECTRICAL_DEMAND, BEAM_DESIGN]
