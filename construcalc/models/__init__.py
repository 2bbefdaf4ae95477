"""Core data models — parameters, templates, and calculation results."""

from construcalc.models.parameter import Parameter, ParameterType
from construcalc.models.result import (
    CalculationResult,
    Compliance,
    Metric,
    Recommendation,
)
from construcalc.models.template import Category, Difficulty, Template

__all__ = [
    "CalculationResult",
    "Category",
    "Compliance",
    "Difficulty",
    "Metric",
    "Parameter",
    "ParameterType",
    "Recommendation",
    "Template",
]
