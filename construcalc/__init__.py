"""construcalc — template-driven engineering calculations.

Validate inputs against a calculation template, run the category
formula executor, and compare results side by side.
"""

from construcalc.comparison import ComparisonTable, compare
from construcalc.engine import CalculationEngine, RunOutcome
from construcalc.errors import AccessError, CalcError, ComputationError, ValidationError
from construcalc.executors import ExecutionOutcome, ExecutorRegistry, execute
from construcalc.models import CalculationResult, Category, Parameter, ParameterType, Template
from construcalc.templates import TemplateLibrary
from construcalc.validation import ValidationOutcome, validate

__version__ = "0.1.0"

__all__ = [
    "AccessError",
    "CalcError",
    "CalculationEngine",
    "CalculationResult",
    "Category",
    "ComparisonTable",
    "ComputationError",
    "ExecutionOutcome",
    "ExecutorRegistry",
    "Parameter",
    "ParameterType",
    "RunOutcome",
    "Template",
    "TemplateLibrary",
    "ValidationError",
    "ValidationOutcome",
    "compare",
    "execute",
    "validate",
]
