"""Template/result stores — the engine's external collaborators."""

from construcalc.access.base import CalculationStore
from construcalc.access.http import HttpCalculationStore
from construcalc.access.memory import InMemoryCalculationStore

__all__ = ["CalculationStore", "HttpCalculationStore", "InMemoryCalculationStore"]
