"""Formula executors — one per calculation category."""

from construcalc.executors.base import ExecutionOutcome, FormulaExecutor
from construcalc.executors.electrical import ElectricalDemandExecutor
from construcalc.executors.registry import ExecutorRegistry, default_registry, execute
from construcalc.executors.structural import BeamDesignExecutor

__all__ = [
    "BeamDesignExecutor",
    "ElectricalDemandExecutor",
    "ExecutionOutcome",
    "ExecutorRegistry",
    "FormulaExecutor",
    "default_registry",
    "execute",
]
