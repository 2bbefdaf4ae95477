"""Side-by-side comparison of calculation results."""

from construcalc.comparison.comparator import compare, extract_numeric, rank_values
from construcalc.comparison.table import ComparisonCell, ComparisonRow, ComparisonTable

__all__ = [
    "ComparisonCell",
    "ComparisonRow",
    "ComparisonTable",
    "compare",
    "extract_numeric",
    "rank_values",
]
