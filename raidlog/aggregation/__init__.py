"""
Aggregation framework building per-encounter statistic tables.
"""

from .base import Accumulator, MELEE, spell_key
from .registry import ACCUMULATOR_KINDS, ACCUMULATORS_BY_NAME, create_accumulators
from .table import StatTable

__all__ = [
    "Accumulator",
    "ACCUMULATOR_KINDS",
    "ACCUMULATORS_BY_NAME",
    "MELEE",
    "StatTable",
    "create_accumulators",
    "spell_key",
]
