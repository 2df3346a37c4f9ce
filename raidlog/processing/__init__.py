"""
Processing module running combat logs through the full pipeline.
"""

from .pipeline import (
    CombatLogPipeline,
    EncounterResult,
    OutputConsumer,
    ProcessingContext,
    process_log,
)

__all__ = [
    "CombatLogPipeline",
    "EncounterResult",
    "OutputConsumer",
    "ProcessingContext",
    "process_log",
]
