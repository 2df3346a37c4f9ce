"""
Data models produced by classification and segmentation.
"""

from .actor import Actor, ActorTable, ClassTag, Evidence
from .encounter import Encounter, EncounterTable, Outcome

__all__ = [
    "Actor",
    "ActorTable",
    "ClassTag",
    "Evidence",
    "Encounter",
    "EncounterTable",
    "Outcome",
]
