"""
Encounter models produced by the segmenter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Tuple


class Outcome(Enum):
    """How an encounter attempt ended."""

    KILL = "kill"
    WIPE = "wipe"


@dataclass(frozen=True)
class Encounter:
    """
    One bounded attempt at a boss.

    Indices are inclusive positions into the event sequence.
    """

    boss_name: str
    start_time: float
    end_time: float
    start_index: int
    end_index: int
    outcome: Outcome
    participant_ids: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.start_index > self.end_index or self.start_time > self.end_time:
            raise ValueError(
                f"Encounter {self.boss_name} ends before it starts "
                f"({self.start_index}..{self.end_index}, {self.start_time}..{self.end_time})"
            )

    @property
    def key(self) -> Tuple[str, float]:
        return (self.boss_name, self.start_time)

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.end_time - self.start_time

    @property
    def is_kill(self) -> bool:
        return self.outcome is Outcome.KILL

    def contains_index(self, index: int) -> bool:
        return self.start_index <= index <= self.end_index

    def get_duration_str(self) -> str:
        """Get human-readable duration string."""
        minutes = int(self.duration // 60)
        seconds = int(self.duration % 60)
        return f"{minutes}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "boss": self.boss_name,
            "start": self.start_time,
            "end": self.end_time,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "outcome": self.outcome.value,
            "duration": self.duration,
            "participants": sorted(self.participant_ids),
        }

    def __repr__(self) -> str:
        return (
            f"Encounter({self.boss_name}, {self.outcome.value}, "
            f"{self.get_duration_str()}, events {self.start_index}-{self.end_index})"
        )


EncounterTable = Dict[Tuple[str, float], Encounter]
