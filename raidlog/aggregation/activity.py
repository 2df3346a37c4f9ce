"""
Active combat time per actor and target.
"""

from typing import Any, Dict, Tuple

from ..parser.events import DAMAGE_ACTIONS, Event, MISS_ACTIONS
from .base import Accumulator

ACTIVITY_GAP = 5.0


class ActivityAccumulator(Accumulator):
    """
    Time each actor spent attacking each target.

    Consecutive damage events closer than ``gap`` seconds form one span; the
    ``time`` value is the summed length of all spans. ``start`` and ``end``
    are the first and last attack in the window.
    """

    name = "activity"
    KEY = ("actor", "target")
    VALUES = ("time", "start", "end")

    def __init__(self, gap: float = ACTIVITY_GAP):
        self.gap = gap
        self.spans: Dict[Tuple[Any, Any], float] = {}
        super().__init__()

    def actions(self):
        handlers = {action: self.attack for action in DAMAGE_ACTIONS}
        handlers.update({action: self.attack for action in MISS_ACTIONS})
        return handlers

    def new_entry(self):
        return {"time": 0.0, "start": None, "end": None}

    def reset(self):
        self.spans = {}

    def attack(self, event: Event):
        if not event.actor or not event.target:
            return

        key = (event.actor, event.target)
        entry = self.table.entry(*key)
        now = event.timestamp

        if entry["start"] is None:
            entry["start"] = now
            self.spans[key] = now
        elif now - entry["end"] > self.gap:
            entry["time"] += entry["end"] - self.spans[key]
            self.spans[key] = now
        entry["end"] = now

    def finalize(self):
        for key, span_start in self.spans.items():
            entry = self.table.entry(*key)
            entry["time"] += entry["end"] - span_start
        self.spans = {}
