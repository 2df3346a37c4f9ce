"""
Time span over which each actor was acting.
"""

from ..parser.events import Action, Event
from .base import Accumulator


class PresenceAccumulator(Accumulator):
    name = "presence"
    KEY = ("actor",)
    VALUES = ("start", "end", "total")

    def actions(self):
        return {action: self.seen for action in Action}

    def seen(self, event: Event):
        if not event.actor:
            return
        entry = self.table.entry(event.actor)
        if "start" not in entry:
            entry["start"] = event.timestamp
        entry["end"] = event.timestamp
        entry["total"] = entry["end"] - entry["start"]
