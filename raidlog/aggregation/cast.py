"""
Successful casts per actor, spell and target.
"""

from ..parser.events import Action, Event
from .base import Accumulator, spell_key


class CastAccumulator(Accumulator):
    name = "cast"
    KEY = ("actor", "spell", "target")
    VALUES = ("count",)

    def actions(self):
        return {Action.SPELL_CAST_SUCCESS: self.cast}

    def new_entry(self):
        return {"count": 0}

    def cast(self, event: Event):
        self.table.entry(event.actor, spell_key(event), event.target)["count"] += 1
