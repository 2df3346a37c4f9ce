"""
Interrupts per actor, interrupting spell, target and interrupted spell.
"""

from ..parser.events import Action, Event
from .base import Accumulator, extra_spell_key, spell_key


class InterruptAccumulator(Accumulator):
    name = "interrupt"
    KEY = ("actor", "spell", "target", "extraspell")
    VALUES = ("count",)

    def actions(self):
        return {Action.SPELL_INTERRUPT: self.interrupt}

    def new_entry(self):
        return {"count": 0}

    def interrupt(self, event: Event):
        key = (event.actor, spell_key(event), event.target, extra_spell_key(event))
        self.table.entry(*key)["count"] += 1
