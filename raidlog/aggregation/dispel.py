"""
Dispels and spell steals, including resisted attempts.
"""

from ..parser.events import Action, Event
from .base import Accumulator, extra_spell_key, spell_key


class DispelAccumulator(Accumulator):
    """
    Dispels per actor, dispelling spell, target and removed aura.

    Successful dispels and steals count toward ``count``; failed dispels
    toward ``resisted``.
    """

    name = "dispel"
    KEY = ("actor", "spell", "target", "extraspell")
    VALUES = ("count", "resisted")

    def actions(self):
        return {
            Action.SPELL_DISPEL: self.dispel,
            Action.SPELL_STOLEN: self.dispel,
            Action.SPELL_DISPEL_FAILED: self.failed,
        }

    def new_entry(self):
        return {"count": 0, "resisted": 0}

    def _entry(self, event: Event):
        return self.table.entry(event.actor, spell_key(event), event.target, extra_spell_key(event))

    def dispel(self, event: Event):
        self._entry(event)["count"] += 1

    def failed(self, event: Event):
        self._entry(event)["resisted"] += 1
