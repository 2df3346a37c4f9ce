"""
Cross reference of actor and spell ids to display names.
"""

from ..parser.events import Action, Event
from .base import Accumulator, extra_spell_key, spell_key


class IndexAccumulator(Accumulator):
    """
    Display names keyed by ``("actor", id)`` or ``("spell", id)``.

    The first name seen for an id is kept.
    """

    name = "index"
    KEY = ("kind", "id")
    VALUES = ("name",)

    def actions(self):
        return {action: self.index for action in Action}

    def _name(self, kind: str, key, name):
        if key is None or not name:
            return
        entry = self.table.entry(kind, key)
        entry.setdefault("name", name)

    def index(self, event: Event):
        self._name("actor", event.actor, event.actor_name)
        self._name("actor", event.target, event.target_name)
        if event.spell_name:
            self._name("spell", spell_key(event), event.spell_name)
        if event.extra_spell_name:
            self._name("spell", extra_spell_key(event), event.extra_spell_name)
