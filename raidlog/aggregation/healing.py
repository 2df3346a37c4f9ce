"""
Healing done per actor, spell and target.
"""

from typing import Any, Dict

from ..parser.events import Event, HEAL_ACTIONS
from .base import Accumulator, spell_key
from .damage import empty_hits, hit_fields, record_hit


class HealingAccumulator(Accumulator):
    """
    Healing per actor, spell and target.

    ``total`` is the raw amount healed; ``effective`` excludes overhealing.
    Layouts without an overheal field report every heal as fully effective.
    """

    name = "healing"
    KEY = ("actor", "spell", "target")
    VALUES = ("count", "total", "effective", "overheal") + hit_fields("hit", "crit", "tick")

    def actions(self):
        return {action: self.heal for action in HEAL_ACTIONS}

    def new_entry(self) -> Dict[str, Any]:
        entry = {"count": 0, "total": 0, "effective": 0, "overheal": 0}
        entry.update(empty_hits("hit", "crit", "tick"))
        return entry

    def heal(self, event: Event):
        entry = self.table.entry(event.actor, spell_key(event), event.target)
        amount = event.amount or 0
        overheal = min(event.overheal or 0, amount)

        entry["count"] += 1
        entry["total"] += amount
        entry["effective"] += amount - overheal
        entry["overheal"] += overheal

        if event.is_periodic:
            record_hit(entry, "tick", amount)
        elif event.critical:
            record_hit(entry, "crit", amount)
        else:
            record_hit(entry, "hit", amount)
