"""
Power gained by each actor.
"""

from typing import Any, Dict

from ..parser.events import Action, Event
from .base import Accumulator, spell_key


class PowerAccumulator(Accumulator):
    """
    Power gains, stored from the recipient's point of view.

    The key is (recipient, spell, granter), so the table answers how much
    power an actor gained rather than how much it gave to others. The
    ``actor`` dimension therefore holds the energize event's target.
    """

    name = "power"
    KEY = ("actor", "spell", "target")
    VALUES = ("count", "type", "amount")

    def actions(self):
        return {
            Action.SPELL_ENERGIZE: self.energize,
            Action.SPELL_PERIODIC_ENERGIZE: self.energize,
        }

    def new_entry(self) -> Dict[str, Any]:
        return {"count": 0, "type": None, "amount": 0}

    def energize(self, event: Event):
        entry = self.table.entry(event.target, spell_key(event), event.actor)
        entry["type"] = event.power_type
        entry["amount"] += event.amount or 0
        entry["count"] += 1
