"""
Extra attack procs and the damage of the swings they granted.
"""

from typing import Any, Dict, Tuple

from ..parser.events import Action, Event
from .base import Accumulator, spell_key


class ExtraAttackAccumulator(Accumulator):
    """
    Extra attack procs per actor and proc spell.

    ``count`` is the number of procs, ``amount`` the extra swings granted
    and ``damage`` the damage dealt by the swings that followed each proc.
    """

    name = "extraattack"
    KEY = ("actor", "spell")
    VALUES = ("count", "amount", "damage")

    def __init__(self):
        self.pending: Dict[str, Tuple[Any, int]] = {}
        super().__init__()

    def actions(self):
        return {
            Action.SPELL_EXTRA_ATTACKS: self.proc,
            Action.SWING_DAMAGE: self.swing,
            Action.SWING_MISSED: self.swing,
        }

    def new_entry(self):
        return {"count": 0, "amount": 0, "damage": 0}

    def reset(self):
        self.pending = {}

    def proc(self, event: Event):
        if not event.actor:
            return
        spell = spell_key(event)
        swings = event.amount or 1
        entry = self.table.entry(event.actor, spell)
        entry["count"] += 1
        entry["amount"] += swings
        self.pending[event.actor] = (spell, swings)

    def swing(self, event: Event):
        pending = self.pending.get(event.actor)
        if pending is None:
            return
        spell, remaining = pending
        if event.action is Action.SWING_DAMAGE:
            self.table.entry(event.actor, spell)["damage"] += event.amount or 0
        if remaining > 1:
            self.pending[event.actor] = (spell, remaining - 1)
        else:
            del self.pending[event.actor]
