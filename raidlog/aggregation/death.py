"""
Deaths per unit, with the events that led up to each death.
"""

from collections import deque
from typing import Any, Deque, Dict, Optional

from ..parser.events import (
    Action,
    AURA_APPLY_ACTIONS,
    AURA_REMOVE_ACTIONS,
    DAMAGE_ACTIONS,
    Event,
    HEAL_ACTIONS,
    MISS_ACTIONS,
)
from .base import Accumulator, spell_key

AUTOPSY_LENGTH = 10

AUTOPSY_ACTIONS = DAMAGE_ACTIONS | MISS_ACTIONS | HEAL_ACTIONS | AURA_APPLY_ACTIONS | AURA_REMOVE_ACTIONS


class DeathAccumulator(Accumulator):
    """
    Deaths per unit.

    Each record in ``deaths`` holds the time of death, the killer (the unit
    credited by a kill event, else the last unit to damage the victim) and an
    autopsy: the last ``autopsy_length`` events that targeted the victim.

    A kill event and a death event for the same unit at the same timestamp
    record one death. Legacy logs write only one of the two and key units by
    display name, so a kill never absorbs a later death of a namesake.
    """

    name = "death"
    KEY = ("actor",)
    VALUES = ("count", "deaths")

    def __init__(self, autopsy_length: int = AUTOPSY_LENGTH):
        self.autopsy_length = autopsy_length
        self.recent: Dict[str, Deque[Dict[str, Any]]] = {}
        self.last_damager: Dict[str, Optional[str]] = {}
        self.credited: Dict[str, float] = {}
        super().__init__()

    def actions(self):
        handlers = {action: self.observe for action in AUTOPSY_ACTIONS}
        handlers.update({
            Action.PARTY_KILL: self.killed,
            Action.UNIT_DIED: self.died,
            Action.UNIT_DESTROYED: self.died,
            Action.SPELL_INSTAKILL: self.killed,
        })
        return handlers

    def new_entry(self):
        return {"count": 0, "deaths": []}

    def reset(self):
        self.recent = {}
        self.last_damager = {}
        self.credited = {}

    def observe(self, event: Event):
        if not event.target:
            return
        history = self.recent.get(event.target)
        if history is None:
            history = deque(maxlen=self.autopsy_length)
            self.recent[event.target] = history
        history.append({
            "time": event.timestamp,
            "action": event.action.value,
            "actor": event.actor,
            "spell": spell_key(event),
            "amount": event.amount,
        })
        if event.action in DAMAGE_ACTIONS and event.actor:
            self.last_damager[event.target] = event.actor

    def _record(self, victim: str, timestamp: float, killer: Optional[str]):
        entry = self.table.entry(victim)
        entry["count"] += 1
        entry["deaths"].append({
            "time": timestamp,
            "killer": killer,
            "autopsy": list(self.recent.pop(victim, ())),
        })
        self.last_damager.pop(victim, None)

    def killed(self, event: Event):
        if not event.target:
            return
        self._record(event.target, event.timestamp, event.actor or self.last_damager.get(event.target))
        self.credited[event.target] = event.timestamp

    def died(self, event: Event):
        if not event.target:
            return
        if self.credited.pop(event.target, None) == event.timestamp:
            return
        self._record(event.target, event.timestamp, self.last_damager.get(event.target))
