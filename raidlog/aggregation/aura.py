"""
Buff and debuff uptime per aura holder and spell.
"""

from typing import Any, Dict, Optional, Tuple

from ..parser.events import Action, AURA_APPLY_ACTIONS, AURA_REMOVE_ACTIONS, Event
from .base import Accumulator, spell_key


class AuraAccumulator(Accumulator):
    """
    Aura gains, fades and uptime.

    The ``actor`` dimension is the unit holding the aura (the event target).
    An aura that fades without a gain inside the window is assumed to have
    been up since the window started; auras still up at the end close at the
    last event of the window. ``spans`` lists the ``[start, end]`` intervals.
    """

    name = "aura"
    KEY = ("actor", "spell")
    VALUES = ("type", "gains", "fades", "time", "spans")

    def __init__(self):
        self.open: Dict[Tuple[Any, Any], float] = {}
        self.window_start: Optional[float] = None
        self.window_end: Optional[float] = None
        super().__init__()

    def actions(self):
        handlers = {action: self.gain for action in AURA_APPLY_ACTIONS}
        handlers.update({action: self.fade for action in AURA_REMOVE_ACTIONS})
        return handlers

    def new_entry(self):
        return {"type": None, "gains": 0, "fades": 0, "time": 0.0, "spans": []}

    def reset(self):
        self.open = {}
        self.window_start = None
        self.window_end = None

    def process(self, event: Event):
        if self.window_start is None:
            self.window_start = event.timestamp
        self.window_end = event.timestamp
        super().process(event)

    def _entry(self, event: Event):
        key = (event.target, spell_key(event))
        entry = self.table.entry(*key)
        if event.aura_type:
            entry["type"] = event.aura_type
        return key, entry

    def _close(self, key, entry, end: float):
        start = self.open.pop(key)
        entry["spans"].append([start, end])
        entry["time"] += end - start

    def gain(self, event: Event):
        if not event.target:
            return
        key, entry = self._entry(event)
        if event.action is Action.SPELL_AURA_APPLIED:
            entry["gains"] += 1
            self.open.setdefault(key, event.timestamp)
        elif key not in self.open:
            # Stack or refresh of an aura applied before the window
            self.open[key] = self.window_start

    def fade(self, event: Event):
        if not event.target:
            return
        key, entry = self._entry(event)
        if event.action is not Action.SPELL_AURA_REMOVED:
            if key not in self.open:
                self.open[key] = self.window_start
            return
        entry["fades"] += 1
        self.open.setdefault(key, self.window_start)
        self._close(key, entry, event.timestamp)

    def finalize(self):
        for key in list(self.open):
            self._close(key, self.table.entry(*key), self.window_end)
