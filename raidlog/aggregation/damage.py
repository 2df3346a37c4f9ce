"""
Damage done, with hit, crit and tick breakdowns and avoidance counts.

Damage taken is the same table read by target.
"""

from typing import Any, Dict

from ..parser.events import Action, DAMAGE_ACTIONS, Event, MISS_ACTIONS
from .base import Accumulator, spell_key

MISS_TYPES = (
    "miss", "dodge", "parry", "block", "resist", "absorb",
    "immune", "evade", "deflect", "reflect",
)

AVOIDED_AMOUNT = {"absorb": "absorbed", "block": "blocked", "resist": "resisted"}

HIT_STATS = ("count", "total", "min", "max")


def hit_fields(*kinds: str):
    return tuple(f"{kind}_{stat}" for kind in kinds for stat in HIT_STATS)


def record_hit(entry: Dict[str, Any], kind: str, amount: int):
    """Update the count, total, min and max of one hit kind."""
    entry[f"{kind}_count"] += 1
    entry[f"{kind}_total"] += amount
    low = entry[f"{kind}_min"]
    entry[f"{kind}_min"] = amount if low is None else min(low, amount)
    high = entry[f"{kind}_max"]
    entry[f"{kind}_max"] = amount if high is None else max(high, amount)


def empty_hits(*kinds: str) -> Dict[str, Any]:
    entry: Dict[str, Any] = {}
    for kind in kinds:
        entry.update({
            f"{kind}_count": 0,
            f"{kind}_total": 0,
            f"{kind}_min": None,
            f"{kind}_max": None,
        })
    return entry


class DamageAccumulator(Accumulator):
    """
    Damage per actor, spell and target.

    ``count`` counts every attempt, landed or avoided; ``total`` sums landed
    damage. Partial resists, blocks and absorbs are counted separately from
    full avoidance and their amounts summed in ``resisted``, ``blocked`` and
    ``absorbed``.
    """

    name = "damage"
    KEY = ("actor", "spell", "target")
    VALUES = (
        ("count", "total")
        + hit_fields("hit", "crit", "tick")
        + ("crushing", "glancing", "partial_resist", "partial_block", "partial_absorb",
           "resisted", "blocked", "absorbed")
        + MISS_TYPES
    )

    def actions(self):
        handlers = {action: self.damage for action in DAMAGE_ACTIONS}
        handlers.update({action: self.missed for action in MISS_ACTIONS})
        return handlers

    def new_entry(self) -> Dict[str, Any]:
        entry = {"count": 0, "total": 0}
        entry.update(empty_hits("hit", "crit", "tick"))
        for name in self.VALUES:
            entry.setdefault(name, 0)
        return entry

    def _entry(self, event: Event) -> Dict[str, Any]:
        if event.action is Action.ENVIRONMENTAL_DAMAGE:
            spell = event.environmental_type or spell_key(event)
        else:
            spell = spell_key(event)
        return self.table.entry(event.actor, spell, event.target)

    def damage(self, event: Event):
        entry = self._entry(event)
        amount = event.amount or 0

        entry["count"] += 1
        entry["total"] += amount
        if event.is_periodic:
            record_hit(entry, "tick", amount)
        elif event.critical:
            record_hit(entry, "crit", amount)
        else:
            record_hit(entry, "hit", amount)

        if event.crushing:
            entry["crushing"] += 1
        if event.glancing:
            entry["glancing"] += 1
        for partial, field in (("partial_resist", "resisted"),
                               ("partial_block", "blocked"),
                               ("partial_absorb", "absorbed")):
            value = getattr(event, field)
            if value:
                entry[partial] += 1
                entry[field] += value

    def missed(self, event: Event):
        entry = self._entry(event)
        entry["count"] += 1

        miss_type = (event.miss_type or "miss").lower()
        if miss_type not in MISS_TYPES:
            miss_type = "miss"
        entry[miss_type] += 1

        # Fully absorbed or blocked attacks may carry the prevented amount
        if event.amount and miss_type in AVOIDED_AMOUNT:
            entry[AVOIDED_AMOUNT[miss_type]] += event.amount
