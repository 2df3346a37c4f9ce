"""
Event model shared by the decoder, classifier, segmenter and accumulators.
"""

from dataclasses import dataclass, fields
from enum import Enum, IntFlag
from typing import Any, Dict, Optional


class Action(Enum):
    """Enumeration of supported action kinds."""

    # Damage
    SWING_DAMAGE = "SWING_DAMAGE"
    SWING_MISSED = "SWING_MISSED"
    RANGE_DAMAGE = "RANGE_DAMAGE"
    RANGE_MISSED = "RANGE_MISSED"
    SPELL_DAMAGE = "SPELL_DAMAGE"
    SPELL_MISSED = "SPELL_MISSED"
    SPELL_PERIODIC_DAMAGE = "SPELL_PERIODIC_DAMAGE"
    SPELL_PERIODIC_MISSED = "SPELL_PERIODIC_MISSED"
    DAMAGE_SHIELD = "DAMAGE_SHIELD"
    DAMAGE_SHIELD_MISSED = "DAMAGE_SHIELD_MISSED"
    DAMAGE_SPLIT = "DAMAGE_SPLIT"
    ENVIRONMENTAL_DAMAGE = "ENVIRONMENTAL_DAMAGE"

    # Healing
    SPELL_HEAL = "SPELL_HEAL"
    SPELL_PERIODIC_HEAL = "SPELL_PERIODIC_HEAL"

    # Power
    SPELL_ENERGIZE = "SPELL_ENERGIZE"
    SPELL_PERIODIC_ENERGIZE = "SPELL_PERIODIC_ENERGIZE"
    SPELL_DRAIN = "SPELL_DRAIN"
    SPELL_PERIODIC_DRAIN = "SPELL_PERIODIC_DRAIN"
    SPELL_LEECH = "SPELL_LEECH"
    SPELL_PERIODIC_LEECH = "SPELL_PERIODIC_LEECH"

    # Interrupts, dispels, procs
    SPELL_INTERRUPT = "SPELL_INTERRUPT"
    SPELL_DISPEL = "SPELL_DISPEL"
    SPELL_DISPEL_FAILED = "SPELL_DISPEL_FAILED"
    SPELL_STOLEN = "SPELL_STOLEN"
    SPELL_EXTRA_ATTACKS = "SPELL_EXTRA_ATTACKS"

    # Auras
    SPELL_AURA_APPLIED = "SPELL_AURA_APPLIED"
    SPELL_AURA_REMOVED = "SPELL_AURA_REMOVED"
    SPELL_AURA_APPLIED_DOSE = "SPELL_AURA_APPLIED_DOSE"
    SPELL_AURA_REMOVED_DOSE = "SPELL_AURA_REMOVED_DOSE"
    SPELL_AURA_REFRESH = "SPELL_AURA_REFRESH"

    # Casts
    SPELL_CAST_START = "SPELL_CAST_START"
    SPELL_CAST_SUCCESS = "SPELL_CAST_SUCCESS"
    SPELL_CAST_FAILED = "SPELL_CAST_FAILED"

    # Special
    SPELL_INSTAKILL = "SPELL_INSTAKILL"
    SPELL_SUMMON = "SPELL_SUMMON"
    SPELL_CREATE = "SPELL_CREATE"
    SPELL_RESURRECT = "SPELL_RESURRECT"
    UNIT_DIED = "UNIT_DIED"
    UNIT_DESTROYED = "UNIT_DESTROYED"
    PARTY_KILL = "PARTY_KILL"

    @classmethod
    def lookup(cls, name: str) -> Optional["Action"]:
        """Return the action for a log keyword, or None if unsupported."""
        return _ACTIONS_BY_NAME.get(name)


_ACTIONS_BY_NAME: Dict[str, Action] = {action.value: action for action in Action}


# Action groups used by several consumers
DAMAGE_ACTIONS = frozenset({
    Action.SWING_DAMAGE,
    Action.RANGE_DAMAGE,
    Action.SPELL_DAMAGE,
    Action.SPELL_PERIODIC_DAMAGE,
    Action.DAMAGE_SHIELD,
    Action.DAMAGE_SPLIT,
    Action.ENVIRONMENTAL_DAMAGE,
})

MISS_ACTIONS = frozenset({
    Action.SWING_MISSED,
    Action.RANGE_MISSED,
    Action.SPELL_MISSED,
    Action.SPELL_PERIODIC_MISSED,
    Action.DAMAGE_SHIELD_MISSED,
})

HEAL_ACTIONS = frozenset({Action.SPELL_HEAL, Action.SPELL_PERIODIC_HEAL})

ENERGIZE_ACTIONS = frozenset({Action.SPELL_ENERGIZE, Action.SPELL_PERIODIC_ENERGIZE})

AURA_APPLY_ACTIONS = frozenset({
    Action.SPELL_AURA_APPLIED,
    Action.SPELL_AURA_APPLIED_DOSE,
    Action.SPELL_AURA_REFRESH,
})

AURA_REMOVE_ACTIONS = frozenset({Action.SPELL_AURA_REMOVED, Action.SPELL_AURA_REMOVED_DOSE})

PERIODIC_ACTIONS = frozenset({
    Action.SPELL_PERIODIC_DAMAGE,
    Action.SPELL_PERIODIC_MISSED,
    Action.SPELL_PERIODIC_HEAL,
    Action.SPELL_PERIODIC_ENERGIZE,
    Action.SPELL_PERIODIC_DRAIN,
    Action.SPELL_PERIODIC_LEECH,
})


class UnitFlags(IntFlag):
    """Unit flag bits carried by the source and destination of an event."""

    NONE = 0

    AFFILIATION_MINE = 0x00000001
    AFFILIATION_PARTY = 0x00000002
    AFFILIATION_RAID = 0x00000004
    AFFILIATION_OUTSIDER = 0x00000008

    REACTION_FRIENDLY = 0x00000010
    REACTION_NEUTRAL = 0x00000020
    REACTION_HOSTILE = 0x00000040

    CONTROL_PLAYER = 0x00000100
    CONTROL_NPC = 0x00000200

    TYPE_PLAYER = 0x00000400
    TYPE_NPC = 0x00000800
    TYPE_PET = 0x00001000
    TYPE_GUARDIAN = 0x00002000
    TYPE_OBJECT = 0x00004000


FRIENDLY_PLAYER = UnitFlags.REACTION_FRIENDLY | UnitFlags.TYPE_PLAYER
HOSTILE_NPC = UnitFlags.REACTION_HOSTILE | UnitFlags.TYPE_NPC

# Spell prefix and suffix fields in declaration order
SPELL_FIELDS = ("spell_id", "spell_name", "spell_school")
EXTRA_SPELL_FIELDS = ("extra_spell_id", "extra_spell_name", "extra_spell_school")
SUFFIX_FIELDS = (
    "amount",
    "extra_amount",
    "overkill",
    "overheal",
    "school",
    "resisted",
    "blocked",
    "absorbed",
    "critical",
    "glancing",
    "crushing",
    "miss_type",
    "power_type",
    "aura_type",
    "environmental_type",
    "fail_type",
)


@dataclass(frozen=True)
class Event:
    """A single decoded log action. Immutable once decoded."""

    timestamp: float
    action: Action

    actor: Optional[str] = None
    actor_name: Optional[str] = None
    actor_flags: int = 0
    target: Optional[str] = None
    target_name: Optional[str] = None
    target_flags: int = 0

    # Spell prefix
    spell_id: Optional[int] = None
    spell_name: Optional[str] = None
    spell_school: Optional[int] = None

    # Interrupted / dispelled spell
    extra_spell_id: Optional[int] = None
    extra_spell_name: Optional[str] = None
    extra_spell_school: Optional[int] = None

    # Suffix values, populated depending on action
    amount: Optional[int] = None
    extra_amount: Optional[int] = None
    overkill: Optional[int] = None
    overheal: Optional[int] = None
    school: Optional[int] = None
    resisted: Optional[int] = None
    blocked: Optional[int] = None
    absorbed: Optional[int] = None
    critical: Optional[bool] = None
    glancing: Optional[bool] = None
    crushing: Optional[bool] = None
    miss_type: Optional[str] = None
    power_type: Optional[int] = None
    aura_type: Optional[str] = None
    environmental_type: Optional[str] = None
    fail_type: Optional[str] = None

    @property
    def is_periodic(self) -> bool:
        return self.action in PERIODIC_ACTIONS

    def is_player_actor(self) -> bool:
        """Check if the actor is a friendly player."""
        return self.actor_flags & FRIENDLY_PLAYER == FRIENDLY_PLAYER

    def is_player_target(self) -> bool:
        """Check if the target is a friendly player."""
        return self.target_flags & FRIENDLY_PLAYER == FRIENDLY_PLAYER

    def is_pet_actor(self) -> bool:
        """Check if the actor is a pet or guardian."""
        return bool(self.actor_flags & (UnitFlags.TYPE_PET | UnitFlags.TYPE_GUARDIAN))

    def is_pet_target(self) -> bool:
        """Check if the target is a pet or guardian."""
        return bool(self.target_flags & (UnitFlags.TYPE_PET | UnitFlags.TYPE_GUARDIAN))

    def is_friendly_actor(self) -> bool:
        return bool(self.actor_flags & UnitFlags.REACTION_FRIENDLY)

    def is_hostile_npc_actor(self) -> bool:
        return self.actor_flags & HOSTILE_NPC == HOSTILE_NPC

    def is_hostile_npc_target(self) -> bool:
        return self.target_flags & HOSTILE_NPC == HOSTILE_NPC

    def populated(self) -> Dict[str, Any]:
        """
        Get the populated fields of this event.

        Returns:
            Dictionary of field name to value, skipping fields that are unset
        """
        values = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name in ("actor_flags", "target_flags") and not value:
                continue
            values[f.name] = value
        return values
