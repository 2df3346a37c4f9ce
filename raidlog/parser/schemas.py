"""
Event schemas describing the field layout of each action kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from ..errors import ConfigurationError
from .events import Action, EXTRA_SPELL_FIELDS, SPELL_FIELDS


class LogLayout(Enum):
    """Historical textual layouts understood by the decoder."""

    LEGACY_TEXT = 1  # English sentences, first person pronouns
    CSV = 2  # Comma separated, no overkill/overheal
    CSV_EXTENDED = 3  # Comma separated with overkill/overheal (canonical)

    @classmethod
    def from_version(cls, version) -> "LogLayout":
        if isinstance(version, LogLayout):
            return version
        try:
            return cls(int(version))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Unsupported log version: {version!r}") from None


@dataclass(frozen=True)
class ActionSchema:
    """Prefix and suffix field names for one action kind."""

    prefix: Tuple[str, ...] = ()
    suffix: Tuple[str, ...] = ()
    required: Optional[int] = None  # suffix fields that must be present; None means all

    @property
    def min_suffix(self) -> int:
        return len(self.suffix) if self.required is None else self.required

    @property
    def field_names(self) -> Tuple[str, ...]:
        return self.prefix + self.suffix


class EventSchema:
    """
    Defines the expected parameter structure for each action in each layout.
    """

    BASE_PARAMS = ("actor", "actor_name", "actor_flags", "target", "target_name", "target_flags")

    INT_FIELDS = frozenset({
        "actor_flags", "target_flags",
        "spell_id", "spell_school", "extra_spell_id", "extra_spell_school",
        "amount", "extra_amount", "overkill", "overheal", "school",
        "resisted", "blocked", "absorbed", "power_type",
    })
    BOOL_FIELDS = frozenset({"critical", "glancing", "crushing"})
    HEX_FIELDS = frozenset({"actor_flags", "target_flags", "spell_school", "extra_spell_school"})
    QUOTED_FIELDS = frozenset({
        "actor_name", "target_name", "spell_name", "extra_spell_name", "fail_type",
    })

    _DAMAGE = ("amount", "school", "resisted", "blocked", "absorbed",
               "critical", "glancing", "crushing")
    _DAMAGE_EXTENDED = ("amount", "overkill", "school", "resisted", "blocked", "absorbed",
                        "critical", "glancing", "crushing")
    _HEAL = ("amount", "critical")
    _HEAL_EXTENDED = ("amount", "overheal", "absorbed", "critical")

    # Suffixes shared by both comma separated layouts
    _COMMON_SUFFIX: Dict[Action, Tuple[str, ...]] = {
        Action.SPELL_ENERGIZE: ("amount", "power_type"),
        Action.SPELL_PERIODIC_ENERGIZE: ("amount", "power_type"),
        Action.SPELL_DRAIN: ("amount", "power_type", "extra_amount"),
        Action.SPELL_PERIODIC_DRAIN: ("amount", "power_type", "extra_amount"),
        Action.SPELL_LEECH: ("amount", "power_type", "extra_amount"),
        Action.SPELL_PERIODIC_LEECH: ("amount", "power_type", "extra_amount"),
        Action.SPELL_INTERRUPT: EXTRA_SPELL_FIELDS,
        Action.SPELL_DISPEL: EXTRA_SPELL_FIELDS + ("aura_type",),
        Action.SPELL_STOLEN: EXTRA_SPELL_FIELDS + ("aura_type",),
        Action.SPELL_DISPEL_FAILED: EXTRA_SPELL_FIELDS,
        Action.SPELL_EXTRA_ATTACKS: ("amount",),
        Action.SPELL_AURA_APPLIED: ("aura_type",),
        Action.SPELL_AURA_REMOVED: ("aura_type",),
        Action.SPELL_AURA_REFRESH: ("aura_type",),
        Action.SPELL_AURA_APPLIED_DOSE: ("aura_type", "amount"),
        Action.SPELL_AURA_REMOVED_DOSE: ("aura_type", "amount"),
        Action.SPELL_CAST_START: (),
        Action.SPELL_CAST_SUCCESS: (),
        Action.SPELL_CAST_FAILED: ("fail_type",),
        Action.SPELL_INSTAKILL: (),
        Action.SPELL_SUMMON: (),
        Action.SPELL_CREATE: (),
        Action.SPELL_RESURRECT: (),
        Action.UNIT_DIED: (),
        Action.UNIT_DESTROYED: (),
        Action.PARTY_KILL: (),
    }

    # Older logs used different keywords for dispels and steals
    LAYOUT_ALIASES: Dict[LogLayout, Dict[str, Action]] = {
        LogLayout.CSV: {
            "SPELL_AURA_DISPELLED": Action.SPELL_DISPEL,
            "SPELL_AURA_STOLEN": Action.SPELL_STOLEN,
        },
        LogLayout.CSV_EXTENDED: {},
    }

    _cache: Dict[LogLayout, Dict[Action, ActionSchema]] = {}

    @staticmethod
    def prefix_for(action: Action) -> Tuple[str, ...]:
        """Get the prefix fields for an action."""
        name = action.value
        if name.startswith("SWING_") or action in (
            Action.UNIT_DIED, Action.UNIT_DESTROYED, Action.PARTY_KILL
        ):
            return ()
        if name.startswith("ENVIRONMENTAL_"):
            return ("environmental_type",)
        return SPELL_FIELDS

    @classmethod
    def _suffix_for(cls, action: Action, layout: LogLayout) -> ActionSchema:
        prefix = cls.prefix_for(action)
        name = action.value
        extended = layout is LogLayout.CSV_EXTENDED

        if name.endswith("_DAMAGE") or action in (Action.DAMAGE_SHIELD, Action.DAMAGE_SPLIT):
            return ActionSchema(prefix, cls._DAMAGE_EXTENDED if extended else cls._DAMAGE)
        if name.endswith("_MISSED"):
            if extended:
                return ActionSchema(prefix, ("miss_type", "amount"), required=1)
            return ActionSchema(prefix, ("miss_type",))
        if action in (Action.SPELL_HEAL, Action.SPELL_PERIODIC_HEAL):
            return ActionSchema(prefix, cls._HEAL_EXTENDED if extended else cls._HEAL)
        return ActionSchema(prefix, cls._COMMON_SUFFIX[action])

    @classmethod
    def for_layout(cls, layout: LogLayout) -> Dict[Action, ActionSchema]:
        """
        Get the schema table for a comma separated layout.

        Args:
            layout: CSV or CSV_EXTENDED

        Returns:
            Dictionary of action to ActionSchema
        """
        if layout is LogLayout.LEGACY_TEXT:
            raise ValueError("Legacy text logs are not field based")
        if layout not in cls._cache:
            cls._cache[layout] = {action: cls._suffix_for(action, layout) for action in Action}
        return cls._cache[layout]

    @classmethod
    def lookup_action(cls, name: str, layout: LogLayout) -> Optional[Action]:
        """Resolve a log keyword to an action for a layout."""
        return cls.LAYOUT_ALIASES.get(layout, {}).get(name) or Action.lookup(name)
