"""
Decoder for legacy sentence-style combat logs.

Older clients wrote English sentences ("Your Fireball hits Ragnaros for 2310
Fire damage.") instead of comma separated records. Spell ids and unit flags
are not available; units are identified by display name, and the first person
pronoun is resolved to the name of the player who recorded the log.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from .events import Action, Event, UnitFlags

logger = logging.getLogger(__name__)

FIRST_PERSON = "You"

SCHOOLS: Dict[str, int] = {
    "Physical": 0x1,
    "Holy": 0x2,
    "Fire": 0x4,
    "Nature": 0x8,
    "Frost": 0x10,
    "Shadow": 0x20,
    "Arcane": 0x40,
}

POWER_TYPES: Dict[str, int] = {
    "Mana": 0,
    "Rage": 1,
    "Focus": 2,
    "Energy": 3,
    "Happiness": 4,
}

LOGGER_FLAGS = (
    UnitFlags.AFFILIATION_MINE
    | UnitFlags.REACTION_FRIENDLY
    | UnitFlags.CONTROL_PLAYER
    | UnitFlags.TYPE_PLAYER
)

_TRAIL_AMOUNT = re.compile(r"\((\d+) (resisted|blocked|absorbed)\)")
_POWER = "|".join(POWER_TYPES)

# (pattern, action, constant fields); order matters, most specific first
_PATTERNS: List[Tuple[re.Pattern, Action, Dict[str, object]]] = [
    (re.compile(r"^(?P<actor>Your|.+?'s) (?P<spell>.+?) (?P<verb>hits|crits) (?P<target>.+?) for "
                r"(?P<amount>\d+)(?: (?P<school>[A-Z][a-z]+) damage)?\.(?P<trail>.*)$"),
     Action.SPELL_DAMAGE, {}),
    (re.compile(r"^(?P<actor>.+?) (?P<verb>hits?|crits?) (?P<target>.+?) for "
                r"(?P<amount>\d+)(?: (?P<school>[A-Z][a-z]+) damage)?\.(?P<trail>.*)$"),
     Action.SWING_DAMAGE, {}),
    (re.compile(r"^(?P<target>.+?) suffers? (?P<amount>\d+) (?P<school>[A-Z][a-z]+) damage from "
                r"(?P<actor>your|.+?'s) (?P<spell>.+?)\.(?P<trail>.*)$"),
     Action.SPELL_PERIODIC_DAMAGE, {}),
    (re.compile(r"^(?P<actor>Your|.+?'s) (?P<spell>.+?) (?P<verb>critically heals|heals) "
                r"(?P<target>.+?) for (?P<amount>\d+)\.$"),
     Action.SPELL_HEAL, {}),
    (re.compile(r"^(?P<target>.+?) gains? (?P<amount>\d+) health from "
                r"(?P<actor>your|.+?'s) (?P<spell>.+?)\.$"),
     Action.SPELL_PERIODIC_HEAL, {}),
    (re.compile(rf"^(?P<target>.+?) gains? (?P<amount>\d+) (?P<power>{_POWER}) from "
                r"(?P<actor>your|.+?'s) (?P<spell>.+?)\.$"),
     Action.SPELL_ENERGIZE, {}),
    (re.compile(rf"^(?P<target>.+?) gains? (?P<amount>\d+) (?P<power>{_POWER}) from "
                r"(?P<spell>.+?)\.$"),
     Action.SPELL_ENERGIZE, {"self": True}),
    (re.compile(r"^(?P<actor>.+?) gains? (?P<amount>\d+) extra attacks? through (?P<spell>.+?)\.$"),
     Action.SPELL_EXTRA_ATTACKS, {"self": True}),
    (re.compile(r"^(?P<target>.+?) (?:is|are) afflicted by (?P<spell>.+?)(?: \((?P<dose>\d+)\))?\.$"),
     Action.SPELL_AURA_APPLIED, {"aura_type": "DEBUFF"}),
    (re.compile(r"^(?P<target>.+?) gains? (?P<spell>.+?)(?: \((?P<dose>\d+)\))?\.$"),
     Action.SPELL_AURA_APPLIED, {"aura_type": "BUFF"}),
    (re.compile(r"^(?P<spell>.+?) fades from (?P<target>.+?)\.$"),
     Action.SPELL_AURA_REMOVED, {}),
    (re.compile(r"^(?P<actor>.+?) begins? to (?:cast|perform) (?P<spell>.+?)\.$"),
     Action.SPELL_CAST_START, {}),
    (re.compile(r"^(?P<actor>.+?) interrupts? (?P<target>your|.+?'s) (?P<extra>.+?)\.$"),
     Action.SPELL_INTERRUPT, {}),
    (re.compile(r"^(?P<actor>.+?) (?:casts?|performs?) (?P<spell>.+?) on (?P<target>.+?)\.$"),
     Action.SPELL_CAST_SUCCESS, {}),
    (re.compile(r"^(?P<actor>.+?) (?:casts?|performs?) (?P<spell>.+?)\.$"),
     Action.SPELL_CAST_SUCCESS, {}),
    (re.compile(r"^(?P<actor>Your|.+?'s) (?P<spell>.+?) (?:missed|misses) (?P<target>.+?)\.$"),
     Action.SPELL_MISSED, {"miss_type": "MISS"}),
    (re.compile(r"^(?P<actor>Your|.+?'s) (?P<spell>.+?) (?:was|is) resisted by (?P<target>.+?)\.$"),
     Action.SPELL_MISSED, {"miss_type": "RESIST"}),
    (re.compile(r"^(?P<actor>.+?) miss(?:es)? (?P<target>.+?)\.$"),
     Action.SWING_MISSED, {"miss_type": "MISS"}),
    (re.compile(r"^(?P<actor>.+?) attacks?\. (?P<target>.+?) "
                r"(?P<avoid>dodges?|parr(?:y|ies)|blocks?|absorbs? all the damage)\.$"),
     Action.SWING_MISSED, {}),
    (re.compile(r"^You have slain (?P<target>.+?)!$"),
     Action.PARTY_KILL, {"actor": FIRST_PERSON}),
    (re.compile(r"^(?P<target>.+?) (?:is|are) slain by (?P<actor>.+?)[.!]$"),
     Action.PARTY_KILL, {}),
    (re.compile(r"^(?P<target>.+?) dies?\.$"),
     Action.UNIT_DIED, {}),
]

_AVOIDANCE = {"dodge": "DODGE", "parr": "PARRY", "block": "BLOCK", "absor": "ABSORB"}


class LegacyTextLayout:
    """
    Decodes the bodies of sentence-style log lines.

    A layout instance is bound to the name of the logging player so that
    "You", "you", "Your" and "your" resolve to a stable actor id.
    """

    def __init__(self, logger_name: Optional[str] = None):
        self.logger_name = logger_name or FIRST_PERSON

    def _who(self, text: Optional[str]) -> Optional[str]:
        """Resolve a subject, object or possessive to a unit name."""
        if text is None:
            return None
        if text in ("You", "you", "Your", "your"):
            return self.logger_name
        if text.endswith("'s"):
            return text[:-2]
        return text

    def _flags(self, name: Optional[str]) -> int:
        return int(LOGGER_FLAGS) if name is not None and name == self.logger_name else 0

    def decode_body(self, timestamp: float, body: str) -> Optional[Event]:
        """
        Decode one sentence into an Event.

        Args:
            timestamp: Seconds since the epoch
            body: The sentence after the timestamp

        Returns:
            Event, or None if the sentence is not recognized
        """
        body = body.strip()
        for pattern, action, constants in _PATTERNS:
            match = pattern.match(body)
            if match:
                return self._build(timestamp, action, match, constants)

        logger.debug(f"Unrecognized legacy line: {body[:80]}")
        return None

    def _build(self, timestamp: float, action: Action, match: re.Match, constants) -> Event:
        groups = match.groupdict()
        values = {}

        actor = self._who(constants.get("actor") or groups.get("actor"))
        target = self._who(groups.get("target"))
        if constants.get("self"):
            if actor is None:
                actor = target
            elif target is None:
                target = actor

        if "spell" in groups:
            values["spell_name"] = groups["spell"]
        if groups.get("extra"):
            values["extra_spell_name"] = groups["extra"]
        if groups.get("amount"):
            values["amount"] = int(groups["amount"])

        if groups.get("school"):
            values["school"] = SCHOOLS.get(groups["school"], 0)
        if groups.get("power"):
            values["power_type"] = POWER_TYPES[groups["power"]]

        verb = groups.get("verb") or ""
        if action in (Action.SPELL_DAMAGE, Action.SWING_DAMAGE, Action.SPELL_HEAL):
            values["critical"] = verb.startswith("crit")
        if action in (Action.SWING_DAMAGE, Action.SPELL_DAMAGE, Action.SPELL_PERIODIC_DAMAGE):
            values.update(self._parse_trail(groups.get("trail") or ""))

        avoid = groups.get("avoid")
        if avoid:
            values["miss_type"] = next(
                miss for prefix, miss in _AVOIDANCE.items() if avoid.startswith(prefix)
            )

        if groups.get("dose"):
            action = Action.SPELL_AURA_APPLIED_DOSE
            values["amount"] = int(groups["dose"])

        for key in ("miss_type", "aura_type"):
            if key in constants:
                values[key] = constants[key]

        return Event(
            timestamp=timestamp,
            action=action,
            actor=actor,
            actor_name=actor,
            actor_flags=self._flags(actor),
            target=target,
            target_name=target,
            target_flags=self._flags(target),
            **values,
        )

    @staticmethod
    def _parse_trail(trail: str) -> Dict[str, object]:
        """Parse "(N resisted)", "(glancing)" and similar trailers."""
        values: Dict[str, object] = {}
        for amount, kind in _TRAIL_AMOUNT.findall(trail):
            values[kind] = int(amount)
        values["glancing"] = "(glancing)" in trail
        values["crushing"] = "(crushing)" in trail
        return values
