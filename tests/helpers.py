"""
Builders for synthetic events and log lines shared by the test modules.
"""

import calendar
from typing import NamedTuple, Optional

from raidlog.parser.decoder import render
from raidlog.parser.events import Action, Event
from raidlog.parser.tokenizer import LineTokenizer

# 1/20/2008 21:00:00 UTC
BASE_TIME = calendar.timegm((2008, 1, 20, 21, 0, 0))
YEAR = 2008


class Unit(NamedTuple):
    id: str
    name: str
    flags: int


PLAYER_FLAGS = 0x514  # raid, friendly, player controlled, player
PET_FLAGS = 0x1114  # raid, friendly, player controlled, pet
BOSS_FLAGS = 0xA48  # outsider, hostile, npc controlled, npc

THRALL = Unit("0x0000000000000101", "Thrall", PLAYER_FLAGS)
JAINA = Unit("0x0000000000000102", "Jaina", PLAYER_FLAGS)
GULDAN = Unit("0x0000000000000103", "Guldan", PLAYER_FLAGS)
IMP = Unit("0xF140000000000201", "Zigzag", PET_FLAGS)
RAGNAROS = Unit("0xF130002E0D000301", "Ragnaros", BOSS_FLAGS)
ONYXIA = Unit("0xF130002799000302", "Onyxia", BOSS_FLAGS)
TRASH = Unit("0xF130002F00000401", "Lava Surger", BOSS_FLAGS)


def event(t: float, action: Action, actor: Optional[Unit] = None,
          target: Optional[Unit] = None, **fields) -> Event:
    """Build an event ``t`` seconds after BASE_TIME."""
    return Event(
        timestamp=BASE_TIME + t,
        action=action,
        actor=actor.id if actor else None,
        actor_name=actor.name if actor else None,
        actor_flags=actor.flags if actor else 0,
        target=target.id if target else None,
        target_name=target.name if target else None,
        target_flags=target.flags if target else 0,
        **fields,
    )


def hit(t: float, actor: Unit, target: Unit, amount: int = 1000, **fields) -> Event:
    fields.setdefault("critical", False)
    fields.setdefault("glancing", False)
    fields.setdefault("crushing", False)
    return event(t, Action.SWING_DAMAGE, actor, target, amount=amount, school=1, **fields)


def died(t: float, unit: Unit) -> Event:
    return event(t, Action.UNIT_DIED, None, unit)


def line(t: float, body: str) -> str:
    """A log line ``t`` seconds after BASE_TIME with the given body."""
    return f"{LineTokenizer.format_timestamp(BASE_TIME + t)}  {body}"


def lines_for(events) -> list:
    """Render events to canonical log lines."""
    return [render(e) for e in events]
