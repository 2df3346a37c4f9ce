"""
Encounter detection and segmentation for combat logs.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set

from ..config import wow_data
from ..config.wow_data import BossDefinition
from ..models.encounter import Encounter, EncounterTable, Outcome
from ..parser.events import (
    Action,
    AURA_APPLY_ACTIONS,
    DAMAGE_ACTIONS,
    Event,
    MISS_ACTIONS,
)

logger = logging.getLogger(__name__)

DEFAULT_INACTIVITY_TIMEOUT = 120.0

DEATH_ACTIONS = frozenset({Action.UNIT_DIED, Action.UNIT_DESTROYED, Action.PARTY_KILL})

ENGAGE_ACTIONS = DAMAGE_ACTIONS | MISS_ACTIONS

FRIENDLY_ENGAGE_ACTIONS = AURA_APPLY_ACTIONS | frozenset({
    Action.SPELL_CAST_START,
    Action.SPELL_CAST_SUCCESS,
})


@dataclass
class _Attempt:
    """An open attempt at one boss."""

    boss: BossDefinition
    start_time: float
    start_index: int
    last_time: float
    last_index: int
    dead_units: Set[str] = field(default_factory=set)
    players: Dict[str, bool] = field(default_factory=dict)
    seen: Dict[str, int] = field(default_factory=dict)

    def touch(self, index: int, timestamp: float):
        self.last_index = index
        self.last_time = timestamp

    def see(self, unit_id: Optional[str], index: int):
        if unit_id and unit_id not in self.seen:
            self.seen[unit_id] = index

    @property
    def killed(self) -> bool:
        return all(unit in self.dead_units for unit in self.boss.kill_units)

    @property
    def raid_dead(self) -> bool:
        return bool(self.players) and not any(self.players.values())

    def close(self, outcome: Outcome, end_index: int, end_time: float) -> Encounter:
        return Encounter(
            boss_name=self.boss.name,
            start_time=self.start_time,
            end_time=end_time,
            start_index=self.start_index,
            end_index=end_index,
            outcome=outcome,
            participant_ids=frozenset(
                unit_id for unit_id, index in self.seen.items() if index <= end_index
            ),
        )


class EncounterSegmenter:
    """
    Segments combat log events into boss encounters.

    Each boss has an independent state machine: an engagement event touching
    one of its units opens an attempt, and the attempt closes as a kill when
    every kill unit has died, or as a wipe on inactivity, raid death or end of
    stream. On each event the inactivity check runs before the kill check,
    which runs before the raid death check.
    """

    def __init__(self, bosses: Optional[Mapping[str, BossDefinition]] = None,
                 inactivity_timeout: float = DEFAULT_INACTIVITY_TIMEOUT,
                 wipe_on_raid_death: bool = True):
        """
        Initialize the encounter segmenter.

        Args:
            bosses: Boss registry keyed by name, defaults to wow_data.BOSSES
            inactivity_timeout: Seconds without boss activity before an attempt wipes
            wipe_on_raid_death: Close an attempt as a wipe when every player in it is dead
        """
        self.units = wow_data.build_unit_index(dict(bosses) if bosses is not None else None)
        self.inactivity_timeout = inactivity_timeout
        self.wipe_on_raid_death = wipe_on_raid_death

        self.active: Dict[str, _Attempt] = {}
        self.encounters: List[Encounter] = []
        self.index = -1
        self.last_time: Optional[float] = None
        self._table: Optional[EncounterTable] = None

    def _bosses_touched(self, event: Event) -> List[BossDefinition]:
        touched = []
        for name in (event.target_name, event.actor_name):
            boss = self.units.get(name) if name else None
            if boss is not None and boss not in touched:
                touched.append(boss)
        return touched

    def _is_engagement(self, event: Event, boss: BossDefinition) -> bool:
        if event.action in ENGAGE_ACTIONS:
            return True
        return (
            event.action in FRIENDLY_ENGAGE_ACTIONS
            and event.is_friendly_actor()
            and event.target_name in boss.units
        )

    def _timeout_for(self, boss: BossDefinition) -> float:
        return boss.timeout if boss.timeout is not None else self.inactivity_timeout

    def _close(self, attempt: _Attempt, outcome: Outcome, end_index: int, end_time: float):
        encounter = attempt.close(outcome, end_index, end_time)
        del self.active[attempt.boss.name]
        self.encounters.append(encounter)
        logger.debug(f"Closed {encounter!r}")

    def process(self, event: Event):
        """
        Process the next event in stream order.

        Args:
            event: The event to process
        """
        if self._table is not None:
            raise RuntimeError("segmenter already finished")

        self.index += 1
        self.last_time = event.timestamp

        for attempt in list(self.active.values()):
            if event.timestamp - attempt.last_time > self._timeout_for(attempt.boss):
                logger.debug(f"{attempt.boss.name} timed out at {event.timestamp}")
                self._close(attempt, Outcome.WIPE, attempt.last_index, attempt.last_time)

        for boss in self._bosses_touched(event):
            attempt = self.active.get(boss.name)
            if attempt is None:
                if not self._is_engagement(event, boss):
                    continue
                attempt = _Attempt(
                    boss=boss,
                    start_time=event.timestamp,
                    start_index=self.index,
                    last_time=event.timestamp,
                    last_index=self.index,
                )
                self.active[boss.name] = attempt
                logger.debug(f"Engaged {boss.name} at event {self.index}")
            attempt.touch(self.index, event.timestamp)

        if not self.active:
            return

        died = event.target if event.action in DEATH_ACTIONS else None
        for attempt in list(self.active.values()):
            attempt.see(event.actor, self.index)
            attempt.see(event.target, self.index)
            self._track_players(attempt, event, died)

            if died and event.target_name in attempt.boss.kill_units:
                attempt.dead_units.add(event.target_name)
                if attempt.killed:
                    self._close(attempt, Outcome.KILL, self.index, event.timestamp)
                    continue

            if self.wipe_on_raid_death and died and attempt.raid_dead:
                logger.debug(f"Raid died on {attempt.boss.name} at {event.timestamp}")
                self._close(attempt, Outcome.WIPE, self.index, event.timestamp)

    @staticmethod
    def _track_players(attempt: _Attempt, event: Event, died: Optional[str]):
        if event.actor and event.is_player_actor():
            if event.action not in DEATH_ACTIONS:
                attempt.players[event.actor] = True
        if event.target and event.is_player_target():
            if died == event.target:
                attempt.players[event.target] = False
            elif event.action is Action.SPELL_RESURRECT:
                attempt.players[event.target] = True
            else:
                attempt.players.setdefault(event.target, True)

    def finish(self) -> EncounterTable:
        """
        Close any open attempts as wipes and return the encounter table.

        Returns:
            Dictionary keyed by (boss_name, start_time), in start order
        """
        if self._table is not None:
            return self._table

        for attempt in list(self.active.values()):
            self._close(attempt, Outcome.WIPE, self.index, self.last_time)

        table: EncounterTable = {}
        for encounter in sorted(self.encounters, key=lambda e: (e.start_index, e.boss_name)):
            if encounter.key in table:
                logger.warning(f"Duplicate encounter key {encounter.key}, keeping the first")
                continue
            table[encounter.key] = encounter

        self._table = table
        kills = sum(1 for e in table.values() if e.is_kill)
        logger.info(f"Segmented {len(table)} encounters ({kills} kills, {len(table) - kills} wipes)")
        return table

    def get_stats(self) -> Dict[str, int]:
        """
        Get segmentation statistics.

        Returns:
            Dictionary with event and encounter counts
        """
        return {
            "events_processed": self.index + 1,
            "active_encounters": len(self.active),
            "closed_encounters": len(self.encounters),
        }
