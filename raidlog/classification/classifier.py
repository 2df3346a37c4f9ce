"""
Infers each participant's class and pet ownership from the event stream.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from ..config import wow_data
from ..errors import ConfigurationError
from ..models.actor import Actor, ActorTable, ClassTag, Evidence
from ..parser.events import Action, ENERGIZE_ACTIONS, Event, UnitFlags

logger = logging.getLogger(__name__)


@dataclass
class _Observation:
    """Evidence gathered for one id while the stream is processed."""

    name: Optional[str] = None
    class_tag: ClassTag = ClassTag.UNKNOWN
    evidence: Evidence = Evidence.NONE
    is_pet: bool = False
    summon_owner: Optional[str] = None
    link_owner: Optional[str] = None

    def offer(self, class_tag: ClassTag, evidence: Evidence) -> bool:
        """Record evidence if it is stronger than what is already known."""
        if evidence.value <= self.evidence.value:
            return False
        self.class_tag = class_tag
        self.evidence = evidence
        return True


class ParticipantClassifier:
    """
    Push-style classifier building the actor table.

    Call ``process`` once per event in stream order, then ``finish``.

    Rules, strongest first: hints, pet flags or summons, spells exclusive to
    one class, hostile NPC flags, characteristic power types. A rule only replaces an
    earlier conclusion when it is stronger.
    """

    def __init__(self, hints: Optional[Mapping[str, object]] = None):
        """
        Initialize the classifier.

        Args:
            hints: Mapping of actor id or display name to a forced class

        Raises:
            ConfigurationError: If a hint names an unknown class
        """
        self.hints: Dict[str, ClassTag] = {}
        for key, value in (hints or {}).items():
            try:
                self.hints[str(key)] = ClassTag.parse(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid hint for {key!r}: {e}") from None

        self.spell_classes, self.spell_name_classes = wow_data.build_spell_index()
        self.observations: Dict[str, _Observation] = {}
        self.processed_count = 0
        self._table: Optional[ActorTable] = None

    def _observe(self, unit_id: Optional[str], name: Optional[str], is_pet: bool,
                 is_mob: bool) -> Optional[_Observation]:
        if not unit_id:
            return None
        obs = self.observations.get(unit_id)
        if obs is None:
            obs = _Observation(name=name)
            self.observations[unit_id] = obs
        elif name and not obs.name:
            obs.name = name

        if is_pet:
            obs.is_pet = True
        elif is_mob:
            obs.offer(ClassTag.MOB, Evidence.FLAGS)
        return obs

    def _spell_class(self, event: Event) -> Optional[str]:
        if event.spell_id is not None:
            return self.spell_classes.get(event.spell_id)
        if event.spell_name:
            return self.spell_name_classes.get(event.spell_name)
        return None

    def _is_pet_link(self, event: Event) -> bool:
        if event.spell_id is not None:
            return event.spell_id in wow_data.PET_LINK_SPELLS
        return event.spell_name in wow_data.PET_LINK_SPELL_NAMES

    def process(self, event: Event):
        """
        Fold one event into the evidence.

        Args:
            event: The next event in stream order
        """
        if self._table is not None:
            raise RuntimeError("classifier already finished")

        actor = self._observe(event.actor, event.actor_name, event.is_pet_actor(),
                             event.is_hostile_npc_actor())
        target = self._observe(event.target, event.target_name, event.is_pet_target(),
                              event.is_hostile_npc_target())
        self.processed_count += 1

        linked = event.actor and event.target and event.actor != event.target

        if event.action is Action.SPELL_SUMMON and target is not None:
            target.is_pet = True
            if linked:
                target.summon_owner = event.actor
        elif linked and target is not None and self._is_pet_link(event):
            target.is_pet = True
            target.link_owner = event.actor

        if actor is not None and not event.actor_flags & UnitFlags.TYPE_NPC:
            class_name = self._spell_class(event)
            if class_name and actor.offer(ClassTag(class_name), Evidence.SPELL):
                logger.debug(f"{event.actor} classified {class_name} from {event.spell_name}")

        if event.action in ENERGIZE_ACTIONS and target is not None:
            class_name = wow_data.POWER_CLASSES.get(event.power_type)
            if class_name:
                target.offer(ClassTag(class_name), Evidence.POWER)

    def _hint_for(self, unit_id: str, obs: _Observation) -> Optional[ClassTag]:
        if unit_id in self.hints:
            return self.hints[unit_id]
        if obs.name and obs.name in self.hints:
            return self.hints[obs.name]
        return None

    def finish(self) -> ActorTable:
        """
        Finalize classification.

        Returns:
            Dictionary of actor id -> Actor
        """
        if self._table is not None:
            return self._table

        table: ActorTable = {}
        for unit_id, obs in self.observations.items():
            hint = self._hint_for(unit_id, obs)
            owner = None
            if obs.is_pet:
                owner = obs.summon_owner or obs.link_owner

            if hint is not None:
                class_tag, evidence = hint, Evidence.HINT
            elif obs.is_pet:
                class_tag, evidence = ClassTag.PET, Evidence.PET
            else:
                class_tag, evidence = obs.class_tag, obs.evidence

            table[unit_id] = Actor(
                id=unit_id,
                name=obs.name,
                class_tag=class_tag,
                owner_id=owner if class_tag is ClassTag.PET else None,
                evidence=evidence,
            )

        self._table = table
        logger.info(
            f"Classified {len(table)} actors: "
            f"{sum(1 for a in table.values() if a.class_tag is ClassTag.UNKNOWN)} unknown, "
            f"{sum(1 for a in table.values() if a.is_pet)} pets"
        )
        return table

    def get_stats(self) -> Dict[str, int]:
        """
        Get classification statistics.

        Returns:
            Dictionary with counts per class tag
        """
        counts: Dict[str, int] = {}
        for obs in self.observations.values():
            tag = ClassTag.PET if obs.is_pet else obs.class_tag
            counts[tag.value] = counts.get(tag.value, 0) + 1
        return counts
