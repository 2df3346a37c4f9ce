"""
Base class for per-encounter accumulators.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from ..parser.events import Action, Event
from .table import StatTable

logger = logging.getLogger(__name__)

Handler = Callable[[Event], None]

MELEE = 0


def spell_key(event: Event) -> Union[int, str]:
    """
    Key for the spell of an event.

    Spell id when known, the display name for legacy logs, and MELEE for
    swings.
    """
    if event.spell_id is not None:
        return event.spell_id
    if event.spell_name:
        return event.spell_name
    return MELEE


def extra_spell_key(event: Event) -> Union[int, str]:
    if event.extra_spell_id is not None:
        return event.extra_spell_id
    if event.extra_spell_name:
        return event.extra_spell_name
    return MELEE


class Accumulator(ABC):
    """
    Builds one statistic table over one encounter window.

    Subclasses declare ``name``, ``KEY`` and ``VALUES`` and return their
    handlers from ``actions``. Lifecycle per encounter: ``start``, then
    ``process`` for every event in stream order, then ``finish``.
    """

    name: str = ""
    KEY: Tuple[str, ...] = ()
    VALUES: Tuple[str, ...] = ()

    def __init__(self):
        self.handlers: Dict[Action, Handler] = self.actions()
        self.table: Optional[StatTable] = None

    @classmethod
    def key_dimensions(cls) -> Tuple[str, ...]:
        return cls.KEY

    @classmethod
    def value_fields(cls) -> Tuple[str, ...]:
        return cls.VALUES

    @abstractmethod
    def actions(self) -> Dict[Action, Handler]:
        """Map each action of interest to its handler."""

    def new_entry(self) -> Dict[str, Any]:
        """Initial record for a key seen for the first time."""
        return {}

    def reset(self):
        """Clear per-encounter state kept outside the table."""

    def finalize(self):
        """Complete open state before the table is frozen."""

    def start(self):
        """Reset state for a new encounter window."""
        self.table = StatTable(self.KEY, self.VALUES, self.new_entry)
        self.reset()

    def process(self, event: Event):
        """
        Fold one event into the table.

        Events outside the accumulator's actions are ignored.
        """
        handler = self.handlers.get(event.action)
        if handler is not None:
            handler(event)

    def finish(self) -> StatTable:
        """
        Finalize and return the read-only table.

        Returns:
            Frozen StatTable
        """
        if self.table is None:
            raise RuntimeError(f"{self.name} accumulator finished before start")
        self.finalize()
        table = self.table.freeze()
        self.table = None
        logger.debug(f"{self.name}: {len(table)} entries")
        return table

    def run(self, events: Iterable[Event]) -> StatTable:
        """Run a full start/process/finish cycle over a window."""
        self.start()
        for event in events:
            self.process(event)
        return self.finish()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"
