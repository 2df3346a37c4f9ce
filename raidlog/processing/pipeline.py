"""
Pipeline wiring the decoder, classifier, segmenter and accumulators.

A run decodes the line source once, feeding every event to the classifier
and the segmenter in stream order. The resulting encounters are filtered,
then each encounter window is replayed through fresh accumulator cycles.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..aggregation import Accumulator, StatTable, create_accumulators
from ..classification import ParticipantClassifier
from ..config.settings import ParserSettings
from ..config.wow_data import BossDefinition
from ..models.actor import ActorTable
from ..models.encounter import Encounter, EncounterTable
from ..parser.events import Event
from ..parser.parser import CombatLogParser
from ..parser.schemas import LogLayout
from ..segmentation import EncounterSegmenter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def current_year() -> int:
    return time.gmtime().tm_year


@dataclass
class EncounterResult:
    """Everything produced for one encounter."""

    encounter: Encounter
    actors: ActorTable
    tables: Dict[str, StatTable] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "encounter": self.encounter.to_dict(),
            "actors": [actor.to_dict() for actor in self.actors.values()],
            "tables": {
                name: {
                    "key": list(table.key_dimensions),
                    "values": list(table.value_fields),
                    "rows": table.to_rows(),
                }
                for name, table in self.tables.items()
            },
        }


class OutputConsumer(Protocol):
    """Receives the result of each qualifying encounter."""

    def write(self, result: EncounterResult) -> None:
        ...


@dataclass
class ProcessingContext:
    """
    State of one pipeline run.

    Owns the parser, classifier and segmenter instances so that nothing
    about the current pass lives in module globals.
    """

    settings: ParserSettings
    year: int
    parser: CombatLogParser
    classifier: ParticipantClassifier
    segmenter: EncounterSegmenter
    events: Optional[List[Event]] = None
    actors: ActorTable = field(default_factory=dict)
    encounters: EncounterTable = field(default_factory=dict)

    @classmethod
    def create(cls, settings: ParserSettings,
               bosses: Optional[Mapping[str, BossDefinition]] = None) -> "ProcessingContext":
        settings.validate()
        # Every pass of one run decodes timestamps against the same year
        year = settings.year if settings.year is not None else current_year()

        wipe_on_raid_death = settings.wipe_on_raid_death
        if wipe_on_raid_death and settings.layout is LogLayout.LEGACY_TEXT:
            # Sentence logs only flag the logger as a player
            logger.info("Raid death wipes disabled for legacy text logs")
            wipe_on_raid_death = False

        return cls(
            settings=settings,
            year=year,
            parser=cls.new_parser(settings, year),
            classifier=ParticipantClassifier(settings.hints),
            segmenter=EncounterSegmenter(
                bosses,
                inactivity_timeout=settings.inactivity_timeout,
                wipe_on_raid_death=wipe_on_raid_death,
            ),
            events=[] if settings.hold_events else None,
        )

    @staticmethod
    def new_parser(settings: ParserSettings, year: int) -> CombatLogParser:
        return CombatLogParser(settings.version, settings.logger_name, year)


class CombatLogPipeline:
    """
    Runs a line source through the full pipeline.

    Example:
        pipeline = CombatLogPipeline(ParserSettings(version=3, include_attempts=True))
        for result in pipeline.run(FileLineSource("WoWCombatLog.txt")):
            print(result.encounter, len(result.tables["damage"]))
    """

    def __init__(self, settings: Optional[ParserSettings] = None,
                 bosses: Optional[Mapping[str, BossDefinition]] = None):
        """
        Initialize the pipeline.

        Args:
            settings: Parser settings, defaults to ParserSettings()
            bosses: Boss registry, defaults to wow_data.BOSSES
        """
        self.settings = settings or ParserSettings()
        self.bosses = bosses
        self.settings.validate()
        # Fail early on unknown accumulator names
        create_accumulators(self.settings.accumulators)
        self.context: Optional[ProcessingContext] = None

    def run(self, lines: Iterable[str], consumer: Optional[OutputConsumer] = None,
            progress_callback: Optional[ProgressCallback] = None) -> List[EncounterResult]:
        """
        Process a line source.

        Args:
            lines: Raw log lines; must be re-iterable when events are not held
            consumer: Optional consumer receiving each encounter result
            progress_callback: Optional callback receiving (done, total) encounters

        Returns:
            Results for the encounters that passed filtering, in start order

        Raises:
            OutputError: If the consumer fails to persist an encounter
        """
        settings = self.settings
        if not settings.hold_events and iter(lines) is lines:
            logger.warning("Line source cannot be replayed, holding events in memory")
            settings = replace(settings, hold_events=True)

        context = ProcessingContext.create(settings, self.bosses)
        self.context = context

        self.scan(context, lines)
        selected = self.select_encounters(context)

        results = []
        executor = ThreadPoolExecutor(max_workers=settings.max_workers) if settings.max_workers > 1 else None
        try:
            for done, encounter in enumerate(selected, 1):
                window = self.window(context, lines, encounter)
                tables = self.aggregate(window, executor)
                result = EncounterResult(
                    encounter=encounter,
                    actors=self.participants(context.actors, encounter),
                    tables=tables,
                )
                if consumer is not None:
                    consumer.write(result)
                results.append(result)
                if progress_callback:
                    progress_callback(done, len(selected))
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        logger.info(f"Processed {len(results)} encounters")
        return results

    def scan(self, context: ProcessingContext, lines: Iterable[str]):
        """Decode the source once, classifying and segmenting in stream order."""
        for event in context.parser.parse_lines(lines):
            context.classifier.process(event)
            context.segmenter.process(event)
            if context.events is not None:
                context.events.append(event)

        context.actors = context.classifier.finish()
        context.encounters = context.segmenter.finish()

        stats = context.parser.get_stats()
        logger.info(
            f"Decoded {stats['events_processed']} events from {stats['lines_read']} lines "
            f"({stats['skipped_lines']} skipped)"
        )

    def select_encounters(self, context: ProcessingContext) -> List[Encounter]:
        """
        Apply the minimum length and attempts filters.

        Returns:
            Encounters to aggregate, in start order
        """
        settings = context.settings
        selected = []
        for encounter in context.encounters.values():
            if settings.min_encounter_length and encounter.duration < settings.min_encounter_length:
                logger.info(f"Dropping {encounter!r}: shorter than {settings.min_encounter_length}s")
                continue
            if not encounter.is_kill and not settings.include_attempts:
                logger.info(f"Dropping {encounter!r}: attempts not included")
                continue
            selected.append(encounter)
        return selected

    def window(self, context: ProcessingContext, lines: Iterable[str],
               encounter: Encounter) -> Tuple[Event, ...]:
        """
        Events of one encounter, in stream order.

        Uses the held events when available, otherwise re-scans the source.
        """
        if context.events is not None:
            return tuple(context.events[encounter.start_index:encounter.end_index + 1])

        parser = context.new_parser(context.settings, context.year)
        window = []
        for index, event in enumerate(parser.parse_lines(lines)):
            if index > encounter.end_index:
                break
            if encounter.contains_index(index):
                window.append(event)
        return tuple(window)

    def aggregate(self, window: Sequence[Event],
                  executor: Optional[ThreadPoolExecutor] = None) -> Dict[str, StatTable]:
        """
        Run every accumulator over a window.

        Args:
            window: Encounter events in stream order
            executor: Runs accumulators concurrently when given

        Returns:
            Dictionary of accumulator name -> frozen table
        """
        accumulators: List[Accumulator] = create_accumulators(self.settings.accumulators)

        if executor is None:
            return {acc.name: acc.run(window) for acc in accumulators}

        futures = {acc.name: executor.submit(acc.run, window) for acc in accumulators}
        return {name: future.result() for name, future in futures.items()}

    @staticmethod
    def participants(actors: ActorTable, encounter: Encounter) -> ActorTable:
        return {
            actor_id: actor
            for actor_id, actor in actors.items()
            if actor_id in encounter.participant_ids
        }

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics of the last run.

        Returns:
            Dictionary with parser, classifier and segmenter stats
        """
        if self.context is None:
            return {}
        return {
            "parser": self.context.parser.get_stats(),
            "classes": self.context.classifier.get_stats(),
            "segmenter": self.context.segmenter.get_stats(),
            "encounters": len(self.context.encounters),
        }


def process_log(lines: Iterable[str], settings: Optional[ParserSettings] = None,
                consumer: Optional[OutputConsumer] = None) -> List[EncounterResult]:
    """Run the pipeline once over a line source."""
    return CombatLogPipeline(settings).run(lines, consumer)
