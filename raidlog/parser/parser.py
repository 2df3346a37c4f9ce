"""
Combat log reader that coordinates line sources and decoding.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .decoder import LineDecoder, render
from .events import Event
from .legacy import FIRST_PERSON
from .schemas import LogLayout

logger = logging.getLogger(__name__)


class FileLineSource:
    """
    Replayable line source backed by a file.

    Every iteration re-opens the file, so the same lines are produced in the
    same order each time.
    """

    def __init__(self, path):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Combat log file not found: {self.path}")

    def __iter__(self) -> Iterator[str]:
        with open(self.path, "r", encoding="utf-8", errors="ignore") as f:
            for line in f:
                yield line

    @property
    def size(self) -> int:
        return self.path.stat().st_size


@dataclass
class CheckSummary:
    """How much of a log the decoder recognizes and the renderer can reproduce."""

    lines: int = 0
    recognized: int = 0
    printable: int = 0

    @property
    def skipped(self) -> int:
        return self.lines - self.recognized

    @property
    def recognized_ratio(self) -> float:
        return self.recognized / self.lines if self.lines else 0.0

    @property
    def printable_ratio(self) -> float:
        return self.printable / self.recognized if self.recognized else 0.0


class CombatLogParser:
    """
    Main parser for combat log files.

    Handles line reading, decoding and skip accounting.
    """

    def __init__(self, version=LogLayout.CSV, logger_name: str = FIRST_PERSON,
                 year: Optional[int] = None):
        """
        Initialize the combat log parser.

        Args:
            version: Log layout selector
            logger_name: Name substituted for the first person in legacy logs
            year: Year for timestamps that do not carry one
        """
        self.decoder = LineDecoder(version, logger_name, year)
        self.lines_read = 0
        self.events_processed = 0
        self.skipped_lines = 0

    def parse_file(self, file_path, progress_callback=None) -> Iterator[Event]:
        """
        Parse a combat log file and yield events.

        Args:
            file_path: Path to the combat log file
            progress_callback: Optional callback receiving the number of lines read

        Yields:
            Event objects
        """
        source = FileLineSource(file_path)
        logger.info(f"Starting parse of {source.path.name} ({source.size / 1024 / 1024:.1f} MB)")

        for index, event in enumerate(self.parse_lines(source)):
            if progress_callback and index % 10000 == 0:
                progress_callback(self.lines_read)
            yield event

        logger.info(f"Completed parsing {source.path.name}: "
                    f"{self.events_processed} events, {self.skipped_lines} skipped lines")

    def parse_lines(self, lines: Iterable[str]) -> Iterator[Event]:
        """
        Decode lines, yielding an event for each recognized one.

        Args:
            lines: Raw combat log lines

        Yields:
            Event objects in line order
        """
        for line in lines:
            self.lines_read += 1
            event = self.decoder.decode(line)
            if event is None:
                if line.strip():
                    self.skipped_lines += 1
                continue
            self.events_processed += 1
            yield event

    def get_stats(self) -> Dict[str, Any]:
        """
        Get parsing statistics.

        Returns:
            Dictionary with parsing stats
        """
        return {
            "lines_read": self.lines_read,
            "events_processed": self.events_processed,
            "skipped_lines": self.skipped_lines,
            "skip_ratio": self.skipped_lines / max(self.lines_read, 1),
            "tokenizer_stats": self.decoder.tokenizer.get_stats(),
        }


def check(lines: Iterable[str], version=LogLayout.CSV, logger_name: str = FIRST_PERSON,
          year: Optional[int] = None) -> Tuple[CheckSummary, List[str]]:
    """
    Measure decoder and renderer coverage of a log.

    Blank lines are not counted.

    Args:
        lines: Raw combat log lines
        version: Log layout selector
        logger_name: Name substituted for the first person in legacy logs
        year: Year for timestamps that do not carry one

    Returns:
        Tuple of (summary, unrecognized lines)
    """
    decoder = LineDecoder(version, logger_name, year)
    summary = CheckSummary()
    unrecognized = []

    for line in lines:
        if not line.strip():
            continue
        summary.lines += 1
        event = decoder.decode(line)
        if event is None:
            unrecognized.append(line.rstrip("\r\n"))
            continue
        summary.recognized += 1
        if render(event) is not None:
            summary.printable += 1

    return summary, unrecognized
