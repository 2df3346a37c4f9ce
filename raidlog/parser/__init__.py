"""
Combat log parser module for decoding combat log lines into events.
"""

from .decoder import LineDecoder, decode, render
from .events import Action, Event, UnitFlags
from .parser import CheckSummary, CombatLogParser, FileLineSource, check
from .schemas import EventSchema, LogLayout
from .tokenizer import LineTokenizer

__all__ = [
    "Action",
    "CheckSummary",
    "CombatLogParser",
    "Event",
    "EventSchema",
    "FileLineSource",
    "LineDecoder",
    "LineTokenizer",
    "LogLayout",
    "UnitFlags",
    "check",
    "decode",
    "render",
]
