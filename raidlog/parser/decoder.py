"""
Line decoder turning raw log lines into Events, and the canonical renderer.
"""

import logging
from typing import Any, Dict, List, Optional

from .events import Action, Event, SUFFIX_FIELDS, EXTRA_SPELL_FIELDS, SPELL_FIELDS
from .legacy import FIRST_PERSON, LegacyTextLayout
from .schemas import EventSchema, LogLayout
from .tokenizer import LineTokenizer

logger = logging.getLogger(__name__)

NULL_GUID = "0x0000000000000000"


class MalformedField(ValueError):
    """Raised internally when a field cannot be converted to its declared kind."""


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        if value[:2].lower() == "0x":
            return int(value, 16)
        return int(value)
    except ValueError:
        raise MalformedField(value) from None


def _to_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    if value in ("1", "true"):
        return True
    if value in ("0", "false"):
        return False
    raise MalformedField(value)


class CsvLayout:
    """
    Decodes the bodies of comma separated log lines.

    Field positions are taken from the EventSchema table for the layout.
    """

    def __init__(self, layout: LogLayout):
        self.layout = layout
        self.schemas = EventSchema.for_layout(layout)

    def decode_body(self, timestamp: float, body: str) -> Optional[Event]:
        """
        Decode a comma separated body into an Event.

        Args:
            timestamp: Seconds since the epoch
            body: Everything after the timestamp

        Returns:
            Event, or None if the action is unsupported or a field is malformed
        """
        keyword, _, rest = body.partition(",")
        action = EventSchema.lookup_action(keyword.strip(), self.layout)
        if action is None:
            logger.debug(f"Unsupported action {keyword[:40]!r}")
            return None

        params = LineTokenizer.split_fields(rest)
        base_count = len(EventSchema.BASE_PARAMS)
        schema = self.schemas[action]

        if len(params) < base_count + len(schema.prefix) + schema.min_suffix:
            logger.debug(f"Too few fields for {action.value}: {len(params)}")
            return None

        values: Dict[str, Any] = {}
        names = EventSchema.BASE_PARAMS + schema.field_names
        try:
            for name, raw in zip(names, params):
                values[name] = self._convert(name, raw)
        except MalformedField as e:
            logger.debug(f"Malformed field in {action.value}: {e}")
            return None

        for side in ("actor", "target"):
            if values.get(side) in (None, NULL_GUID):
                values[side] = None
            values[f"{side}_flags"] = values.get(f"{side}_flags") or 0

        return Event(timestamp=timestamp, action=action, **values)

    @staticmethod
    def _convert(name: str, raw: Optional[str]) -> Any:
        if name in EventSchema.BOOL_FIELDS:
            return _to_bool(raw)
        if name in EventSchema.INT_FIELDS:
            return _to_int(raw)
        return raw


class LineDecoder:
    """
    Decodes raw log lines into Events.

    The layout strategy is chosen once, at construction, from the log version.
    """

    def __init__(self, version=LogLayout.CSV, logger_name: str = FIRST_PERSON,
                 year: Optional[int] = None):
        """
        Initialize the decoder.

        Args:
            version: Log layout (1 legacy text, 2 comma separated, 3 extended)
            logger_name: Name substituted for the first person in legacy logs
            year: Year for timestamps that do not carry one
        """
        self.layout = LogLayout.from_version(version)
        self.logger_name = logger_name or FIRST_PERSON
        self.tokenizer = LineTokenizer(year=year)

        if self.layout is LogLayout.LEGACY_TEXT:
            self.strategy = LegacyTextLayout(self.logger_name)
        else:
            self.strategy = CsvLayout(self.layout)

    def decode(self, raw_line: str) -> Optional[Event]:
        """
        Decode a single line.

        Args:
            raw_line: Raw line from a combat log

        Returns:
            Event, or None if the line should be skipped
        """
        parsed = self.tokenizer.parse_line(raw_line)
        if parsed is None:
            return None
        return self.strategy.decode_body(parsed.timestamp, parsed.body)


def decode(raw_line: str, version=LogLayout.CSV, logger_name: str = FIRST_PERSON,
           year: Optional[int] = None) -> Optional[Event]:
    """Decode one line with a throwaway decoder."""
    return LineDecoder(version, logger_name, year).decode(raw_line)


def _render_value(name: str, value: Any) -> Optional[str]:
    if value is None:
        return "nil"
    if name in EventSchema.BOOL_FIELDS:
        return "1" if value else "nil"
    if name in EventSchema.HEX_FIELDS:
        return f"0x{value:x}"
    if name in EventSchema.INT_FIELDS:
        return str(value)
    if '"' in value:
        return None
    if name in EventSchema.QUOTED_FIELDS:
        return f'"{value}"'
    if "," in value or value != value.strip() or value == "nil":
        return None
    return value


def render(event: Event) -> Optional[str]:
    """
    Render an Event in the canonical extended comma separated layout.

    Args:
        event: Event to render

    Returns:
        Log line, or None if the event carries fields the layout cannot express
    """
    schema = EventSchema.for_layout(LogLayout.CSV_EXTENDED)[event.action]
    expressible = set(schema.field_names)

    for name in SPELL_FIELDS + EXTRA_SPELL_FIELDS + SUFFIX_FIELDS:
        if name not in expressible and getattr(event, name) is not None:
            return None

    # Optional trailing suffix fields are only written when set
    suffix: List[str] = list(schema.suffix)
    while len(suffix) > schema.min_suffix and getattr(event, suffix[-1]) is None:
        suffix.pop()

    values = {
        "actor": event.actor or NULL_GUID,
        "actor_name": event.actor_name,
        "actor_flags": event.actor_flags,
        "target": event.target or NULL_GUID,
        "target_name": event.target_name,
        "target_flags": event.target_flags,
    }
    parts = [event.action.value]
    for name in EventSchema.BASE_PARAMS + schema.prefix + tuple(suffix):
        value = values[name] if name in values else getattr(event, name)
        if name in ("actor", "target") and ("," in value or '"' in value):
            return None
        rendered = _render_value(name, value)
        if rendered is None:
            return None
        parts.append(rendered)

    return f"{LineTokenizer.format_timestamp(event.timestamp)}  {','.join(parts)}"
