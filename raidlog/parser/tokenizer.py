"""
Line tokenizer for combat log lines.
"""

import calendar
import re
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

NIL = "nil"


@dataclass
class ParsedLine:
    """Represents a tokenized combat log line."""

    timestamp: float
    body: str
    raw_line: str


class LineTokenizer:
    """
    Tokenizes individual lines from combat logs.

    Splits the timestamp from the rest of the line and breaks comma separated
    bodies into fields, keeping quoted fields (which may contain commas) intact.
    """

    # Format: "M/D[/YYYY] HH:MM:SS.mmm[-Z]  body"
    LINE_PATTERN = re.compile(
        r"^(\d{1,2})/(\d{1,2})(?:/(\d{4}))?\s+(\d{1,2}):(\d{2}):(\d{2})\.(\d{3})(?:[-+]\d+)?\s\s(.+)$"
    )

    def __init__(self, year: Optional[int] = None):
        """
        Initialize the tokenizer.

        Args:
            year: Year used for timestamps that do not carry one
        """
        self.year = year or time.gmtime().tm_year
        self.line_count = 0
        self.error_count = 0

    def parse_line(self, line: str) -> Optional[ParsedLine]:
        """
        Split a single combat log line into timestamp and body.

        Args:
            line: Raw line from combat log file

        Returns:
            ParsedLine object or None if the line is blank, a comment or malformed
        """
        self.line_count += 1

        line = line.rstrip("\r\n")

        if not line.strip() or line.lstrip().startswith("#"):
            return None

        match = self.LINE_PATTERN.match(line)
        if not match:
            self.error_count += 1
            return None

        month, day, year, hour, minute, second, millis, body = match.groups()

        # timegm silently normalizes out of range values
        if not (1 <= int(month) <= 12 and 1 <= int(day) <= 31 and int(hour) < 24):
            self.error_count += 1
            return None

        seconds = calendar.timegm(
            (int(year) if year else self.year, int(month), int(day),
             int(hour), int(minute), int(second))
        )

        return ParsedLine(
            timestamp=seconds + int(millis) / 1000.0,
            body=body,
            raw_line=line,
        )

    @staticmethod
    def split_fields(body: str) -> List[Optional[str]]:
        """
        Split a comma separated body into fields.

        Quoted fields lose their quotes and may contain commas. A bare ``nil``
        becomes None.

        Args:
            body: Comma separated parameter string

        Returns:
            List of field values
        """
        params = []
        current = []
        quoted = []
        in_quotes = False
        was_quoted = False

        for char in body:
            if char == '"':
                in_quotes = not in_quotes
                was_quoted = True
            elif char == "," and not in_quotes:
                params.append("".join(current))
                quoted.append(was_quoted)
                current = []
                was_quoted = False
            else:
                current.append(char)

        params.append("".join(current))
        quoted.append(was_quoted)

        cleaned = []
        for param, is_quoted in zip(params, quoted):
            if is_quoted:
                cleaned.append(param)
            else:
                param = param.strip()
                cleaned.append(None if param == NIL else param)

        return cleaned

    @staticmethod
    def format_timestamp(timestamp: float) -> str:
        """
        Render a timestamp in the log's date format.

        Args:
            timestamp: Seconds since the epoch (UTC)

        Returns:
            Timestamp string like "1/20/2008 21:38:24.688"
        """
        total_ms = int(round(timestamp * 1000))
        seconds, millis = divmod(total_ms, 1000)
        t = time.gmtime(seconds)
        return (
            f"{t.tm_mon}/{t.tm_mday}/{t.tm_year} "
            f"{t.tm_hour:02d}:{t.tm_min:02d}:{t.tm_sec:02d}.{millis:03d}"
        )

    def get_stats(self) -> Dict[str, float]:
        """
        Get tokenizing statistics.

        Returns:
            Dictionary with line_count, error_count and success rate
        """
        return {
            "lines_processed": self.line_count,
            "errors": self.error_count,
            "success_rate": (self.line_count - self.error_count) / max(self.line_count, 1),
        }
