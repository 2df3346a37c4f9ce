"""
Configuration settings for the combat log pipeline.

Settings come from keyword arguments, environment variables (``RAIDLOG_*``)
or a YAML file applied through ``ConfigLoader``.
"""

import os
import logging
from typing import Optional, Dict, Any, Tuple
from dataclasses import dataclass, field

from ..errors import ConfigurationError
from ..models.actor import ClassTag
from ..parser.legacy import FIRST_PERSON
from ..parser.schemas import LogLayout

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, kind=float):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return kind(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


@dataclass
class ParserSettings:
    """Options recognized by the processing pipeline."""

    version: int = 2
    logger_name: str = FIRST_PERSON
    min_encounter_length: float = 0.0
    include_attempts: bool = False
    hints: Dict[str, str] = field(default_factory=dict)

    year: Optional[int] = None
    inactivity_timeout: float = 120.0
    wipe_on_raid_death: bool = True
    max_workers: int = 1
    accumulators: Optional[Tuple[str, ...]] = None
    hold_events: bool = True

    @classmethod
    def from_env(cls) -> "ParserSettings":
        """Load settings from environment variables."""
        accumulators = os.getenv("RAIDLOG_ACCUMULATORS")
        return cls(
            version=_env_number("RAIDLOG_VERSION", 2, int),
            logger_name=os.getenv("RAIDLOG_LOGGER", FIRST_PERSON),
            min_encounter_length=_env_number("RAIDLOG_MIN_LENGTH", 0.0),
            include_attempts=_env_bool("RAIDLOG_ATTEMPTS", False),
            year=_env_number("RAIDLOG_YEAR", None, int),
            inactivity_timeout=_env_number("RAIDLOG_TIMEOUT", 120.0),
            wipe_on_raid_death=_env_bool("RAIDLOG_RAID_DEATH", True),
            max_workers=_env_number("RAIDLOG_WORKERS", 1, int),
            accumulators=tuple(
                name.strip() for name in accumulators.split(",") if name.strip()
            ) if accumulators else None,
            hold_events=_env_bool("RAIDLOG_HOLD_EVENTS", True),
        )

    @property
    def layout(self) -> LogLayout:
        return LogLayout.from_version(self.version)

    def validate(self):
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If any option is out of range
        """
        errors = []

        try:
            self.layout
        except ConfigurationError as e:
            errors.append(str(e))

        if self.min_encounter_length < 0:
            errors.append(f"Invalid minimum encounter length: {self.min_encounter_length}")
        if self.inactivity_timeout <= 0:
            errors.append(f"Invalid inactivity timeout: {self.inactivity_timeout}")
        if self.max_workers < 1:
            errors.append(f"Invalid worker count: {self.max_workers}")

        for key, value in self.hints.items():
            try:
                ClassTag.parse(value)
            except ValueError:
                errors.append(f"Invalid class hint for {key!r}: {value!r}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    def log_configuration(self):
        """Log current configuration."""
        logger.info("=== Parser Configuration ===")
        logger.info(f"Log version: {self.version}")
        logger.info(f"Logger name: {self.logger_name}")
        logger.info(f"Minimum encounter length: {self.min_encounter_length}s")
        logger.info(f"Include attempts: {self.include_attempts}")
        logger.info(f"Inactivity timeout: {self.inactivity_timeout}s")
        logger.info(f"Wipe on raid death: {self.wipe_on_raid_death}")
        logger.info(f"Workers: {self.max_workers}")
        logger.info(f"Hints: {len(self.hints)}")
        logger.info("=== End Configuration ===")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "logger_name": self.logger_name,
            "min_encounter_length": self.min_encounter_length,
            "include_attempts": self.include_attempts,
            "hints": dict(self.hints),
            "year": self.year,
            "inactivity_timeout": self.inactivity_timeout,
            "wipe_on_raid_death": self.wipe_on_raid_death,
            "max_workers": self.max_workers,
            "accumulators": list(self.accumulators) if self.accumulators else None,
            "hold_events": self.hold_events,
        }
