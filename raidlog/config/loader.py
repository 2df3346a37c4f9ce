"""
Configuration loader for parser settings and custom game data.

Allows users to provide settings, class hints, extra bosses and extra class
spells via YAML configuration files:

    parser:
      version: 3
      min_encounter_length: 30
    hints:
      Thrall: Shaman
    bosses:
      - name: Opera Event
        units: [The Big Bad Wolf, Romulo, Julianne, The Crone]
        kill_units: [The Big Bad Wolf]
        timeout: 90
    class_spells:
      Mage:
        12345: Custom Spell
"""

import yaml
import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Dict, Optional, Any

from . import wow_data
from .settings import ParserSettings
from ..errors import ConfigurationError
from ..models.actor import ClassTag

logger = logging.getLogger(__name__)

SETTING_NAMES = frozenset(f.name for f in fields(ParserSettings)) - {"hints"}


class ConfigLoader:
    """Loads and applies custom configuration from YAML files."""

    @staticmethod
    def search_paths(config_path: Optional[str] = None):
        paths = [
            Path("raidlog.yaml"),
            Path("config/raidlog.yaml"),
            Path.home() / ".raidlog" / "raidlog.yaml",
        ]
        if config_path:
            paths.insert(0, Path(config_path))
        return paths

    @staticmethod
    def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to custom config file. If None, looks for:
                        1. raidlog.yaml in current directory
                        2. config/raidlog.yaml
                        3. ~/.raidlog/raidlog.yaml

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: If the explicit file is missing or a file is not valid YAML
        """
        if config_path and not Path(config_path).exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        for path in ConfigLoader.search_paths(config_path):
            if not path.exists():
                continue
            try:
                with open(path, "r", encoding="utf-8") as f:
                    config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to load config from {path}: {e}") from e
            if not isinstance(config, dict):
                raise ConfigurationError(f"Config file {path} must contain a mapping")
            logger.info(f"Loaded configuration from {path}")
            return config

        logger.debug("No custom configuration file found, using defaults")
        return {}

    @staticmethod
    def apply_config(config: Dict[str, Any],
                     settings: Optional[ParserSettings] = None) -> ParserSettings:
        """
        Apply custom configuration to settings and the wow_data registries.

        Args:
            config: Configuration dictionary from YAML
            settings: Settings to start from, defaults to ParserSettings()

        Returns:
            New settings with the file's values applied

        Raises:
            ConfigurationError: If a hint, boss or class entry is invalid
        """
        settings = settings or ParserSettings()

        overrides = {}
        for key, value in (config.get("parser") or {}).items():
            if key not in SETTING_NAMES:
                logger.warning(f"Ignoring unknown parser setting: {key}")
                continue
            if key == "accumulators" and value is not None:
                value = tuple(value)
            overrides[key] = value

        hints = dict(settings.hints)
        for name, class_name in (config.get("hints") or {}).items():
            try:
                hints[str(name)] = ClassTag.parse(class_name).value
            except ValueError:
                raise ConfigurationError(f"Invalid class hint for {name!r}: {class_name!r}") from None
            logger.debug(f"Added class hint: {name} = {class_name}")

        for entry in config.get("bosses") or []:
            boss = ConfigLoader._parse_boss(entry)
            wow_data.BOSSES[boss.name] = boss
            logger.debug(f"Added boss: {boss.name} ({len(boss.units)} units)")

        for class_name, spells in (config.get("class_spells") or {}).items():
            try:
                tag = ClassTag.parse(class_name)
            except ValueError:
                raise ConfigurationError(f"Unknown class in class_spells: {class_name!r}") from None
            registry = wow_data.CLASS_SPELLS.setdefault(tag.value, {})
            for spell_id, spell_name in (spells or {}).items():
                try:
                    registry[int(spell_id)] = str(spell_name)
                    logger.debug(f"Added {tag.value} spell: {spell_id} = {spell_name}")
                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid spell ID {spell_id}: {e}")

        settings = replace(settings, hints=hints, **overrides)
        settings.validate()
        logger.info("Custom configuration applied successfully")
        return settings

    @staticmethod
    def _parse_boss(entry: Any) -> wow_data.BossDefinition:
        if isinstance(entry, str):
            return wow_data.BossDefinition.single(entry)
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigurationError(f"Boss entry needs a name: {entry!r}")

        timeout = entry.get("timeout")
        try:
            timeout = float(timeout) if timeout is not None else None
        except (ValueError, TypeError):
            raise ConfigurationError(f"Invalid timeout for boss {entry['name']!r}: {timeout!r}") from None

        units = entry.get("units") or [entry["name"]]
        kill_units = entry.get("kill_units") or units
        if not set(kill_units) <= set(units):
            raise ConfigurationError(f"Kill units of {entry['name']!r} must be among its units")
        return wow_data.BossDefinition.group(entry["name"], units, kill_units, timeout)


def load_and_apply_config(config_path: Optional[str] = None,
                          settings: Optional[ParserSettings] = None) -> ParserSettings:
    """
    Load and apply configuration in one step.

    Args:
        config_path: Optional path to custom config file
        settings: Settings to start from

    Returns:
        Resulting settings
    """
    loader = ConfigLoader()
    config = loader.load_config(config_path)
    if not config:
        return settings or ParserSettings()
    return loader.apply_config(config, settings)
