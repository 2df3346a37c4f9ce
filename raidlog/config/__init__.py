"""
Configuration module for the combat log pipeline.

Provides parser settings, YAML configuration loading and the static game
data tables used by classification and segmentation.
"""

from .settings import ParserSettings
from .loader import ConfigLoader, load_and_apply_config

__all__ = [
    "ParserSettings",
    "ConfigLoader",
    "load_and_apply_config",
]
