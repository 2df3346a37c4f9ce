"""
Segmentation module for identifying boss encounters in the event stream.
"""

from .encounters import DEFAULT_INACTIVITY_TIMEOUT, EncounterSegmenter

__all__ = ["EncounterSegmenter", "DEFAULT_INACTIVITY_TIMEOUT"]
