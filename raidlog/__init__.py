"""
Combat log analysis pipeline for World of Warcraft raid logs.

Decodes versioned combat log layouts, classifies participants, splits the
stream into boss encounters and builds per-encounter statistic tables.
"""

__version__ = "0.1.0"
__author__ = "Raidlog Team"
