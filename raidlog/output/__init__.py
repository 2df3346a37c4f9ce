"""
Output consumers persisting encounter results.
"""

from .writer import JsonDirectoryWriter

__all__ = ["JsonDirectoryWriter"]
