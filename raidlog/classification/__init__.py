"""
Participant classification from the observed event stream.
"""

from .classifier import ParticipantClassifier

__all__ = ["ParticipantClassifier"]
