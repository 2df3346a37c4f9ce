"""
Participant models produced by the classifier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class ClassTag(Enum):
    """Closed set of participant classes."""

    WARRIOR = "Warrior"
    PALADIN = "Paladin"
    HUNTER = "Hunter"
    ROGUE = "Rogue"
    PRIEST = "Priest"
    DEATH_KNIGHT = "Death Knight"
    SHAMAN = "Shaman"
    MAGE = "Mage"
    WARLOCK = "Warlock"
    DRUID = "Druid"
    MOB = "Mob"
    PET = "Pet"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value) -> "ClassTag":
        """
        Resolve a class tag from an enum member, value or name.

        Args:
            value: ClassTag, "Death Knight", "death_knight", "DEATH KNIGHT", ...

        Returns:
            Matching ClassTag

        Raises:
            ValueError: If nothing matches
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for tag in cls:
            if text.lower() in (tag.value.lower(), tag.name.lower()):
                return tag
        key = text.upper().replace(" ", "_")
        if key in cls.__members__:
            return cls[key]
        raise ValueError(f"Unknown class tag: {value!r}")


class Evidence(Enum):
    """Strength of the rule that fixed an actor's class, weakest first."""

    NONE = 0
    POWER = 1
    FLAGS = 2
    SPELL = 3
    PET = 4
    HINT = 5


@dataclass(frozen=True)
class Actor:
    """
    One participant.

    ``owner_id`` references another Actor by id and is only set for pets.
    """

    id: str
    name: Optional[str] = None
    class_tag: ClassTag = ClassTag.UNKNOWN
    owner_id: Optional[str] = None
    evidence: Evidence = Evidence.NONE

    @property
    def is_pet(self) -> bool:
        return self.class_tag is ClassTag.PET

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "id": self.id,
            "name": self.name,
            "class": self.class_tag.value,
            "owner": self.owner_id,
        }


ActorTable = Dict[str, Actor]
