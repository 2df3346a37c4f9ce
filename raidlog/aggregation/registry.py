"""
Registry of accumulator kinds.
"""

import logging
from typing import Dict, Iterable, List, Optional, Type

from ..errors import ConfigurationError
from .activity import ActivityAccumulator
from .aura import AuraAccumulator
from .base import Accumulator
from .cast import CastAccumulator
from .damage import DamageAccumulator
from .death import DeathAccumulator
from .dispel import DispelAccumulator
from .extraattack import ExtraAttackAccumulator
from .healing import HealingAccumulator
from .index import IndexAccumulator
from .interrupt import InterruptAccumulator
from .power import PowerAccumulator
from .presence import PresenceAccumulator

logger = logging.getLogger(__name__)

ACCUMULATOR_KINDS = (
    ActivityAccumulator,
    AuraAccumulator,
    CastAccumulator,
    DamageAccumulator,
    DeathAccumulator,
    DispelAccumulator,
    ExtraAttackAccumulator,
    HealingAccumulator,
    IndexAccumulator,
    InterruptAccumulator,
    PowerAccumulator,
    PresenceAccumulator,
)

ACCUMULATORS_BY_NAME: Dict[str, Type[Accumulator]] = {kind.name: kind for kind in ACCUMULATOR_KINDS}


def create_accumulators(names: Optional[Iterable[str]] = None) -> List[Accumulator]:
    """
    Instantiate accumulators.

    Args:
        names: Accumulator names to create, all kinds if None

    Returns:
        New accumulator instances in registry order

    Raises:
        ConfigurationError: If a name is not registered
    """
    if names is None:
        return [kind() for kind in ACCUMULATOR_KINDS]

    wanted = set(names)
    unknown = wanted - set(ACCUMULATORS_BY_NAME)
    if unknown:
        raise ConfigurationError(
            f"Unknown accumulators: {', '.join(sorted(unknown))} "
            f"(available: {', '.join(ACCUMULATORS_BY_NAME)})"
        )
    return [kind() for kind in ACCUMULATOR_KINDS if kind.name in wanted]
