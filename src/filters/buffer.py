"""Stage 5: Buffer adjustment.

Lowers every minimum threshold by a percentage so a search also finds
items that roll slightly worse than the pasted one.
"""

import logging
import math
from dataclasses import replace
from fractions import Fraction
from typing import Optional

from .models import FamilyEntry, FamilyGroup, FilterSet, Magnitude, ParsedStat

logger = logging.getLogger(__name__)


def is_integral(value) -> bool:
    """True for ints and for floats with no fractional part."""
    if isinstance(value, int):
        return True
    return float(value).is_integer()


def adjust_magnitude(magnitude: Magnitude, buffer_percent: float) -> Magnitude:
    """Shrink a magnitude by buffer_percent.

    Integral magnitudes stay integral (rounded half up), fractional ones
    are rounded to two places.

    >>> adjust_magnitude(10, 10)
    9
    >>> adjust_magnitude(12.5, 10)
    11.25
    """
    if magnitude is None:
        return None
    try:
        adjusted = magnitude * (1 - buffer_percent / 100)
    except OverflowError:
        # Integers past float range are scaled exactly
        exact = Fraction(magnitude) * (1 - Fraction(buffer_percent) / 100)
        return math.floor(exact + Fraction(1, 2))
    if is_integral(magnitude):
        return int(math.floor(adjusted + 0.5))
    return round(adjusted, 2)


def _adjust_group(group: FamilyGroup, buffer_percent: float) -> FamilyGroup:
    return {
        key: FamilyEntry(
            template=entry.template,
            magnitude=adjust_magnitude(entry.magnitude, buffer_percent),
            count=entry.count,
        )
        for key, entry in group.items()
    }


def apply_buffer(filter_set: FilterSet, buffer_percent: Optional[float]) -> FilterSet:
    """Return a new FilterSet with every magnitude buffered.

    A buffer of None leaves the FilterSet as it is.
    """
    if buffer_percent is None:
        return filter_set

    logger.debug("Applying %s%% buffer to %d filters", buffer_percent, filter_set.stat_count)
    stats = [
        ParsedStat(stat.template, adjust_magnitude(stat.magnitude, buffer_percent))
        for stat in filter_set.stats
    ]
    return replace(
        filter_set,
        stats=stats,
        attributes=_adjust_group(filter_set.attributes, buffer_percent),
        resistances=_adjust_group(filter_set.resistances, buffer_percent),
    )
