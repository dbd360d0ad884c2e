"""
Filter configuration.

Which optional stages run for a parse. Loaded from the saved preference
mapping (see src.config); with no arguments every optional stage is off.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Preference keys, as stored by src.config
MIN_BUFFER = "min_buffer"
GENERIC_ATTRIBUTES = "generic_attributes"
GENERIC_ELEMENTAL_RESISTS = "generic_elemental_resists"
CLEAR_BEFORE_APPLY = "clear_before_apply"

PREFERENCE_KEYS = [MIN_BUFFER, GENERIC_ATTRIBUTES, GENERIC_ELEMENTAL_RESISTS, CLEAR_BEFORE_APPLY]


@dataclass
class FilterConfig:
    """Resolved options for one pipeline run.

    buffer_percent: shrink minimums by this percentage (None = off)
    group_attributes: fold attribute stats into ATTRIBUTES
    group_resistances: fold elemental resistances into ELEMENTAL_RESIST
    clear_first: clear the search form before setting filters
    """
    buffer_percent: Optional[float] = None
    group_attributes: bool = False
    group_resistances: bool = False
    clear_first: bool = False


def parse_buffer(value) -> Optional[float]:
    """Read a stored buffer value. Blank or invalid means no buffer.

    Values outside 0-100 are clamped.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        buffer = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid buffer value %r", value)
        return None
    if buffer != buffer:  # NaN
        logger.warning("Ignoring invalid buffer value %r", value)
        return None
    return min(max(buffer, 0.0), 100.0)


def load_filter_config(prefs: dict) -> FilterConfig:
    """Load FilterConfig from saved preferences.

    Absent keys disable their feature.
    """
    if not prefs:
        return FilterConfig()

    return FilterConfig(
        buffer_percent=parse_buffer(prefs.get(MIN_BUFFER)),
        group_attributes=bool(prefs.get(GENERIC_ATTRIBUTES, False)),
        group_resistances=bool(prefs.get(GENERIC_ELEMENTAL_RESISTS, False)),
        clear_first=bool(prefs.get(CLEAR_BEFORE_APPLY, False)),
    )
