"""Item text to search filter pipeline."""

from .models import (
    FailureKind,
    FamilyEntry,
    FilterError,
    FilterSet,
    ParsedStat,
    ParseResult,
)
from .filter_config import FilterConfig, load_filter_config
from .pipeline import FilterPipeline, parse_item_text
from .events import EventKind, FilterEvent, build_events
from .sink import (
    ApplyResult,
    DeliveryError,
    FilterSink,
    JsonLinesSink,
    RecordingSink,
    apply_filters,
)

__all__ = [
    "FailureKind",
    "FamilyEntry",
    "FilterError",
    "FilterSet",
    "ParsedStat",
    "ParseResult",
    "FilterConfig",
    "load_filter_config",
    "FilterPipeline",
    "parse_item_text",
    "EventKind",
    "FilterEvent",
    "build_events",
    "ApplyResult",
    "DeliveryError",
    "FilterSink",
    "JsonLinesSink",
    "RecordingSink",
    "apply_filters",
]
