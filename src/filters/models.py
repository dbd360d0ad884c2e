"""Data models for the item-text filter pipeline.

All intermediate representations passed between pipeline stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

Magnitude = Optional[Union[int, float]]

PLACEHOLDER = "#"


# ---------------------------------------------------------------------------
# Stage 1-3: Lines and parsed stats
# ---------------------------------------------------------------------------

@dataclass
class ItemLines:
    """Header and candidate stat lines split out of pasted item text."""
    item_class: Optional[str] = None
    lines: list[str] = field(default_factory=list)


@dataclass
class ParsedStat:
    """A single stat line reduced to a template and a threshold."""
    template: str
    magnitude: Magnitude = None

    def to_dict(self) -> dict:
        return {"template": self.template, "magnitude": self.magnitude}


# ---------------------------------------------------------------------------
# Stage 4: Family grouping
# ---------------------------------------------------------------------------

@dataclass
class FamilyEntry:
    """A generalized template with the number of lines folded into it."""
    template: str
    magnitude: Magnitude = None
    count: int = 1

    def to_dict(self) -> dict:
        return {
            "template": self.template,
            "magnitude": self.magnitude,
            "count": self.count,
        }


# Keyed by generalized template; insertion order is output order.
FamilyGroup = dict[str, FamilyEntry]


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass
class FilterSet:
    """Output of the pipeline, handed to a filter sink."""
    stats: list[ParsedStat] = field(default_factory=list)
    attributes: FamilyGroup = field(default_factory=dict)
    resistances: FamilyGroup = field(default_factory=dict)
    item_class: Optional[str] = None

    @property
    def stat_count(self) -> int:
        """Number of filters applied: ungrouped stats plus family entries."""
        return len(self.stats) + len(self.attributes) + len(self.resistances)

    def to_dict(self) -> dict:
        return {
            "item_class": self.item_class,
            "stats": [s.to_dict() for s in self.stats],
            "attributes": [e.to_dict() for e in self.attributes.values()],
            "resistances": [e.to_dict() for e in self.resistances.values()],
        }


class FailureKind(Enum):
    """Why a parse or delivery produced no filters."""
    EMPTY_INPUT = "empty_input"
    NO_VALID_STATS = "no_valid_stats"
    DELIVERY_FAILURE = "delivery_failure"


@dataclass
class FilterError:
    """A terminal condition for one invocation."""
    kind: FailureKind
    message: str
    retryable: bool = False


@dataclass
class ParseResult:
    """Either a FilterSet or the error that prevented one."""
    filter_set: Optional[FilterSet] = None
    error: Optional[FilterError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.filter_set is not None
