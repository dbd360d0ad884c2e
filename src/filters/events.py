"""Filter events sent to the trade search page.

A FilterSet becomes an ordered list of events:

  clear (optional) -> ungrouped stats -> attribute entries
    -> resistance entries -> item class (if known)

Each event renders to the message the page listens for.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import FamilyGroup, FilterSet, Magnitude


class EventKind(Enum):
    """Kinds of filter event, valued by the page's message type."""
    CLEAR_ALL = "CLEAR_SEARCH_FORM"
    SET_SIMPLE_FILTER = "SET_STAT_FILTER_FROM_TEXT"
    SET_GROUPED_FILTER = "SET_EXPANDED_STAT_FILTER"
    SET_ITEM_CLASS = "SET_ITEM_CLASS_FILTER"


@dataclass
class FilterEvent:
    """One instruction for the search page. max is never set."""
    kind: EventKind
    template: Optional[str] = None
    min: Magnitude = None
    max: Magnitude = None
    count: Optional[int] = None
    item_class: Optional[str] = None

    def to_message(self) -> dict:
        """Render as the page message."""
        message: dict = {"type": self.kind.value}
        if self.kind == EventKind.SET_SIMPLE_FILTER:
            message.update(humanText=self.template, min=self.min, max=self.max)
        elif self.kind == EventKind.SET_GROUPED_FILTER:
            message.update(humanText=self.template, count=self.count, min=self.min, max=self.max)
        elif self.kind == EventKind.SET_ITEM_CLASS:
            message["itemClass"] = self.item_class
        return message


def _group_events(group: FamilyGroup) -> list[FilterEvent]:
    return [
        FilterEvent(
            EventKind.SET_GROUPED_FILTER,
            template=template,
            min=entry.magnitude,
            count=entry.count,
        )
        for template, entry in group.items()
    ]


def build_events(filter_set: FilterSet, clear_first: bool = False) -> list[FilterEvent]:
    """Build the ordered event list for a FilterSet."""
    events: list[FilterEvent] = []
    if clear_first:
        events.append(FilterEvent(EventKind.CLEAR_ALL))

    for stat in filter_set.stats:
        events.append(FilterEvent(
            EventKind.SET_SIMPLE_FILTER,
            template=stat.template,
            min=stat.magnitude,
        ))

    events.extend(_group_events(filter_set.attributes))
    events.extend(_group_events(filter_set.resistances))

    if filter_set.item_class:
        events.append(FilterEvent(EventKind.SET_ITEM_CLASS, item_class=filter_set.item_class))
    return events
