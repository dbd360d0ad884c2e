"""Test fixtures for item-stat-filters tests."""

from .items import (
    DAGGER_TEXT,
    METADATA_ONLY_TEXT,
    RING_TEXT,
    STAFF_TEXT,
    item_text,
)

__all__ = [
    "DAGGER_TEXT",
    "METADATA_ONLY_TEXT",
    "RING_TEXT",
    "STAFF_TEXT",
    "item_text",
]
