"""Stage 1: Line extraction.

Splits pasted item text into the item class header and the candidate
stat lines. Lines carrying a colon are ``Label: value`` metadata
(rarity, requirements, quality) and never become stats.
"""

import logging
import re
from typing import Optional

from .models import ItemLines

logger = logging.getLogger(__name__)

ITEM_CLASS_PREFIX = "Item Class:"

NEWLINE_RE = re.compile(r"\r?\n")

# Plurals that do not end in a plain "s"
IRREGULAR_PLURALS = {
    "Quarterstaves": "Quarterstaff",
}


def singularize_item_class(item_class: str) -> str:
    """Turn a plural item class into the singular the search form expects.

    >>> singularize_item_class("Daggers")
    'Dagger'
    >>> singularize_item_class("Quarterstaves")
    'Quarterstaff'
    """
    if item_class in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[item_class]
    if item_class.endswith("s"):
        return item_class[:-1]
    return item_class


def parse_item_class(header: str) -> Optional[str]:
    """Extract the item class from a header line, or None if it has none."""
    if not header.startswith(ITEM_CLASS_PREFIX):
        return None
    item_class = header[len(ITEM_CLASS_PREFIX):].strip()
    return singularize_item_class(item_class)


def extract_lines(raw_text: str) -> ItemLines:
    """Split raw item text into item class and candidate stat lines.

    The first line is always consumed as the header, whether or not it
    carries an item class. Blank body lines stay candidates. Returns an
    ItemLines with no lines when the text is blank or holds nothing but
    metadata.
    """
    text = raw_text.strip()
    if not text:
        return ItemLines()

    header, *body = NEWLINE_RE.split(text)
    item_class = parse_item_class(header)

    lines = [line for line in body if ":" not in line]
    logger.debug(
        "Extracted %d candidate lines (%d discarded), item class %r",
        len(lines), len(body) - len(lines), item_class,
    )
    return ItemLines(item_class=item_class, lines=lines)
