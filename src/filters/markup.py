"""Stage 2: Markup canonicalization.

Item text copied from the game wraps keywords in bracket markup:
``[Resistances|Cold Resistance]`` shows the second alternative and
keeps the first as an internal id. ``[Spirit]`` is a plain tooltip link.
"""

import re

ALTERNATION_RE = re.compile(r"\[[^\]|]+\|([^\]]+)\]")
BRACKET_RE = re.compile(r"[\[\]]")


def clean_line(line: str) -> str:
    """Strip bracket markup, keeping the displayed alternative.

    >>> clean_line("+12% to [Resistances|Cold Resistance]")
    '+12% to Cold Resistance'
    >>> clean_line("+20 to [Spirit]")
    '+20 to Spirit'
    """
    line = ALTERNATION_RE.sub(r"\1", line)
    return BRACKET_RE.sub("", line)
