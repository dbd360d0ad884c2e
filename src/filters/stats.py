"""Stage 3: Stat parsing.

Turns a cleaned stat line into a template (numbers replaced by ``#``)
and a magnitude (the number a search threshold is built from).

Rules are tried in table order and the first match wins, so a line
that is primarily a range never falls through to the looser rules:

  range            "Adds 10 to 16 Physical Damage"   -> "Adds # to # Physical Damage", 10
  leading_number   "34% increased Projectile Speed"  -> "# increased Projectile Speed", 34
  embedded_number  "Gain 3 Mana per Enemy Killed"    -> "Gain # Mana per Enemy Killed", 3
  no_number        "Cannot be Frozen"                -> "Cannot be Frozen", None
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Union

from .models import PLACEHOLDER, Magnitude, ParsedStat

logger = logging.getLogger(__name__)

RANGE_RE = re.compile(r"(\d+)\s+to\s+(\d+)")
FIRST_INT_RE = re.compile(r"\d+")

LEADING_RE = re.compile(r"^[+-]?\d+%?")
LEADING_TOKEN_RE = re.compile(r"^([+-]?)(\d+(?:\.\d+)?)%?")
LEADING_VALUE_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?")

ANY_DIGIT_RE = re.compile(r"\d")
SIGNED_NUMBER_RE = re.compile(r"[+-]?\d+(?:\.\d+)?")
SIGNED_INT_RE = re.compile(r"[+-]?\d+")


def to_magnitude(token: str) -> Union[int, float]:
    """Convert a numeric token, keeping integral values as int.

    >>> to_magnitude("+12")
    12
    >>> to_magnitude("12.5")
    12.5
    """
    if "." not in token:
        return int(token)
    value = float(token)
    if value.is_integer():
        return int(value)
    return value


def _parse_range(line: str) -> tuple[str, Magnitude]:
    template = RANGE_RE.sub(f"{PLACEHOLDER} to {PLACEHOLDER}", line)
    return template, to_magnitude(FIRST_INT_RE.search(line).group(0))


def _parse_leading(line: str) -> tuple[str, Magnitude]:
    # Sign stays in the template: "+# to Dexterity"
    template = LEADING_TOKEN_RE.sub(rf"\g<1>{PLACEHOLDER}", line, count=1)
    return template, to_magnitude(LEADING_VALUE_RE.match(line).group(0))


def _parse_embedded(line: str) -> tuple[str, Magnitude]:
    template = SIGNED_NUMBER_RE.sub(PLACEHOLDER, line)
    return template, to_magnitude(SIGNED_INT_RE.search(line).group(0))


def _parse_plain(line: str) -> tuple[str, Magnitude]:
    return line, None


@dataclass(frozen=True)
class StatRule:
    """One step of the parsing cascade."""
    name: str
    pattern: re.Pattern
    transform: Callable[[str], tuple[str, Magnitude]]

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


STAT_RULES: list[StatRule] = [
    StatRule("range", RANGE_RE, _parse_range),
    StatRule("leading_number", LEADING_RE, _parse_leading),
    StatRule("embedded_number", ANY_DIGIT_RE, _parse_embedded),
    StatRule("no_number", re.compile(""), _parse_plain),
]


def match_rule(line: str) -> StatRule:
    """Return the first rule in the cascade that applies to a line."""
    for rule in STAT_RULES:
        if rule.matches(line):
            return rule
    # The last rule matches everything
    return STAT_RULES[-1]


def parse_stat(line: str) -> ParsedStat:
    """Parse one cleaned line into exactly one ParsedStat."""
    line = line.strip()
    rule = match_rule(line)
    template, magnitude = rule.transform(line)
    logger.debug("%s: %r -> %r (%s)", rule.name, line, template, magnitude)
    return ParsedStat(template=template.strip(), magnitude=magnitude)


def parse_stats(lines: list[str]) -> list[ParsedStat]:
    """Parse cleaned lines in order."""
    return [parse_stat(line) for line in lines]
