"""Stage 4: Family classification.

Collapses stats that differ only by which attribute or element they
name into one generalized template, so a search can ask for "any
attribute" instead of one specific attribute:

  "+# to Dexterity", "+# to Strength"  ->  "+# to ATTRIBUTES" (count 2)

Each family is one pass over the ungrouped stats. Stats the pass does
not claim stay ungrouped and feed the next pass.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .models import FamilyEntry, FamilyGroup, Magnitude, ParsedStat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FamilyDefinition:
    """A generalized stat category.

    markers: substrings that put a stat in the family
    placeholder: text that replaces each term in the template
    terms: substrings replaced by the placeholder (defaults to markers)
    """
    name: str
    markers: tuple[str, ...]
    placeholder: str
    terms: tuple[str, ...] = field(default=())

    def replacement_terms(self) -> tuple[str, ...]:
        return self.terms or self.markers

    def claims(self, template: str) -> bool:
        return any(marker in template for marker in self.markers)

    def generalize(self, template: str) -> str:
        for term in self.replacement_terms():
            template = template.replace(term, self.placeholder)
        return template


ATTRIBUTES = FamilyDefinition(
    name="attributes",
    markers=("Dexterity", "Strength", "Intelligence"),
    placeholder="ATTRIBUTES",
)

# Match on the full resistance name so "Fire Damage" lines stay put,
# but only the element is generalized: "+#% to ELEMENTAL_RESIST Resistance".
ELEMENTAL_RESISTANCES = FamilyDefinition(
    name="resistances",
    markers=("Lightning Resistance", "Cold Resistance", "Fire Resistance"),
    placeholder="ELEMENTAL_RESIST",
    terms=("Lightning", "Cold", "Fire"),
)

DEFAULT_FAMILIES = {
    ATTRIBUTES.name: ATTRIBUTES,
    ELEMENTAL_RESISTANCES.name: ELEMENTAL_RESISTANCES,
}


def merge_magnitudes(existing: Magnitude, new: Magnitude) -> Magnitude:
    """Keep the smaller magnitude. None never wins over a number.

    >>> merge_magnitudes(12, 8)
    8
    >>> merge_magnitudes(None, 8)
    8
    >>> merge_magnitudes(12, None)
    12
    """
    if existing is None:
        return new
    if new is None:
        return existing
    return new if new < existing else existing


def partition_stats(
    stats: list[ParsedStat], family: FamilyDefinition
) -> tuple[list[ParsedStat], list[ParsedStat]]:
    """Split stats into (claimed by family, rest), keeping relative order."""
    matches: list[ParsedStat] = []
    rest: list[ParsedStat] = []
    for stat in stats:
        if family.claims(stat.template):
            matches.append(stat)
        else:
            rest.append(stat)
    return matches, rest


def fold_family(stats: list[ParsedStat], family: FamilyDefinition) -> FamilyGroup:
    """Generalize templates and fold duplicates into counted entries."""
    group: FamilyGroup = {}
    for stat in stats:
        template = family.generalize(stat.template)
        entry = group.get(template)
        if entry is None:
            group[template] = FamilyEntry(template=template, magnitude=stat.magnitude)
        else:
            entry.count += 1
            entry.magnitude = merge_magnitudes(entry.magnitude, stat.magnitude)
    return group


def classify_family(
    stats: list[ParsedStat], family: FamilyDefinition
) -> tuple[FamilyGroup, list[ParsedStat]]:
    """Run one family pass. Returns (family group, ungrouped rest)."""
    matches, rest = partition_stats(stats, family)
    group = fold_family(matches, family)
    logger.debug(
        "Family %s claimed %d stats into %d entries, %d left ungrouped",
        family.name, len(matches), len(group), len(rest),
    )
    return group, rest


# ---------------------------------------------------------------------------
# Custom definitions
# ---------------------------------------------------------------------------

def _as_tuple(value, key: str, name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Family '{name}': '{key}' must be a list of strings")
    return tuple(value)


def parse_family_definition(name: str, raw: dict) -> FamilyDefinition:
    """Build a FamilyDefinition from its YAML mapping."""
    if not isinstance(raw, dict):
        raise ValueError(f"Family '{name}' must be a mapping")
    markers = _as_tuple(raw.get("markers"), "markers", name)
    if not markers:
        raise ValueError(f"Family '{name}' has no markers")
    placeholder = raw.get("placeholder")
    if not placeholder or not isinstance(placeholder, str):
        raise ValueError(f"Family '{name}' has no placeholder")
    return FamilyDefinition(
        name=name,
        markers=markers,
        placeholder=placeholder,
        terms=_as_tuple(raw.get("terms"), "terms", name),
    )


def load_family_definitions(path: Path) -> dict[str, FamilyDefinition]:
    """Load family definitions from a YAML file, over the built-in ones.

    Only the built-in family names can be redefined; any other name is a
    ValueError.

    Expected layout::

        families:
          attributes:
            markers: [Dexterity, Strength, Intelligence]
            placeholder: ATTRIBUTES
          resistances:
            markers: [Fire Resistance, Cold Resistance]
            terms: [Fire, Cold]
            placeholder: ELEMENTAL_RESIST
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must be a YAML mapping")

    raw_families = data.get("families", {})
    if not isinstance(raw_families, dict):
        raise ValueError(f"{path}: 'families' must be a mapping")

    families = dict(DEFAULT_FAMILIES)
    for name, raw in raw_families.items():
        if name not in DEFAULT_FAMILIES:
            raise ValueError(
                f"{path}: unknown family '{name}' "
                f"(expected one of: {', '.join(DEFAULT_FAMILIES)})"
            )
        families[name] = parse_family_definition(name, raw)
    logger.info("Loaded %d family definitions from %s", len(raw_families), path)
    return families


def get_family(
    name: str, families: Optional[dict[str, FamilyDefinition]] = None
) -> FamilyDefinition:
    """Look up a family by name, falling back to the built-ins."""
    return (families or DEFAULT_FAMILIES).get(name, DEFAULT_FAMILIES[name])
