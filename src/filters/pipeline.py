"""Item text to FilterSet pipeline.

Runs the stages in order:

  extract lines -> clean markup -> parse stats
    -> group attributes (optional) -> group resistances (optional)
    -> buffer minimums (optional)

Each stage takes and returns plain values, so stages can be run and
tested on their own. Conditions that stop a parse come back as a
FilterError on the ParseResult instead of being raised.
"""

import logging
from dataclasses import replace
from typing import Optional

from .buffer import apply_buffer
from .families import FamilyDefinition, classify_family, get_family
from .filter_config import FilterConfig
from .lines import extract_lines
from .markup import clean_line
from .models import (
    FailureKind, FilterError, FilterSet, ItemLines, ParsedStat, ParseResult,
)
from .stats import parse_stats

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Please paste the item text."
NO_VALID_STATS_MESSAGE = "No valid stats found in the text."


class FilterPipeline:
    """Turns pasted item text into a FilterSet."""

    def __init__(
        self,
        config: Optional[FilterConfig] = None,
        families: Optional[dict[str, FamilyDefinition]] = None,
    ):
        """
        Args:
            config: Which optional stages run. Defaults to none.
            families: Family definitions by name; built-ins when omitted.
        """
        self.config = config or FilterConfig()
        self.attributes = get_family("attributes", families)
        self.resistances = get_family("resistances", families)

    def run(self, raw_text: str) -> ParseResult:
        """Run every stage over one pasted item."""
        if not raw_text or not raw_text.strip():
            logger.info("Empty item text")
            return ParseResult(error=FilterError(FailureKind.EMPTY_INPUT, EMPTY_INPUT_MESSAGE))

        item = self.stage_extract(raw_text)
        if not item.lines:
            logger.info("No stat lines in item text")
            return ParseResult(error=FilterError(FailureKind.NO_VALID_STATS, NO_VALID_STATS_MESSAGE))

        stats = self.stage_parse(item.lines)
        filter_set = FilterSet(stats=stats, item_class=item.item_class)

        if self.config.group_attributes:
            filter_set = self.stage_group_attributes(filter_set)
        if self.config.group_resistances:
            filter_set = self.stage_group_resistances(filter_set)
        filter_set = self.stage_buffer(filter_set)

        logger.info(
            "Parsed %d filters (%d stats, %d attribute, %d resistance), item class %r",
            filter_set.stat_count, len(filter_set.stats),
            len(filter_set.attributes), len(filter_set.resistances),
            filter_set.item_class,
        )
        return ParseResult(filter_set=filter_set)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def stage_extract(self, raw_text: str) -> ItemLines:
        return extract_lines(raw_text)

    def stage_parse(self, lines: list[str]) -> list[ParsedStat]:
        return parse_stats([clean_line(line) for line in lines])

    def stage_group_attributes(self, filter_set: FilterSet) -> FilterSet:
        group, rest = classify_family(filter_set.stats, self.attributes)
        return replace(filter_set, stats=rest, attributes=group)

    def stage_group_resistances(self, filter_set: FilterSet) -> FilterSet:
        group, rest = classify_family(filter_set.stats, self.resistances)
        return replace(filter_set, stats=rest, resistances=group)

    def stage_buffer(self, filter_set: FilterSet) -> FilterSet:
        return apply_buffer(filter_set, self.config.buffer_percent)


def parse_item_text(raw_text: str, config: Optional[FilterConfig] = None) -> ParseResult:
    """Parse pasted item text with the given (or default) options."""
    return FilterPipeline(config).run(raw_text)
