"""
Item Stat Filters CLI.

Commands:
  parse       Parse pasted item text and show the resulting filters
  apply       Parse item text and deliver filter messages as JSON lines
  prefs       Show or change saved preferences

Item text is read from a file argument, or from stdin when omitted.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.config import get_preferences_path, load_preferences, update_preferences
from src.filters.families import load_family_definitions
from src.filters.filter_config import (
    CLEAR_BEFORE_APPLY,
    GENERIC_ATTRIBUTES,
    GENERIC_ELEMENTAL_RESISTS,
    MIN_BUFFER,
    FilterConfig,
    load_filter_config,
    parse_buffer,
)
from src.filters.models import FilterSet
from src.filters.pipeline import FilterPipeline
from src.filters.sink import JsonLinesSink, apply_filters

ON_OFF = {"on": True, "off": False}


def _read_input(path):
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _make_filter_config(args) -> FilterConfig:
    """Build FilterConfig from saved preferences, overridden by CLI args."""
    prefs = {} if getattr(args, "no_prefs", False) else load_preferences()
    config = load_filter_config(prefs)

    if getattr(args, "buffer", None) is not None:
        config.buffer_percent = parse_buffer(args.buffer)
    if getattr(args, "attributes", None) is not None:
        config.group_attributes = ON_OFF[args.attributes]
    if getattr(args, "resists", None) is not None:
        config.group_resistances = ON_OFF[args.resists]
    if getattr(args, "clear", None) is not None:
        config.clear_first = ON_OFF[args.clear]
    return config


def _make_pipeline(args) -> FilterPipeline:
    families = None
    if getattr(args, "families", None):
        try:
            families = load_family_definitions(Path(args.families))
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    return FilterPipeline(_make_filter_config(args), families=families)


def _format_magnitude(value) -> str:
    return "-" if value is None else str(value)


def _format_filter_set(filter_set: FilterSet) -> str:
    lines = []
    if filter_set.item_class:
        lines.append(f"Item class: {filter_set.item_class}")
    lines.append(f"Stats ({len(filter_set.stats)}):")
    for stat in filter_set.stats:
        lines.append(f"  {stat.template}  [min {_format_magnitude(stat.magnitude)}]")
    for title, group in (("Attributes", filter_set.attributes), ("Resistances", filter_set.resistances)):
        if group:
            lines.append(f"{title} ({len(group)}):")
            for entry in group.values():
                lines.append(
                    f"  {entry.template}  [min {_format_magnitude(entry.magnitude)}, count {entry.count}]"
                )
    return "\n".join(lines)


def parse_cmd(args):
    """Parse item text and print the filters."""
    pipeline = _make_pipeline(args)
    result = pipeline.run(_read_input(args.input))
    if not result.ok:
        print(result.error.message, file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.filter_set.to_dict(), indent=2))
    else:
        print(_format_filter_set(result.filter_set))


def apply_cmd(args):
    """Parse item text and deliver filter messages."""
    pipeline = _make_pipeline(args)
    result = pipeline.run(_read_input(args.input))
    if not result.ok:
        print(result.error.message, file=sys.stderr)
        sys.exit(1)

    if args.output:
        try:
            f = open(args.output, "w", encoding="utf-8")
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        with f:
            outcome = apply_filters(result.filter_set, JsonLinesSink(f), pipeline.config.clear_first)
    else:
        outcome = apply_filters(result.filter_set, JsonLinesSink(sys.stdout), pipeline.config.clear_first)

    print(outcome.message, file=sys.stderr)
    if not outcome.success:
        sys.exit(1)


def prefs_show_cmd(args):
    """Show saved preferences."""
    prefs = load_preferences()
    if args.json:
        print(json.dumps(prefs, indent=2))
        return
    print(f"Preferences ({get_preferences_path()}):")
    print(f"  Min buffer:                {prefs[MIN_BUFFER] or '(none)'}")
    print(f"  Generic attributes:        {'on' if prefs[GENERIC_ATTRIBUTES] else 'off'}")
    print(f"  Generic elemental resists: {'on' if prefs[GENERIC_ELEMENTAL_RESISTS] else 'off'}")
    print(f"  Clear before apply:        {'on' if prefs[CLEAR_BEFORE_APPLY] else 'off'}")


def prefs_set_cmd(args):
    """Change saved preferences."""
    changes = {}
    if args.buffer is not None:
        changes[MIN_BUFFER] = args.buffer
    if args.attributes is not None:
        changes[GENERIC_ATTRIBUTES] = ON_OFF[args.attributes]
    if args.resists is not None:
        changes[GENERIC_ELEMENTAL_RESISTS] = ON_OFF[args.resists]
    if args.clear is not None:
        changes[CLEAR_BEFORE_APPLY] = ON_OFF[args.clear]

    if not changes:
        print("Nothing to change.")
        return
    update_preferences(**changes)
    print(f"Saved {len(changes)} preference(s) to {get_preferences_path()}")


def _add_filter_options(parser, with_clear=False):
    parser.add_argument("--buffer", help="Lower minimums by this percentage (blank for none)")
    parser.add_argument("--attributes", choices=ON_OFF, help="Group Strength/Dexterity/Intelligence")
    parser.add_argument("--resists", choices=ON_OFF, help="Group Fire/Cold/Lightning resistances")
    if with_clear:
        parser.add_argument("--clear", choices=ON_OFF, help="Clear the search form first")


def build_parser():
    parser = argparse.ArgumentParser(
        description="Item Stat Filters - turn pasted item text into trade search filters"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log pipeline details to stderr",
    )

    sub = parser.add_subparsers(dest="command")

    # parse
    parse_parser = sub.add_parser("parse", help="Parse item text and show filters")
    parse_parser.add_argument("input", nargs="?", help="Item text file (default: stdin)")
    parse_parser.add_argument("--json", action="store_true", help="Output JSON")
    parse_parser.add_argument("--families", help="YAML file with family definitions")
    parse_parser.add_argument("--no-prefs", action="store_true", help="Ignore saved preferences")
    _add_filter_options(parse_parser)
    parse_parser.set_defaults(func=parse_cmd)

    # apply
    apply_parser = sub.add_parser("apply", help="Parse item text and emit filter messages")
    apply_parser.add_argument("input", nargs="?", help="Item text file (default: stdin)")
    apply_parser.add_argument("--output", "-o", help="Write messages here (default: stdout)")
    apply_parser.add_argument("--families", help="YAML file with family definitions")
    apply_parser.add_argument("--no-prefs", action="store_true", help="Ignore saved preferences")
    _add_filter_options(apply_parser, with_clear=True)
    apply_parser.set_defaults(func=apply_cmd)

    # prefs
    prefs_parser = sub.add_parser("prefs", help="Show or change saved preferences")
    prefs_sub = prefs_parser.add_subparsers(dest="prefs_command")

    prefs_show_parser = prefs_sub.add_parser("show", help="Show saved preferences")
    prefs_show_parser.add_argument("--json", action="store_true", help="Output JSON")
    prefs_show_parser.set_defaults(func=prefs_show_cmd)

    prefs_set_parser = prefs_sub.add_parser("set", help="Change saved preferences")
    _add_filter_options(prefs_set_parser, with_clear=True)
    prefs_set_parser.set_defaults(func=prefs_set_cmd)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
