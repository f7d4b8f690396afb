#!/usr/bin/env python3
"""Command line interface for junos-templater.

Usage:
    junos-templater parse router-a.conf [--format yaml]
    junos-templater render router-a.conf
    junos-templater diff router-a.conf router-b.conf [--unordered] [--summary]
    junos-templater interfaces router-a.conf router-b.conf
    junos-templater template router-a.conf router-b.conf [--interface ge-0/0/1]

Environment variables:
    JUNOS_TEMPLATER_LOG_LEVEL    Console log level (default: INFO)
    JUNOS_TEMPLATER_LOG_FILE     Also log to this file
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from .config.settings import SettingsError, TemplaterSettings, load_settings
from .config_engine import TemplateEngine, TemplateError, summarize_changes
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _dump(data: Any, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.dump(data, default_flow_style=False, sort_keys=False)
    return json.dumps(data, indent=2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="junos-templater",
        description="Parse, diff and templatize Junos-style configurations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Show the parsed tree
    junos-templater parse router-a.conf

    # Compare two routers, ignoring stanza order
    junos-templater diff router-a.conf router-b.conf --unordered --summary

    # Build a Jinja2 template from two similar routers
    junos-templater template router-a.conf router-b.conf --interface ge-0/0/1
""",
    )
    parser.add_argument("--config", type=str, help="Settings file (templater.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Print the parsed configuration tree")
    p.add_argument("file", type=Path)
    p.add_argument("--format", choices=["json", "yaml"], default="json")

    p = sub.add_parser("render", help="Parse and re-render a configuration")
    p.add_argument("file", type=Path)

    p = sub.add_parser("diff", help="Print the changes from OLD to NEW")
    p.add_argument("old", type=Path)
    p.add_argument("new", type=Path)
    p.add_argument("--unordered", action="store_true", help="Match stanzas by similarity")
    p.add_argument("--max-depth", type=int, help="Stop comparing below this depth")
    p.add_argument("--summary", action="store_true", help="Human-readable output")
    p.add_argument("--format", choices=["json", "yaml"], default="json")

    p = sub.add_parser("interfaces", help="Print interface variables of OLD")
    p.add_argument("old", type=Path)
    p.add_argument("new", type=Path)
    p.add_argument("--format", choices=["json", "yaml"], default="json")

    p = sub.add_parser("template", help="Print a Jinja2 template built from OLD")
    p.add_argument("old", type=Path)
    p.add_argument("new", type=Path)
    p.add_argument("--interface", type=str, help="Interface providing the placeholders")

    return parser


def run(args: argparse.Namespace, settings: TemplaterSettings) -> str:
    """Execute a parsed command and return its output."""
    if getattr(args, "unordered", False):
        settings.order_significant = False
    if getattr(args, "max_depth", None) is not None:
        settings.max_depth = args.max_depth

    engine = TemplateEngine(settings)

    if args.command == "parse":
        tree = engine.parse(_read(args.file), label=args.file.name)
        return _dump(tree.to_dict(), args.format)

    if args.command == "render":
        return engine.render(engine.parse(_read(args.file), label=args.file.name))

    if args.command == "template":
        return engine.template_from_pair(
            _read(args.old), _read(args.new), interface_name=args.interface
        )

    old = engine.parse(_read(args.old), label=args.old.name)
    new = engine.parse(_read(args.new), label=args.new.name)
    changes = engine.diff_engine.diff(old, new)

    if args.command == "diff":
        if args.summary:
            return summarize_changes(changes)
        return _dump([change.to_dict() for change in changes], args.format)

    return _dump(engine.extract_variables(changes), args.format)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    verbose_level = "DEBUG" if args.verbose else None

    try:
        settings = load_settings(args.config)
    except SettingsError as e:
        setup_logging(verbose_level)
        logger.error(str(e))
        return 1

    setup_logging(verbose_level, default=settings.log_level)

    try:
        output = run(args, settings)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except (OSError, UnicodeDecodeError, TemplateError) as e:
        logger.error(str(e))
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
