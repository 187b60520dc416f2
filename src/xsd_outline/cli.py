"""
CLI commands for inspecting XML Schema outlines.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import OutlineConfig
from .files import LocalFileSystem
from .models import TreeItem
from .outline import SchemaOutline


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _load(path: str) -> Optional[SchemaOutline]:
    config = OutlineConfig.from_env()
    files = LocalFileSystem(
        config.workspace_root,
        max_results=config.search_max_results,
        timeout=config.search_timeout,
    )
    outline = SchemaOutline(files=files, config=config)
    try:
        text = files.read(path)
    except OSError as e:
        print(f"✗ Cannot read {path}: {e}")
        return None
    outline.update(text, path)
    return outline


def cmd_check(args):
    """Classify a document and report its imports."""
    setup_logging(args.verbose)

    outline = _load(args.path)
    if outline is None:
        return 1
    snapshot = outline.snapshot
    if not outline.is_schema:
        print(f"✗ {args.path} is not an XML Schema document")
        return 1
    bindings = snapshot.document_set.bindings
    print(f"✓ {args.path} is an XML Schema document ({len(bindings)} imports)")
    for binding in bindings.values():
        print(f"  ○ {binding.namespace or '(no namespace)'} -> {binding.location}")
    for error in snapshot.errors:
        print(f"  ✗ {error}")
    return 0 if not snapshot.errors else 2


def cmd_tree(args):
    """Print the outline tree."""
    setup_logging(args.verbose)

    outline = _load(args.path)
    if outline is None:
        return 1
    if not outline.is_schema:
        print(f"✗ {args.path} is not an XML Schema document")
        return 1

    node = None
    if args.locator:
        node = outline.find_node(args.locator)
        if node is None:
            print(f"✗ Node not found: {args.locator}")
            return 1
    items = outline.build_tree(node, args.depth)

    if args.json:
        print(json.dumps([item.to_dict() for item in items], indent=2))
        return 0
    for line in _render(outline, items):
        print(line)
    return 0


def _render(outline: SchemaOutline, items: List[TreeItem], indent: int = 0) -> List[str]:
    lines = []
    for item in items:
        marker = "+" if item.collapsible else "-"
        text = f"{'  ' * indent}{marker} {item.label}"
        if item.description:
            text += f" : {item.description}"
        decoration = outline.decorations.get(item.node_id)
        if decoration is not None:
            if decoration.badge:
                text += f" [{decoration.badge}]"
            if decoration.nillable:
                text += " (nillable)"
        lines.append(text)
        lines.extend(_render(outline, item.children, indent + 1))
    return lines


def cmd_locate(args):
    """Resolve a locator to its source line."""
    setup_logging(args.verbose)

    outline = _load(args.path)
    if outline is None:
        return 1
    target = outline.focus(args.locator)
    if target is None:
        print(f"✗ Element not found: {args.locator}")
        return 1
    print(f"{target.location}:{target.line + 1}")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="XML Schema outline CLI",
        prog="xsd-outline"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check whether a file is an XML Schema and list its imports"
    )
    check_parser.add_argument("path", help="Schema file")
    check_parser.set_defaults(func=cmd_check)

    # Tree command
    tree_parser = subparsers.add_parser(
        "tree",
        help="Print the outline tree"
    )
    tree_parser.add_argument("path", help="Schema file")
    tree_parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Levels to expand (default: 3)"
    )
    tree_parser.add_argument(
        "--locator",
        help="Start from the node addressed by this locator instead of the roots"
    )
    tree_parser.add_argument(
        "--json",
        action="store_true",
        help="Print tree items as JSON"
    )
    tree_parser.set_defaults(func=cmd_tree)

    # Locate command
    locate_parser = subparsers.add_parser(
        "locate",
        help="Print file:line (1-based) of the construct a locator addresses"
    )
    locate_parser.add_argument("path", help="Schema file")
    locate_parser.add_argument("locator", help="Locator, e.g. //schema/element[@name='Order']")
    locate_parser.set_defaults(func=cmd_locate)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
