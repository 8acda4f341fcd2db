"""
Command-line interface for the closet item store.

Usage:
    closet-filter init-db [--drop]
    closet-filter add --size 100 --color red --category shirt [--note "..."]
    closet-filter search [--sizes 100,110] [--colors red] [--categories shirt] [--text re]
    closet-filter search --saved
    closet-filter options [--json]
    closet-filter count [--by size|color|category]
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import duckdb

from closet_filter.config import config
from closet_filter.config.logging_config import get_logger, setup_logging
from closet_filter.database.schema import drop_all_tables, initialize_database
from closet_filter.errors import ClosetFilterError
from closet_filter.filters.normalize import normalize_state
from closet_filter.models.filter_state import FilterState, PaginationParameters
from closet_filter.models.item import Item
from closet_filter.services.search import ItemSearchService
from closet_filter.services.snapshot import SnapshotStore
from closet_filter.store.repository import ItemRepository

logger = get_logger("cli")


def _split(value: Optional[str]) -> List[str]:
    return value.split(",") if value else []


def _state_from_args(args: argparse.Namespace) -> FilterState:
    if getattr(args, "saved", False):
        state = SnapshotStore(args.snapshot).load()
        if state is not None:
            return state
    return normalize_state(
        sizes=_split(args.sizes),
        colors=_split(args.colors),
        categories=_split(args.categories),
        search_text=args.text or "",
    )


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sizes", help="Comma-separated sizes")
    parser.add_argument("--colors", help="Comma-separated colors")
    parser.add_argument("--categories", help="Comma-separated categories")
    parser.add_argument("--text", help="Substring of color, category or note")
    parser.add_argument("--saved", action="store_true", help="Use the saved filter state")


def cmd_init_db(repository: ItemRepository, args: argparse.Namespace) -> int:
    conn = repository.db.connection
    if args.drop:
        drop_all_tables(conn)
        initialize_database(conn)
    print(f"Database ready: {repository.db.db_path} ({repository.total_count()} items)")
    return 0


def cmd_add(repository: ItemRepository, args: argparse.Namespace) -> int:
    item = repository.insert(
        Item(
            size=args.size,
            color=args.color.strip(),
            category=args.category.strip(),
            note=args.note,
            image_path=args.image_path,
        )
    )
    print(f"Added item {item.id}: {item.summary()}")
    return 0


def cmd_search(repository: ItemRepository, args: argparse.Namespace) -> int:
    service = ItemSearchService(repository)
    state = _state_from_args(args)
    params = PaginationParameters.from_state(state, args.offset, args.limit)
    items = service.search_page(params)
    total = service.get_filtered_item_count(state)

    if args.save:
        SnapshotStore(args.snapshot).save(state)

    if args.json:
        print(json.dumps({
            "filters": state.to_dict(),
            "items": [item.to_dict() for item in items],
            "pagination": {"offset": args.offset, "limit": args.limit, "total": total},
        }, indent=2))
        return 0

    print(f"Filters: {state.to_display_string() or '(none)'}")
    for item in items:
        note = f" - {item.note}" if item.note else ""
        print(f"  [{item.id}] {item.summary()}{note}")
    shown_to = args.offset + len(items)
    print(f"Showing {args.offset + 1 if items else 0}-{shown_to} of {total}")
    return 0


def cmd_options(repository: ItemRepository, args: argparse.Namespace) -> int:
    options = ItemSearchService(repository).get_available_filter_options()
    if args.json:
        print(json.dumps({
            "sizes": list(options.available_sizes),
            "colors": list(options.available_colors),
            "categories": list(options.available_categories),
        }, indent=2))
        return 0

    if options.is_empty():
        print("No items in the catalog.")
        return 0
    print(f"Sizes:      {', '.join(str(s) for s in options.available_sizes)}")
    print(f"Colors:     {', '.join(options.available_colors)}")
    print(f"Categories: {', '.join(options.available_categories)}")
    return 0


def cmd_count(repository: ItemRepository, args: argparse.Namespace) -> int:
    service = ItemSearchService(repository)
    if args.by:
        for value_count in service.get_item_count_by(args.by):
            print(f"{value_count.value}: {value_count.count}")
        return 0
    print(service.get_filtered_item_count(_state_from_args(args)))
    return 0


COMMANDS = {
    "init-db": cmd_init_db,
    "add": cmd_add,
    "search": cmd_search,
    "options": cmd_options,
    "count": cmd_count,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="closet-filter", description="Closet item filtering")
    parser.add_argument("--db", type=Path, default=None, help="Database path (default: config)")
    parser.add_argument(
        "--snapshot", type=Path, default=None, help="Saved filter state file (default: config)"
    )
    parser.add_argument("--log-level", default=config.app.log_level, help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_db = subparsers.add_parser("init-db", help="Create the database schema")
    init_db.add_argument("--drop", action="store_true", help="Drop existing tables first")

    add = subparsers.add_parser("add", help="Add an item")
    add.add_argument("--size", type=int, required=True)
    add.add_argument("--color", required=True)
    add.add_argument("--category", required=True)
    add.add_argument("--note", default="")
    add.add_argument("--image-path", default="")

    search = subparsers.add_parser("search", help="List matching items, newest first")
    _add_filter_arguments(search)
    search.add_argument("--offset", type=int, default=0)
    search.add_argument("--limit", type=int, default=config.filters.default_page_size)
    search.add_argument("--save", action="store_true", help="Save these filters for next time")
    search.add_argument("--json", action="store_true", help="Output results as JSON")

    options = subparsers.add_parser("options", help="Show selectable filter values")
    options.add_argument("--json", action="store_true", help="Output results as JSON")

    count = subparsers.add_parser("count", help="Count matching items")
    _add_filter_arguments(count)
    count.add_argument("--by", choices=["size", "color", "category"], help="Group counts")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        repository = ItemRepository.open(args.db)
    except duckdb.Error as e:
        print(f"Error: cannot open database: {e}", file=sys.stderr)
        return 1

    try:
        return COMMANDS[args.command](repository, args)
    except ClosetFilterError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        repository.close()


if __name__ == "__main__":
    sys.exit(main())
