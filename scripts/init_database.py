"""
CLI script to create the database schema and optionally seed knowledge items.

Usage:
    python scripts/init_database.py                      # Create tables if missing
    python scripts/init_database.py --reset              # Drop and recreate
    python scripts/init_database.py --seed items.json    # Load knowledge items
    python scripts/init_database.py --config path/to/config.json

Seed files hold a JSON list of items. Each item has a "type" plus the
fields that type accepts; folders may nest further items under "children":

    [
        {"type": "folder", "title": "Guides", "children": [
            {"type": "document", "title": "Getting started", "content": "..."}
        ]}
    ]
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from knowledge_assistant.context import AppContext
from knowledge_assistant.core import get_config, get_logger, ConfigurationError, ValidationError
from knowledge_assistant.core.config_loader import reload_config
from knowledge_assistant.database import DatabaseManager, reset_schema, get_statistics
from knowledge_assistant.knowledge import KnowledgeBaseService, build_item


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Create the Knowledge Assistant database and seed knowledge items"
    )

    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables and recreate them"
    )

    parser.add_argument(
        "--seed",
        type=str,
        help="JSON file of knowledge items to insert"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to custom config.json file"
    )

    parser.add_argument(
        "--user-id",
        type=int,
        default=None,
        help="created_by for seeded items (default: gui.default_user_id)"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output"
    )

    return parser.parse_args()


def seed_items(
    service: KnowledgeBaseService,
    entries: list,
    user_id: int,
    parent_id: str = None,
    quiet: bool = False
) -> int:
    """
    Insert seed entries depth-first.

    Args:
        service: Knowledge base service.
        entries: Item dicts, possibly with nested "children".
        user_id: created_by for every item.
        parent_id: Folder the entries belong to.
        quiet: Suppress per-item output.

    Returns:
        Number of items created.
    """
    created = 0

    for entry in entries:
        fields = dict(entry)
        children = fields.pop("children", [])
        item_type = fields.pop("type", None)
        fields.setdefault("created_by", user_id)
        if parent_id:
            fields["parent_id"] = parent_id

        item = build_item(item_type, **fields)
        item_id = service.create_item(item)
        created += 1

        if not quiet:
            print(f"  + {item.type:<14} {item.title[:50]:<50} {item_id}")

        if children:
            created += seed_items(service, children, user_id, item_id, quiet)

    return created


def main():
    """Main entry point for database initialization."""
    args = parse_args()

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}")
            sys.exit(1)
        reload_config(config_path)

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        sys.exit(1)

    logger = get_logger(__name__)

    print("=" * 60)
    print("Knowledge Assistant - Database Setup")
    print("=" * 60)
    print(f"Database path:     {config.paths.database_path}")
    print(f"Reset mode:        {args.reset}")
    print(f"Seed file:         {args.seed or '-'}")
    print(f"Embeddings:        {'enabled' if config.embedding.api_key else 'no API key, skipped'}")
    print("=" * 60)

    if args.reset:
        response = input("This will DELETE all conversations and knowledge items. Continue? [y/N] ")
        if response.lower() != "y":
            print("Aborted.")
            sys.exit(0)
        reset_schema(DatabaseManager(config.paths.database_path), config.search.tokenizer)

    context = AppContext.create(config)

    if args.seed:
        seed_path = Path(args.seed)
        try:
            with open(seed_path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error: Could not read seed file {seed_path}: {e}")
            sys.exit(1)

        if not isinstance(entries, list):
            print("Error: Seed file must contain a JSON list of items")
            sys.exit(1)

        user_id = args.user_id if args.user_id is not None else config.gui.default_user_id

        print("\nSeeding knowledge items...\n")
        try:
            created = seed_items(context.knowledge_service, entries, user_id, quiet=args.quiet)
        except ValidationError as e:
            logger.error(f"Seeding stopped: {e.message}")
            print(f"\nError: invalid seed item: {e.message}")
            sys.exit(1)

        print(f"\nCreated {created:,} items")

    stats = get_statistics(context.db)

    print("=" * 60)
    print("Database Ready")
    print("=" * 60)
    print(f"Knowledge items:   {stats['total_items']:,}")
    print(f"With embeddings:   {stats['embedded_items']:,}")
    print(f"Conversations:     {stats['total_conversations']:,}")
    print(f"Messages:          {stats['total_messages']:,}")
    print("=" * 60)

    sys.exit(0)


if __name__ == "__main__":
    main()
