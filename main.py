#!/usr/bin/env python3
"""
Loremaster - Campaign Timeline Search

Command-line entry point. Wires the name registry, cache manager and search
engine together, optionally rebuilds the timeline cache from the configured
event source, and answers a query.
"""

import logging
import sys
import argparse
from typing import List

from loremaster import __version__
from loremaster.cache import CacheManager
from loremaster.config import ConfigManager
from loremaster.importers import StaticImporter
from loremaster.indexing import SearchEngine
from loremaster.models import Event
from loremaster.resolution import NameRegistry


def setup_logging(config: ConfigManager):
    """Configure logging for the application."""
    level = getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO)
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=format_str, handlers=handlers)


def build_services(config: ConfigManager):
    """
    Construct the registry, cache manager and search engine from configuration.

    Args:
        config: Loaded configuration

    Returns:
        Tuple of (registry, cache, engine)
    """
    registry = NameRegistry()
    registry.register_batch(config.known_names)
    logging.info(f"Name registry initialized with {len(registry)} names")

    cache = CacheManager(config.snapshot_file)
    cache.load_from_disk()

    engine = SearchEngine(cache, registry)
    return registry, cache, engine


def format_event(event: Event) -> str:
    """Render an event for terminal output."""
    score = getattr(event, "score", None)
    prefix = f"[{score:>4}] " if score is not None else ""
    return f"{prefix}{event.date} ({event.location}): {event.description}"


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Loremaster - Campaign Timeline Search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --rebuild                       # Rebuild the timeline cache from the event source
  python main.py --search "queen of skanktown"   # Rank timeline events for a query
  python main.py --resolve tokla                 # Resolve a (misspelled) name
  python main.py --names rh                      # Autocomplete character names
  python main.py --stats                         # Show cache statistics
        """
    )

    parser.add_argument("--config", type=str, default="config.yaml", help="Path to configuration file")
    parser.add_argument("--rebuild", action="store_true", help="Rebuild the timeline cache before anything else")
    parser.add_argument("--search", type=str, metavar="QUERY", help="Search the timeline")
    parser.add_argument("--resolve", type=str, metavar="NAME", help="Resolve a name to its canonical form")
    parser.add_argument("--names", type=str, metavar="QUERY", help="List canonical names matching a partial input")
    parser.add_argument("--character", type=str, metavar="NAME", help="List events mentioning a character")
    parser.add_argument("--location", type=str, metavar="NAME", help="List events at a location")
    parser.add_argument("--stats", action="store_true", help="Show cache statistics")
    parser.add_argument("--limit", type=int, help="Maximum number of results")
    parser.add_argument("--version", action="version", version=f"Loremaster {__version__}")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    config = ConfigManager(args.config)
    setup_logging(config)

    registry, cache, engine = build_services(config)

    if args.rebuild or cache.is_stale(config.stale_after_hours * 3600):
        result = cache.refresh(StaticImporter())
        if not result.success:
            print(f"Rebuild failed: {result.error}")
            return 1
        print(f"Timeline cache holds {result.total_events} events ({len(result.new_events)} new)")
        for event in result.new_events:
            print(f"  + {format_event(event)}")

    if args.search:
        limit = args.limit or config.max_results
        results = engine.search(args.search, limit=limit)
        if not results:
            print("No matching timeline events.")
        for event in results:
            print(format_event(event))

    if args.resolve:
        canonical = registry.resolve(args.resolve)
        print(canonical if canonical else f"Unknown name: {args.resolve}")

    if args.names is not None:
        for name in registry.search(args.names, limit=args.limit or config.autocomplete_limit):
            print(name)

    if args.character:
        for event in engine.get_character_events(args.character)[:args.limit]:
            print(format_event(event))

    if args.location:
        for event in engine.get_location_events(args.location)[:args.limit]:
            print(format_event(event))

    if args.stats:
        print(cache.stats().model_dump_json(by_alias=True, indent=2))
        print(cache.overview().model_dump_json(indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
