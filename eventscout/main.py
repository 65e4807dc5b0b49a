"""
Main entry point and CLI for Event Scout.

Runs a single natural-language search against a JSON fixture file or the
configured PostgreSQL database and prints the summary.
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

import asyncio
import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from eventscout.config import get_search_settings
from eventscout.db import close_db, init_db
from eventscout.models import SearchCandidate, SearchResult
from eventscout.search import SearchOrchestrator
from eventscout.services import (
    InMemoryContentRepository,
    InMemoryInteractionTracker,
    PostgresContentRepository,
    PostgresInteractionTracker,
)


# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def format_candidate(candidate: SearchCandidate) -> str:
    """
    Format a single match for console output.

    Args:
        candidate: Event or listing to format

    Returns:
        Formatted string representation of the match
    """
    lines = [f"📌 {candidate.title or '[No title]'}"]
    lines.append(f"   ID: {candidate.id}")

    if candidate.category:
        lines.append(f"   Category: {candidate.category}")
    if candidate.start_date:
        lines.append(f"   Starts: {candidate.start_date:%Y-%m-%d %H:%M}")
    if candidate.location:
        lines.append(f"   Location: {candidate.location}")
    lines.append(f"   Price: {'FREE' if candidate.is_free else f'${candidate.cost}'}")

    lines.append("")
    return "\n".join(lines)


def format_result(result: SearchResult) -> str:
    """Format the whole search result for console output."""
    output: List[str] = [result.message, ""]

    output.append(f"{'='*60}")
    output.append(f"{result.total_matches} match(es) | parser: {result.parser or 'n/a'}")
    output.append(f"{'='*60}\n")

    if result.events:
        output.append(f"🎟️  EVENTS ({len(result.events)}):\n")
        output.extend(format_candidate(c) for c in result.events)

    if result.listings:
        output.append(f"🏠 LISTINGS ({len(result.listings)}):\n")
        output.extend(format_candidate(c) for c in result.listings)

    return "\n".join(output)


async def run_search(
    query: str,
    fixtures: Optional[str] = None,
    user_id: Optional[str] = None,
    as_json: bool = False,
    assisted: bool = True,
    verbose: bool = False
) -> int:
    """
    Execute one search and print it.

    Args:
        query: Free-text search query
        fixtures: JSON fixture file; the database is used when omitted
        user_id: Optional user the top event view is attributed to
        as_json: Print the SearchResult as JSON
        assisted: Allow assisted parsing when an API key is configured
        verbose: Enable verbose logging output

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    settings = get_search_settings()
    if not assisted:
        settings.assistant = replace(settings.assistant, assisted_parsing=False, assisted_responses=False)

    uses_db = fixtures is None
    try:
        if uses_db:
            pool = await init_db(settings.database)
            repository = PostgresContentRepository(pool, event_limit=settings.database.event_limit)
            tracker = PostgresInteractionTracker(pool)
        else:
            repository = InMemoryContentRepository.from_json_file(fixtures)
            tracker = InMemoryInteractionTracker()

        orchestrator = SearchOrchestrator.from_settings(repository, settings=settings, tracker=tracker)

        start_time = datetime.now()
        result = await orchestrator.search(query, user_id=user_id)
        await orchestrator.aclose()
        elapsed_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Search completed in {elapsed_time:.2f} seconds")

        if as_json:
            print(json.dumps(result.model_dump(mode="json"), indent=2))
        else:
            print(format_result(result))

        return 1 if result.degraded else 0

    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not load search data: {e}")
        print(f"❌ Could not load search data: {e}", file=sys.stderr)
        return 1

    finally:
        if uses_db:
            await close_db()


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="eventscout",
        description="Search local events and community listings in plain language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search the configured database
  eventscout "free family activities this weekend"

  # Search a fixture file without the assisted parser
  eventscout "live music tomorrow" --fixtures events.json --no-assist

  # Print the full result as JSON
  eventscout "garage sale" --fixtures events.json --json
        """
    )

    parser.add_argument(
        "query",
        help="Search query (e.g., 'kids events today', 'concerts under $20')"
    )

    parser.add_argument(
        "--fixtures",
        type=str,
        default=None,
        help='JSON file shaped {"events": [...], "listings": [...]}'
    )

    parser.add_argument(
        "--user-id",
        type=str,
        default=None,
        help="Attribute a view of the top event to this user"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )

    parser.add_argument(
        "--no-assist",
        action="store_true",
        help="Use only the rule-based parser and template responses"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        return asyncio.run(
            run_search(
                query=args.query,
                fixtures=args.fixtures,
                user_id=args.user_id,
                as_json=args.json,
                assisted=not args.no_assist,
                verbose=args.verbose
            )
        )
    except KeyboardInterrupt:
        print("\n\n⚠️  Search interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        logger.exception(f"Unexpected error in main: {str(e)}")
        print(f"❌ Unexpected error: {str(e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
