"""
Content repository - the two content sources searched by the orchestrator.

Repositories return only approved, active items; the search core does not
re-check moderation or activity flags.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import asyncpg

from eventscout.models import SearchCandidate

logger = logging.getLogger(__name__)


class ContentRepository(ABC):
    """Source of event and listing candidates."""

    @abstractmethod
    async def fetch_upcoming_events(self) -> List[SearchCandidate]:
        """Approved business events that have not started yet."""

    @abstractmethod
    async def fetch_active_listings(self) -> List[SearchCandidate]:
        """Active, moderated community listings."""


class InMemoryContentRepository(ContentRepository):
    """Repository over candidates already held in memory."""

    def __init__(
        self,
        events: Iterable[SearchCandidate] = (),
        listings: Iterable[SearchCandidate] = ()
    ):
        self.events = list(events)
        self.listings = list(listings)

    @classmethod
    def from_rows(
        cls,
        event_rows: Iterable[Dict[str, Any]] = (),
        listing_rows: Iterable[Dict[str, Any]] = ()
    ) -> 'InMemoryContentRepository':
        """Build a repository from backend-shaped rows."""
        return cls(
            events=[SearchCandidate.from_event_row(row) for row in event_rows],
            listings=[SearchCandidate.from_listing_row(row) for row in listing_rows],
        )

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> 'InMemoryContentRepository':
        """
        Load a fixture file of the form ``{"events": [...], "listings": [...]}``.

        Args:
            path: Path to the JSON fixture

        Returns:
            Repository holding the fixture's candidates
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        repository = cls.from_rows(data.get("events", []), data.get("listings", []))
        logger.info(
            f"Loaded {len(repository.events)} events and "
            f"{len(repository.listings)} listings from {path}"
        )
        return repository

    async def fetch_upcoming_events(self) -> List[SearchCandidate]:
        return list(self.events)

    async def fetch_active_listings(self) -> List[SearchCandidate]:
        return list(self.listings)


class PostgresContentRepository(ContentRepository):
    """Repository reading the ``events`` and ``personal_listings`` tables."""

    EVENTS_SQL = """
        SELECT id, title, description, category, start_date, end_date,
               cost, is_free, age_min, age_max, location
        FROM events
        WHERE is_approved = TRUE
          AND start_date >= NOW()
        ORDER BY start_date ASC
        LIMIT $1
    """

    LISTINGS_SQL = """
        SELECT *
        FROM personal_listings
        WHERE is_active = TRUE
          AND moderation_status = 'approved'
        ORDER BY created_at DESC
    """

    def __init__(self, pool: asyncpg.Pool, event_limit: int = 200):
        self.pool = pool
        self.event_limit = event_limit

    async def fetch_upcoming_events(self) -> List[SearchCandidate]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(self.EVENTS_SQL, self.event_limit)

        logger.debug(f"Fetched {len(rows)} upcoming events")
        return [SearchCandidate.from_event_row(dict(row)) for row in rows]

    async def fetch_active_listings(self) -> List[SearchCandidate]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(self.LISTINGS_SQL)

        logger.debug(f"Fetched {len(rows)} active listings")
        return [SearchCandidate.from_listing_row(dict(row)) for row in rows]
