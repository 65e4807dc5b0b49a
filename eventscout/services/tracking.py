"""
Interaction tracking - best-effort record of what users viewed.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

import asyncpg

logger = logging.getLogger(__name__)


class InteractionTracker(ABC):
    """Records user interactions with search results."""

    @abstractmethod
    async def record_view(self, user_id: str, item_id: str) -> None:
        """Record that ``user_id`` was shown ``item_id``."""


class NullTracker(InteractionTracker):
    """Tracker that records nothing."""

    async def record_view(self, user_id: str, item_id: str) -> None:
        return None


class InMemoryInteractionTracker(InteractionTracker):
    """Tracker keeping views in a list, mostly for tests and the CLI."""

    def __init__(self):
        self.views: List[Tuple[str, str]] = []

    async def record_view(self, user_id: str, item_id: str) -> None:
        self.views.append((user_id, item_id))


class PostgresInteractionTracker(InteractionTracker):
    """Tracker writing to the ``user_interactions`` table."""

    INSERT_SQL = """
        INSERT INTO user_interactions (event_id, user_id, interaction_type)
        VALUES ($1, $2, 'view')
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def record_view(self, user_id: str, item_id: str) -> None:
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(self.INSERT_SQL, item_id, user_id)
        except asyncpg.UniqueViolationError:
            # Repeat views of the same event are already recorded
            logger.debug(f"View of {item_id} by {user_id} already recorded")
