"""
Search orchestrator - coordinates parsing, fetching, filtering and composing.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from eventscout.composing import DEGRADED_MESSAGE, ResponseComposer
from eventscout.config import SearchSettings, get_search_settings
from eventscout.error_handling import (
    ErrorHandler,
    OrchestratorFailure,
    ParseUnavailable,
    SourceFetchFailed,
)
from eventscout.filtering import FilterEngine
from eventscout.models import FilterSpec, SearchCandidate, SearchResult
from eventscout.parsing import AssistedParser, QueryParser, RuleBasedParser
from eventscout.services import (
    AnthropicTextClient,
    ContentRepository,
    InteractionTracker,
    NullTracker,
    TextUnderstandingClient,
)

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    """Orchestrate the complete search workflow.

    ``search`` never raises: unexpected failures produce the degraded-service
    result instead.
    """

    def __init__(
        self,
        repository: ContentRepository,
        parser: Optional[QueryParser] = None,
        fallback_parser: Optional[QueryParser] = None,
        engine: Optional[FilterEngine] = None,
        composer: Optional[ResponseComposer] = None,
        tracker: Optional[InteractionTracker] = None,
        error_handler: Optional[ErrorHandler] = None,
        max_events: int = 10,
        max_listings: int = 5,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.repository = repository
        self.fallback_parser = fallback_parser or RuleBasedParser()
        self.parser = parser or self.fallback_parser
        self.engine = engine or FilterEngine()
        self.composer = composer or ResponseComposer(clock=clock)
        self.tracker = tracker or NullTracker()
        self.error_handler = error_handler or ErrorHandler()
        self.max_events = max_events
        self.max_listings = max_listings
        self.clock = clock
        self._pending: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        repository: ContentRepository,
        settings: Optional[SearchSettings] = None,
        client: Optional[TextUnderstandingClient] = None,
        tracker: Optional[InteractionTracker] = None,
        clock: Callable[[], datetime] = datetime.now
    ) -> 'SearchOrchestrator':
        """
        Wire an orchestrator from configuration.

        Args:
            repository: Content source collaborator
            settings: Search settings, defaults to the environment-driven ones
            client: Text-understanding client, built from settings when omitted
            tracker: Interaction tracker, defaults to a no-op tracker
            clock: Source of the reference "now"

        Returns:
            Configured SearchOrchestrator
        """
        settings = settings or get_search_settings()
        assistant = settings.assistant

        if client is None:
            client = AnthropicTextClient.from_config(assistant)

        fallback_parser = RuleBasedParser()
        parser: QueryParser = fallback_parser
        if client is not None and assistant.assisted_parsing:
            parser = AssistedParser(
                client,
                timeout_seconds=assistant.timeout_seconds,
                max_tokens=assistant.max_tokens
            )

        composer = ResponseComposer(
            area_name=settings.filtering.area_name,
            events_in_message=settings.limits.events_in_message,
            listings_in_message=settings.limits.listings_in_message,
            client=client,
            assisted=assistant.assisted_responses,
            timeout_seconds=assistant.timeout_seconds,
            clock=clock
        )

        return cls(
            repository=repository,
            parser=parser,
            fallback_parser=fallback_parser,
            engine=FilterEngine(week_window=settings.filtering.week_window),
            composer=composer,
            tracker=tracker,
            error_handler=ErrorHandler(
                max_retries=settings.fetch.max_retries,
                timeout_seconds=settings.fetch.timeout_seconds
            ),
            max_events=settings.limits.max_events,
            max_listings=settings.limits.max_listings,
            clock=clock
        )

    async def search(self, query: str, user_id: Optional[str] = None) -> SearchResult:
        """
        Run a natural-language search over events and community listings.

        Args:
            query: Free-text query
            user_id: Optional user to attribute a view of the top event to

        Returns:
            SearchResult; the degraded-service result on unexpected errors
        """
        try:
            return await self._run(query, user_id)
        except Exception as e:
            failure = OrchestratorFailure(f"search failed for {query!r}: {e}")
            self.error_handler.log_failure("search", failure, query=query, cause=repr(e))
            return self.degraded_result()

    def degraded_result(self) -> SearchResult:
        """Always-valid result returned when the pipeline fails unexpectedly."""
        return SearchResult(
            message=DEGRADED_MESSAGE,
            events=[],
            listings=[],
            filters=FilterSpec(),
            total_matches=0,
            degraded=True
        )

    async def aclose(self) -> None:
        """Wait for outstanding background tracking calls."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _run(self, query: str, user_id: Optional[str]) -> SearchResult:
        query = query or ""
        logger.info(f"Search query: {query!r}")

        spec, parser_name = await self._parse(query)
        now = self.clock()

        events, listings = await asyncio.gather(
            self._fetch("events", self.repository.fetch_upcoming_events, spec.include_events),
            self._fetch("listings", self.repository.fetch_active_listings, spec.include_listings),
        )

        matched_events = self.engine.apply(events, spec, now)
        matched_listings = self.engine.apply(listings, spec, now)
        total_matches = len(matched_events) + len(matched_listings)
        logger.info(
            f"Matched {len(matched_events)}/{len(events)} events and "
            f"{len(matched_listings)}/{len(listings)} listings"
        )

        message = await self.composer.compose(matched_events, matched_listings, query, spec, now)

        if user_id and matched_events:
            self._schedule_view(user_id, matched_events[0].id)

        return SearchResult(
            message=message,
            events=matched_events[:self.max_events],
            listings=matched_listings[:self.max_listings],
            filters=spec,
            total_matches=total_matches,
            parser=parser_name
        )

    async def _parse(self, query: str) -> Tuple[FilterSpec, str]:
        try:
            return await self.parser.parse(query), self.parser.name
        except ParseUnavailable as e:
            logger.warning(f"Assisted parsing unavailable ({e.reason}); using rule-based parser")
            return await self.fallback_parser.parse(query), self.fallback_parser.name

    async def _fetch(
        self,
        source: str,
        fetch: Callable[[], Awaitable[List[SearchCandidate]]],
        enabled: bool
    ) -> List[SearchCandidate]:
        if not enabled:
            logger.debug(f"Skipping {source}: excluded by filters")
            return []

        try:
            return list(await self.error_handler.retry_with_backoff(fetch))
        except Exception as e:
            failure = SourceFetchFailed(source, e)
            logger.warning(f"{failure}; continuing without {source}")
            return []

    def _schedule_view(self, user_id: str, item_id: str) -> None:
        task = asyncio.create_task(self._record_view(user_id, item_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record_view(self, user_id: str, item_id: str) -> None:
        try:
            await self.tracker.record_view(user_id, item_id)
        except Exception as e:
            logger.warning(f"Failed to record view of {item_id} for {user_id}: {e}")
