"""
Tests for the search orchestrator.

Collaborators are in-memory or stubbed so that fallback, partial-failure
and degraded paths can be exercised without network access.
"""

import asyncio
from datetime import datetime

import pytest

from conftest import WEDNESDAY, StubTextClient, make_event, make_listing
from eventscout.composing import DEGRADED_MESSAGE, NO_RESULTS_MESSAGE
from eventscout.config import AssistantConfig, SearchSettings
from eventscout.error_handling import ErrorHandler
from eventscout.models import DateRange, FilterSpec
from eventscout.parsing import AssistedParser, RuleBasedParser
from eventscout.search import SearchOrchestrator
from eventscout.services import (
    ContentRepository,
    InMemoryContentRepository,
    InMemoryInteractionTracker,
    InteractionTracker,
)


class FailingRepository(ContentRepository):
    """Repository whose event and/or listing source raises."""

    def __init__(self, events=(), listings=(), fail_events=False, fail_listings=False):
        self.events = list(events)
        self.listings = list(listings)
        self.fail_events = fail_events
        self.fail_listings = fail_listings
        self.calls = []

    async def fetch_upcoming_events(self):
        self.calls.append("events")
        if self.fail_events:
            raise ConnectionError("events table unavailable")
        return self.events

    async def fetch_active_listings(self):
        self.calls.append("listings")
        if self.fail_listings:
            raise ConnectionError("listings table unavailable")
        return self.listings


class FailingTracker(InteractionTracker):

    async def record_view(self, user_id, item_id):
        raise RuntimeError("tracking store down")


class SlowTracker(InteractionTracker):

    def __init__(self):
        self.views = []

    async def record_view(self, user_id, item_id):
        await asyncio.sleep(0.05)
        self.views.append((user_id, item_id))


class ExplodingEngine:

    def apply(self, candidates, spec, now=None):
        raise ZeroDivisionError("boom")


def build(repository, client=None, tracker=None, **kwargs):
    parser = AssistedParser(client) if client is not None else None
    return SearchOrchestrator(
        repository,
        parser=parser,
        tracker=tracker,
        clock=lambda: WEDNESDAY,
        **kwargs
    )


@pytest.mark.asyncio
async def test_free_family_weekend_search(weekend_events, community_listings):
    repository = InMemoryContentRepository(weekend_events, community_listings)
    orchestrator = build(repository)

    result = await orchestrator.search("free family activities this weekend")

    assert [c.id for c in result.events] == ["pumpkin"]
    assert result.listings == []
    assert result.total_matches == 1
    assert result.filters.date_range == DateRange.THIS_WEEKEND
    assert result.parser == "rule_based"
    assert result.degraded is False
    assert "Pumpkin Patch Family Day" in result.message


@pytest.mark.asyncio
@pytest.mark.parametrize("query,event_ids,listing_ids", [
    ("live music", ["jazz"], []),
    ("garage sale", [], ["maple-sale"]),
    ("book club", [], ["readers"]),
])
async def test_targeted_queries_exclude_other_kind(query, event_ids, listing_ids,
                                                   weekend_events, community_listings):
    """A category or listing type query only returns candidates of that category or type."""
    orchestrator = build(InMemoryContentRepository(weekend_events, community_listings))

    result = await orchestrator.search(query)

    assert [c.id for c in result.events] == event_ids
    assert [c.id for c in result.listings] == listing_ids
    assert result.total_matches == len(event_ids) + len(listing_ids)


@pytest.mark.asyncio
async def test_assisted_parser_used_when_available(weekend_events):
    client = StubTextClient(response='{"categories": ["Music & Concerts"]}')
    orchestrator = build(InMemoryContentRepository(weekend_events), client=client)

    result = await orchestrator.search("something with a saxophone")

    assert result.parser == "assisted"
    assert [c.id for c in result.events] == ["jazz"]


@pytest.mark.asyncio
@pytest.mark.parametrize("client", [
    StubTextClient(error=ConnectionError("unreachable")),
    StubTextClient(response="I think you want family events!"),
    StubTextClient(response='{"age_range": 99}'),
])
async def test_falls_back_to_rule_based_parser(client, weekend_events):
    orchestrator = build(InMemoryContentRepository(weekend_events), client=client)

    result = await orchestrator.search("free family activities this weekend")

    expected = RuleBasedParser().parse_sync("free family activities this weekend")
    assert result.filters == expected
    assert result.parser == "rule_based"
    assert [c.id for c in result.events] == ["pumpkin"]


@pytest.mark.asyncio
async def test_zero_matches_returns_no_results_message(weekend_events):
    orchestrator = build(InMemoryContentRepository(weekend_events))

    result = await orchestrator.search("underwater basket weaving")

    assert result.events == []
    assert result.listings == []
    assert result.total_matches == 0
    assert result.message == NO_RESULTS_MESSAGE


@pytest.mark.asyncio
async def test_one_source_failing_still_returns_the_other(weekend_events, community_listings):
    repository = FailingRepository(weekend_events, community_listings, fail_events=True)
    orchestrator = build(repository)

    result = await orchestrator.search("garage sale")

    assert result.events == []
    assert [c.id for c in result.listings] == ["maple-sale"]
    assert result.degraded is False


@pytest.mark.asyncio
async def test_failed_source_is_retried(community_listings):
    repository = FailingRepository(listings=community_listings, fail_events=True)
    handler = ErrorHandler(max_retries=3, backoff_base_seconds=0)
    orchestrator = build(repository, error_handler=handler)

    await orchestrator.search("book club")

    assert repository.calls.count("events") == 3
    assert repository.calls.count("listings") == 1


@pytest.mark.asyncio
async def test_truncation_reports_total_matches():
    events = [make_event(f"e{i}", start=datetime(2026, 10, 20, i, 0)) for i in range(15)]
    listings = [make_listing(f"l{i}") for i in range(8)]
    orchestrator = build(InMemoryContentRepository(events, listings))

    result = await orchestrator.search("")

    assert len(result.events) == 10
    assert len(result.listings) == 5
    assert result.total_matches == 23
    assert [c.id for c in result.events] == [f"e{i}" for i in range(10)]
    assert "...and 12 more events!" in result.message


@pytest.mark.asyncio
async def test_excluded_source_is_not_fetched(weekend_events, community_listings):
    repository = FailingRepository(weekend_events, community_listings)
    client = StubTextClient(response='{"include_events": false}')
    orchestrator = build(repository, client=client)

    result = await orchestrator.search("community stuff only")

    assert repository.calls == ["listings"]
    assert result.events == []
    assert len(result.listings) == 2


@pytest.mark.asyncio
async def test_top_event_view_is_tracked(weekend_events):
    tracker = InMemoryInteractionTracker()
    orchestrator = build(InMemoryContentRepository(weekend_events), tracker=tracker)

    await orchestrator.search("free family activities this weekend", user_id="user-1")
    await orchestrator.aclose()

    assert tracker.views == [("user-1", "pumpkin")]


@pytest.mark.asyncio
async def test_no_tracking_without_user(weekend_events):
    tracker = InMemoryInteractionTracker()
    orchestrator = build(InMemoryContentRepository(weekend_events), tracker=tracker)

    await orchestrator.search("family")
    await orchestrator.aclose()

    assert tracker.views == []


@pytest.mark.asyncio
async def test_tracking_failure_does_not_affect_result(weekend_events):
    orchestrator = build(InMemoryContentRepository(weekend_events), tracker=FailingTracker())

    result = await orchestrator.search("family", user_id="user-1")
    await orchestrator.aclose()

    assert result.degraded is False
    assert result.total_matches == 4


@pytest.mark.asyncio
async def test_search_does_not_wait_for_tracking(weekend_events):
    tracker = SlowTracker()
    orchestrator = build(InMemoryContentRepository(weekend_events), tracker=tracker)

    await orchestrator.search("family", user_id="user-1")
    assert tracker.views == []

    await orchestrator.aclose()
    assert tracker.views == [("user-1", "movie")]


@pytest.mark.asyncio
async def test_unexpected_error_returns_degraded_result(weekend_events):
    orchestrator = build(InMemoryContentRepository(weekend_events), engine=ExplodingEngine())

    result = await orchestrator.search("family")

    assert result.degraded is True
    assert result.message == DEGRADED_MESSAGE
    assert result.events == []
    assert result.filters == FilterSpec()


@pytest.mark.asyncio
async def test_none_query_is_broad(weekend_events):
    orchestrator = build(InMemoryContentRepository(weekend_events))

    result = await orchestrator.search(None)

    assert result.filters.is_broad()
    assert result.total_matches == 5


class TestFromSettings:

    def test_without_client_uses_rule_based(self):
        settings = SearchSettings(assistant=AssistantConfig(api_key=None))

        orchestrator = SearchOrchestrator.from_settings(InMemoryContentRepository(), settings=settings)

        assert isinstance(orchestrator.parser, RuleBasedParser)

    def test_with_client_uses_assisted(self):
        settings = SearchSettings()

        orchestrator = SearchOrchestrator.from_settings(
            InMemoryContentRepository(), settings=settings, client=StubTextClient()
        )

        assert isinstance(orchestrator.parser, AssistedParser)
        assert isinstance(orchestrator.fallback_parser, RuleBasedParser)

    def test_assisted_parsing_disabled(self):
        settings = SearchSettings(assistant=AssistantConfig(assisted_parsing=False))

        orchestrator = SearchOrchestrator.from_settings(
            InMemoryContentRepository(), settings=settings, client=StubTextClient()
        )

        assert isinstance(orchestrator.parser, RuleBasedParser)

    def test_limits_and_window_come_from_settings(self):
        settings = SearchSettings()
        settings.limits.max_events = 2
        settings.filtering.week_window = "calendar"

        orchestrator = SearchOrchestrator.from_settings(InMemoryContentRepository(), settings=settings)

        assert orchestrator.max_events == 2
        assert orchestrator.engine.week_window == "calendar"
