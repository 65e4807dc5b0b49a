"""Shared fixtures for the search tests."""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest

from eventscout.models import CandidateKind, SearchCandidate
from eventscout.services import TextUnderstandingClient

# Wednesday; the weekend window is Fri 2026-10-16 18:00 .. Sun 2026-10-18 23:59:59
WEDNESDAY = datetime(2026, 10, 14, 10, 0)
SATURDAY = datetime(2026, 10, 17, 12, 0)


def make_event(id, category="Community", start=None, cost=0, is_free=None,
               title=None, description="", age_min=None, age_max=None,
               location="Galt Gardens"):
    """Build an event candidate with sensible defaults."""
    return SearchCandidate(
        id=id,
        kind=CandidateKind.EVENT,
        title=title or f"Event {id}",
        description=description,
        category=category,
        start_date=start,
        cost=Decimal(str(cost)),
        is_free=(Decimal(str(cost)) == 0) if is_free is None else is_free,
        age_min=age_min,
        age_max=age_max,
        location=location,
    )


def make_listing(id, listing_type="garage_sale", start=None, cost=0,
                 title=None, description="", location="12 Maple St"):
    """Build a community listing candidate with sensible defaults."""
    return SearchCandidate(
        id=id,
        kind=CandidateKind.LISTING,
        title=title or f"Listing {id}",
        description=description,
        category=listing_type,
        start_date=start,
        cost=Decimal(str(cost)),
        is_free=Decimal(str(cost)) == 0,
        location=location,
    )


class StubTextClient(TextUnderstandingClient):
    """Text-understanding stub returning a canned reply, raising, or stalling."""

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None,
                 delay: float = 0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls = []

    async def complete(self, system, prompt, max_tokens=None):
        self.calls.append((system, prompt))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def weekend_events():
    """Five events spanning different days, costs and categories.

    Only ``pumpkin`` is a free Family & Kids event inside the weekend window.
    """
    return [
        make_event("pumpkin", "Family & Kids", datetime(2026, 10, 17, 11, 0),
                   title="Pumpkin Patch Family Day"),
        make_event("crafts", "Family & Kids", datetime(2026, 10, 17, 14, 0), cost=15,
                   title="Kids Craft Workshop"),
        make_event("movie", "Family & Kids", datetime(2026, 10, 15, 19, 0),
                   title="Family Movie Night"),
        make_event("jazz", "Music & Concerts", datetime(2026, 10, 17, 19, 0),
                   title="Jazz in the Park"),
        make_event("story", "Family & Kids", datetime(2026, 10, 19, 10, 0),
                   title="Harvest Story Time"),
    ]


@pytest.fixture
def community_listings():
    return [
        make_listing("maple-sale", "garage_sale", title="Maple St Garage Sale",
                     description="Toys, books and furniture"),
        make_listing("readers", "book_club", datetime(2026, 10, 20, 19, 0), cost=5,
                     title="Westside Readers", description="Monthly book club"),
    ]
