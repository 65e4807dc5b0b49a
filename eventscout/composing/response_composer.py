"""
Response composer - turns search results into a friendly summary.

The template path is deterministic and always available. The assisted path
asks the text-understanding dependency to phrase the same facts and falls
back to the template on any failure.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from eventscout.error_handling.errors import ComposeFailed
from eventscout.models import DateRange, FilterSpec, SearchCandidate, listing_type_label
from eventscout.parsing.prompts import build_response_facts, build_response_instruction
from eventscout.services.text_understanding import TextUnderstandingClient
from eventscout.filtering.date_windows import align_to

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = (
    "I couldn't find any events or activities matching your search. "
    "Try broadening your criteria or check back later for new events!"
)

DEGRADED_MESSAGE = (
    "I'm having trouble searching for events right now. "
    "Please try again or browse events directly."
)


def format_price(candidate: SearchCandidate) -> str:
    """FREE for free items, otherwise the cost without trailing zero cents."""
    if candidate.is_free:
        return "FREE"
    cost = Decimal(candidate.cost)
    if cost == cost.to_integral_value():
        return f"${cost:,.0f}"
    return f"${cost:,.2f}"


def format_when(start: Optional[datetime], now: datetime) -> str:
    """'Today at 7:00 PM', 'Tomorrow at ...' or 'Oct 3 at ...'."""
    if start is None:
        return "Date TBA"

    local = align_to(start, now)
    if local.date() == now.date():
        day = "Today"
    elif local.date() == (now + timedelta(days=1)).date():
        day = "Tomorrow"
    else:
        day = f"{local:%b} {local.day}"

    hour = local.hour % 12 or 12
    return f"{day} at {hour}:{local:%M} {local:%p}"


class ResponseComposer:
    """Renders a FilterSpec and its results as a natural-language message.

    Attributes:
        area_name: Place name used in the openers
        events_in_message: Events listed before the overflow line
        listings_in_message: Community listings listed
        client: Optional text-understanding client for assisted phrasing
    """

    OPENERS = {
        DateRange.TODAY: "Here's what's happening today in {area}:",
        DateRange.TOMORROW: "Here's what's on tomorrow in {area}:",
        DateRange.THIS_WEEKEND: "Here are some great events happening this weekend:",
        DateRange.THIS_WEEK: "Check out these events happening this week:",
        DateRange.NEXT_WEEK: "Here's what's coming up next week:",
    }

    # Nothing narrowed the search
    BROAD_OPENER = "Here's what's coming up in {area}:"

    def __init__(
        self,
        area_name: str = "Lethbridge",
        events_in_message: int = 3,
        listings_in_message: int = 2,
        client: Optional[TextUnderstandingClient] = None,
        assisted: bool = False,
        timeout_seconds: float = 4.0,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.area_name = area_name
        self.events_in_message = events_in_message
        self.listings_in_message = listings_in_message
        self.client = client
        self.assisted = assisted and client is not None
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    async def compose(
        self,
        events: Sequence[SearchCandidate],
        listings: Sequence[SearchCandidate],
        query: str,
        spec: FilterSpec,
        now: Optional[datetime] = None
    ) -> str:
        """
        Compose the message for a result set. Always returns a message.

        Args:
            events: Matching events, in display order
            listings: Matching listings, in display order
            query: Original query text
            spec: Filters that produced the results
            now: Reference moment for relative dates

        Returns:
            Summary message
        """
        template = self.compose_template(events, listings, query, spec, now)
        if not self.assisted or not (events or listings):
            return template

        try:
            return await self._compose_assisted(events, listings, query, spec, template)
        except ComposeFailed as e:
            logger.warning(f"Assisted response failed, using template: {e}")
            return template

    def compose_template(
        self,
        events: Sequence[SearchCandidate],
        listings: Sequence[SearchCandidate],
        query: str,
        spec: FilterSpec,
        now: Optional[datetime] = None
    ) -> str:
        """Deterministic template rendering of the results."""
        if now is None:
            now = self.clock()

        total = len(events) + len(listings)
        if total == 0:
            return NO_RESULTS_MESSAGE

        lines: List[str] = []

        opener = self.OPENERS.get(spec.date_range)
        if opener:
            lines.append(opener.format(area=self.area_name))
        elif spec.is_broad():
            lines.append(self.BROAD_OPENER.format(area=self.area_name))
        else:
            noun = "result" if total == 1 else "results"
            lines.append(f"I found {total} {noun} for you:")
        lines.append("")

        if spec.is_free:
            lines.append("🎉 All of these are FREE!")
            lines.append("")
        if spec.categories:
            lines.append(f"📍 Focusing on: {', '.join(sorted(spec.categories))}")
            lines.append("")

        for index, event in enumerate(events[:self.events_in_message], start=1):
            lines.append(f"{index}. **{event.title}** - {format_when(event.start_date, now)}")
            location = event.location or "Location TBA"
            lines.append(f"   📍 {location} • {format_price(event)}")
            lines.append("")

        overflow = len(events) - self.events_in_message
        if overflow > 0:
            noun = "event" if overflow == 1 else "events"
            lines.append(f"...and {overflow} more {noun}!")
            lines.append("")

        if listings:
            lines.append("🏠 Community Listings:")
            for listing in listings[:self.listings_in_message]:
                lines.append(f"• {listing.title} - {listing_type_label(listing.category)}")

        return "\n".join(lines).strip()

    async def _compose_assisted(
        self,
        events: Sequence[SearchCandidate],
        listings: Sequence[SearchCandidate],
        query: str,
        spec: FilterSpec,
        template: str
    ) -> str:
        prompt = build_response_facts(query, spec, events, listings, template)
        try:
            text = await asyncio.wait_for(
                self.client.complete(build_response_instruction(self.area_name), prompt),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise ComposeFailed(f"timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise ComposeFailed(str(e)) from e

        if not text or not text.strip():
            raise ComposeFailed("empty response")
        return text.strip()
