"""
Instructions for the text-understanding dependency.

The parsing instruction pins the exact FilterSpec JSON shape and the closed
vocabularies so that responses can be validated field by field.
"""

import json
from typing import Iterable, TYPE_CHECKING

from eventscout.models import EVENT_CATEGORIES, LISTING_TYPES, DateRange

if TYPE_CHECKING:
    from eventscout.models import FilterSpec, SearchCandidate


def build_parse_instruction() -> str:
    """System instruction asking for a FilterSpec-shaped JSON object."""
    date_values = ", ".join(f'"{d.value}"' for d in DateRange)
    categories = json.dumps(list(EVENT_CATEGORIES))
    listing_types = json.dumps(list(LISTING_TYPES))

    return f"""You convert search queries for a local events app into JSON filters.

Return ONLY a JSON object with exactly these fields:
{{
  "date_range": one of {date_values},
  "categories": list of event categories, chosen ONLY from {categories},
  "listing_types": list of community listing types, chosen ONLY from {listing_types},
  "include_events": true or false,
  "include_listings": true or false,
  "is_free": true or false,
  "max_price": number or null,
  "age_range": integer between 0 and 18 or null,
  "keywords": list of lowercase words that describe what the user wants
}}

RULES:
- Use "none" for date_range when the query mentions no time.
- Leave a list empty rather than guessing; never invent categories.
- Only set include_events or include_listings to false when the user clearly excludes them.
- Keywords must not repeat dates, prices or category names.

Example:
Query: "free family activities this weekend"
{{"date_range": "this_weekend", "categories": ["Family & Kids"], "listing_types": [], "include_events": true, "include_listings": true, "is_free": true, "max_price": null, "age_range": null, "keywords": []}}"""


def build_response_instruction(area_name: str) -> str:
    """System instruction for phrasing a result summary conversationally."""
    return f"""You are a friendly local events guide for {area_name}.
Summarise the search results you are given for the user in a short, warm reply.

RULES:
- Mention ONLY the events and listings provided; never invent details.
- Keep dates, times, locations and prices exactly as given.
- At most 3 events and 2 community listings, then say how many more there are.
- No more than 120 words."""


def build_response_facts(
    query: str,
    spec: 'FilterSpec',
    events: Iterable['SearchCandidate'],
    listings: Iterable['SearchCandidate'],
    template_message: str
) -> str:
    """User prompt carrying the facts the assisted reply may use."""
    events = list(events)
    listings = list(listings)
    return (
        f"User query: {query}\n"
        f"Date range: {spec.date_range.value}\n"
        f"Free only: {spec.is_free}\n"
        f"Events found: {len(events)}\n"
        f"Listings found: {len(listings)}\n\n"
        f"FACTS:\n{template_message}"
    )
