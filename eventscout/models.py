"""
Data models for Event Scout.

This module defines the core data structures shared by the parsers, the
filter engine, the response composer and the search orchestrator.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DateRange(str, Enum):
    """Relative date windows a query can ask for."""
    NONE = "none"
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    THIS_WEEKEND = "this_weekend"
    NEXT_WEEK = "next_week"


class CandidateKind(str, Enum):
    EVENT = "event"
    LISTING = "listing"


# Event taxonomy used by businesses when posting events
EVENT_CATEGORIES: Tuple[str, ...] = (
    "Family & Kids",
    "Sports & Recreation",
    "Arts & Culture",
    "Music & Concerts",
    "Food & Dining",
    "Community",
    "Education",
    "Business & Networking",
    "Health & Wellness",
    "Seasonal & Holiday",
)

# Community listing taxonomy (stored value -> display label)
LISTING_TYPES: Dict[str, str] = {
    "garage_sale": "Garage Sale",
    "estate_sale": "Estate Sale",
    "moving_sale": "Moving Sale",
    "community_event": "Community Event",
    "meetup": "Meetup",
    "study_group": "Study Group",
    "book_club": "Book Club",
    "sports_team": "Sports Team",
    "hobby_group": "Hobby Group",
    "other": "Other",
}

_CATEGORY_LOOKUP = {category.lower(): category for category in EVENT_CATEGORIES}
_LISTING_TYPE_LOOKUP = {
    **{label.lower(): value for value, label in LISTING_TYPES.items()},
    **{value: value for value in LISTING_TYPES},
}

# The backend stores "all ages" as 0-99
_OPEN_AGE_BAND = (0, 99)


def normalize_category(value: str) -> str:
    """Map a category label (any case) onto the canonical event category.

    Raises:
        ValueError: If the value is not part of the event taxonomy
    """
    canonical = _CATEGORY_LOOKUP.get(str(value).strip().lower())
    if canonical is None:
        raise ValueError(f"Unknown event category: {value!r}")
    return canonical


def normalize_listing_type(value: str) -> str:
    """Map a listing type value or label onto its stored value.

    Raises:
        ValueError: If the value is not part of the listing taxonomy
    """
    key = str(value).strip().lower()
    canonical = _LISTING_TYPE_LOOKUP.get(key) or _LISTING_TYPE_LOOKUP.get(key.replace(" ", "_"))
    if canonical is None:
        raise ValueError(f"Unknown listing type: {value!r}")
    return canonical


def listing_type_label(value: Optional[str]) -> str:
    """Human readable label for a listing type value."""
    if not value:
        return LISTING_TYPES["other"]
    return LISTING_TYPES.get(value, value.replace("_", " ").title())


class FilterSpec(BaseModel):
    """Structured, closed-vocabulary representation of a parsed search intent.

    Instances are frozen: once a parser produces one, nothing downstream can
    change it.

    Attributes:
        date_range: Relative date window, ``none`` for no date constraint
        categories: Event categories to keep (empty keeps all)
        listing_types: Listing type values to keep (empty keeps all)
        include_events: Whether business events should be searched
        include_listings: Whether community listings should be searched
        is_free: Keep only free items
        max_price: Upper bound on cost
        age_range: Age that must fall inside an item's age band
        keywords: Lowercase relevance tokens, in query order
    """
    model_config = ConfigDict(frozen=True)

    date_range: DateRange = DateRange.NONE
    categories: FrozenSet[str] = frozenset()
    listing_types: FrozenSet[str] = frozenset()
    include_events: bool = True
    include_listings: bool = True
    is_free: bool = False
    max_price: Optional[Decimal] = Field(default=None, ge=0)
    age_range: Optional[int] = Field(default=None, ge=0, le=18)
    keywords: Tuple[str, ...] = ()

    @field_validator("date_range", mode="before")
    @classmethod
    def _default_date_range(cls, value: Any) -> Any:
        return DateRange.NONE if value is None else value

    @field_validator("categories", mode="before")
    @classmethod
    def _validate_categories(cls, value: Any) -> FrozenSet[str]:
        if value is None:
            return frozenset()
        return frozenset(normalize_category(item) for item in value)

    @field_validator("listing_types", mode="before")
    @classmethod
    def _validate_listing_types(cls, value: Any) -> FrozenSet[str]:
        if value is None:
            return frozenset()
        return frozenset(normalize_listing_type(item) for item in value)

    @field_validator("keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        keywords: List[str] = []
        for keyword in value:
            token = str(keyword).strip().lower()
            if token and token not in keywords:
                keywords.append(token)
        return tuple(keywords)

    def is_broad(self) -> bool:
        """True when no criterion is active, so every candidate matches."""
        return (
            self.date_range == DateRange.NONE
            and not self.categories
            and not self.listing_types
            and not self.is_free
            and self.max_price is None
            and self.age_range is None
            and not self.keywords
        )


class SearchCandidate(BaseModel):
    """Unified event-or-listing record used by the filtering stage.

    Listings are frequently not time-bound, so ``start_date`` may be None.
    """
    id: str
    kind: CandidateKind = CandidateKind.EVENT
    title: str = ""
    description: str = ""
    category: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    cost: Decimal = Decimal("0")
    is_free: bool = False
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    location: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("title", "description", "location", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("cost", mode="before")
    @classmethod
    def _default_cost(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @classmethod
    def from_event_row(cls, row: Dict[str, Any]) -> 'SearchCandidate':
        """Create a candidate from an ``events`` table row.

        Args:
            row: Mapping with the backend's event column names

        Returns:
            SearchCandidate of kind ``event``
        """
        age_min, age_max = _age_band(row.get("age_min"), row.get("age_max"))
        return cls(
            id=row["id"],
            kind=CandidateKind.EVENT,
            title=row.get("title"),
            description=row.get("description"),
            category=row.get("category"),
            start_date=row.get("start_date"),
            end_date=row.get("end_date"),
            cost=row.get("cost"),
            is_free=bool(row.get("is_free", False)),
            age_min=age_min,
            age_max=age_max,
            location=row.get("location"),
        )

    @classmethod
    def from_listing_row(cls, row: Dict[str, Any]) -> 'SearchCandidate':
        """Create a candidate from a ``personal_listings`` table row.

        The listing type becomes the candidate category. Listings are free to
        attend unless they carry a cost.

        Args:
            row: Mapping with the backend's listing column names

        Returns:
            SearchCandidate of kind ``listing``
        """
        cost = row.get("cost") or Decimal("0")
        return cls(
            id=row["id"],
            kind=CandidateKind.LISTING,
            title=row.get("title"),
            description=row.get("description"),
            category=row.get("listing_type") or row.get("category"),
            start_date=row.get("start_date") or row.get("event_date"),
            end_date=row.get("end_date"),
            cost=cost,
            is_free=bool(row.get("is_free", Decimal(str(cost)) == 0)),
            location=row.get("location") or row.get("address"),
        )


def _age_band(age_min: Optional[int], age_max: Optional[int]) -> Tuple[Optional[int], Optional[int]]:
    if age_min is None and age_max is None:
        return None, None
    if (age_min or 0, age_max if age_max is not None else _OPEN_AGE_BAND[1]) == _OPEN_AGE_BAND:
        return None, None
    return age_min, age_max


class SearchResult(BaseModel):
    """Outcome of a single search.

    Attributes:
        message: Natural-language summary of the results
        events: Matching events, date order, capped
        listings: Matching community listings, date order, capped
        filters: The FilterSpec that produced the results
        total_matches: Number of matches before truncation
        parser: Which parser produced ``filters``
        degraded: True for the degraded-service response
    """
    message: str
    events: List[SearchCandidate] = []
    listings: List[SearchCandidate] = []
    filters: FilterSpec = FilterSpec()
    total_matches: int = 0
    parser: Optional[str] = None
    degraded: bool = False
