"""
Candidate filter implementation for search results.

This module applies a FilterSpec to events and community listings. Every
active criterion must hold for a candidate to be kept.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from eventscout.models import DateRange, FilterSpec, SearchCandidate
from .date_windows import CALENDAR, ROLLING, align_to, resolve_window


class FilterEngine:
    """Filters search candidates against a FilterSpec.

    The engine is pure: given the same candidates, spec and ``now`` it always
    returns the same list.

    Attributes:
        week_window: Interpretation of this_week/next_week (``rolling`` or
            ``calendar``)
    """

    def __init__(self, week_window: str = ROLLING):
        if week_window not in (ROLLING, CALENDAR):
            raise ValueError(f"week_window must be {ROLLING!r} or {CALENDAR!r}, got {week_window!r}")
        self.week_window = week_window

    def apply(
        self,
        candidates: Iterable[SearchCandidate],
        spec: FilterSpec,
        now: Optional[datetime] = None
    ) -> List[SearchCandidate]:
        """Apply every active criterion of ``spec`` and sort the survivors.

        Args:
            candidates: Events or listings to filter
            spec: Parsed search intent
            now: Reference moment for date ranges, defaults to the current time

        Returns:
            Matching candidates by ascending start date, undated last
        """
        if now is None:
            now = datetime.now()

        filtered = list(candidates)
        filtered = self.filter_by_date(filtered, spec.date_range, now)
        filtered = self.filter_by_membership(filtered, spec)
        filtered = self.filter_by_age(filtered, spec.age_range)
        filtered = self.filter_by_price(filtered, spec.is_free, spec.max_price)
        filtered = self.filter_by_keywords(filtered, spec.keywords)

        return self.sort_by_start(filtered, now)

    def filter_by_date(
        self,
        candidates: List[SearchCandidate],
        date_range: DateRange,
        now: datetime
    ) -> List[SearchCandidate]:
        """Keep candidates starting inside the requested window.

        Candidates without a start date are never excluded here.
        """
        window = resolve_window(date_range, now, self.week_window)
        if window is None:
            return list(candidates)

        filtered = []

        for candidate in candidates:
            if candidate.start_date is None or window.contains(candidate.start_date):
                filtered.append(candidate)

        return filtered

    def filter_by_membership(
        self,
        candidates: List[SearchCandidate],
        spec: FilterSpec
    ) -> List[SearchCandidate]:
        """Keep candidates whose category is requested.

        Event categories and listing types form one filter set. Once it is
        non-empty, every candidate must match it, so a category query drops
        all listings unless a listing type was asked for too.
        """
        allowed = spec.categories | spec.listing_types
        if not allowed:
            return list(candidates)

        filtered = []

        for candidate in candidates:
            if candidate.category not in allowed:
                continue

            filtered.append(candidate)

        return filtered

    def filter_by_age(
        self,
        candidates: List[SearchCandidate],
        age: Optional[int]
    ) -> List[SearchCandidate]:
        """Keep candidates whose age band contains ``age``.

        A missing bound is open; candidates without any band are kept.
        """
        if age is None:
            return list(candidates)

        filtered = []

        for candidate in candidates:
            if candidate.age_min is not None and age < candidate.age_min:
                continue

            if candidate.age_max is not None and age > candidate.age_max:
                continue

            filtered.append(candidate)

        return filtered

    def filter_by_price(
        self,
        candidates: List[SearchCandidate],
        is_free: bool = False,
        max_price: Optional[Decimal] = None
    ) -> List[SearchCandidate]:
        """Filter candidates by price.

        Args:
            candidates: Candidates to filter
            is_free: Keep only candidates flagged as free
            max_price: Maximum cost (inclusive), None for no maximum

        Returns:
            Candidates that meet both price criteria
        """
        filtered = []

        for candidate in candidates:
            if is_free and not candidate.is_free:
                continue

            if max_price is not None and candidate.cost > max_price:
                continue

            filtered.append(candidate)

        return filtered

    def filter_by_keywords(
        self,
        candidates: List[SearchCandidate],
        keywords: Iterable[str]
    ) -> List[SearchCandidate]:
        """Keep candidates mentioning at least one keyword in title or description."""
        keywords = [keyword.lower() for keyword in keywords]
        if not keywords:
            return list(candidates)

        filtered = []

        for candidate in candidates:
            text = f"{candidate.title} {candidate.description}".lower()
            if any(keyword in text for keyword in keywords):
                filtered.append(candidate)

        return filtered

    def sort_by_start(
        self,
        candidates: List[SearchCandidate],
        now: datetime
    ) -> List[SearchCandidate]:
        """Stable sort by ascending start date with undated candidates last."""
        dated = [c for c in candidates if c.start_date is not None]
        undated = [c for c in candidates if c.start_date is None]
        dated.sort(key=lambda c: align_to(c.start_date, now))
        return dated + undated
