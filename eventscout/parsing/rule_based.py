"""
Rule-based query parser.

Deterministic keyword and date extraction with no external calls. It is
always available and is the fallback whenever assisted parsing fails.
"""

import logging
import re
from decimal import Decimal
from typing import List, Optional, Set, Tuple

from eventscout.models import EVENT_CATEGORIES, LISTING_TYPES, DateRange, FilterSpec
from .base import QueryParser

logger = logging.getLogger(__name__)


def _phrase_pattern(phrase: str) -> re.Pattern:
    """Whole-word pattern for a phrase, tolerating a plural ``s``."""
    return re.compile(r"\b" + re.escape(phrase) + r"s?\b")


class RuleBasedParser(QueryParser):
    """Keyword-driven parser for event search queries."""

    name = "rule_based"

    # Checked in order, first match wins. "weekend" precedes "week" so that a
    # query mentioning both resolves to the weekend; "next week" precedes the
    # bare "week".
    DATE_PHRASES: Tuple[Tuple[DateRange, Tuple[str, ...]], ...] = (
        (DateRange.TODAY, ("today",)),
        (DateRange.TOMORROW, ("tomorrow",)),
        (DateRange.THIS_WEEKEND, ("this weekend", "weekend")),
        (DateRange.NEXT_WEEK, ("next week",)),
        (DateRange.THIS_WEEK, ("this week", "week")),
    )

    # Synonyms that add a category without excluding the others
    CATEGORY_BOOSTS = {
        "Family & Kids": ("kids", "children", "family"),
        "Music & Concerts": ("music", "concert", "concerts", "live"),
        "Food & Dining": ("food", "dining", "restaurant", "restaurants"),
    }

    STOPWORDS = frozenset({
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "from", "into", "about", "near", "around", "this",
        "next", "any", "some", "are", "there", "is", "what", "whats",
        "where", "when", "which", "who", "how", "can", "find", "show", "get",
        "want", "looking", "happening", "going", "events", "event",
        "activities", "activity", "things", "thing", "stuff", "do", "me",
        "my", "our", "you", "lethbridge", "town", "city", "under", "below",
        "than", "less",
    })

    # "under 5" alone is not a price; a "$" or a price word is required
    PRICE_PATTERNS = (
        re.compile(
            r"\b(?:under|below|less than|cheaper than|max|maximum|up to|at most)"
            r"\s*\$\s*(?P<price>\d+(?:\.\d{1,2})?)"
        ),
        re.compile(
            r"\b(?:under|below|less than|cheaper than|max|maximum|up to|at most)"
            r"\s*(?P<price>\d+(?:\.\d{1,2})?)\s*(?:dollars?|bucks)\b"
        ),
        re.compile(
            r"\b(?:costs?|costing|priced?|prices)\s+(?:under|below|less than|at most|up to|max)"
            r"\s*\$?\s*(?P<price>\d+(?:\.\d{1,2})?)\b"
        ),
    )

    # (pattern, is_upper_limit); an upper limit "under N" means ages up to N - 1.
    # Only the "phrase" group is removed from the text.
    AGE_PATTERNS = (
        (re.compile(
            r"\b(?:kids|children|child|toddlers|babies|ages?|aged)\b(?:\s+[a-z]+){0,2}?\s+"
            r"(?P<phrase>(?:under|below|younger than)\s+(?P<age>\d{1,2}))\b"
        ), True),
        (re.compile(
            r"\b(?P<phrase>(?:under|below|younger than)\s+(?P<age>\d{1,2})\s*(?:years?|yrs?)(?:[\s-]*olds?)?)\b"
        ), True),
        (re.compile(r"\b(?P<phrase>age[sd]?\s+(?P<age>\d{1,2}))\b"), False),
        (re.compile(r"\b(?P<phrase>(?P<age>\d{1,2})[\s-]*(?:year|yr)s?[\s-]*olds?)\b"), False),
    )

    def __init__(self):
        self._date_patterns = [
            (date_range, [_phrase_pattern(p) for p in phrases])
            for date_range, phrases in self.DATE_PHRASES
        ]
        self._category_patterns = []
        for category in EVENT_CATEGORIES:
            label = category.lower()
            phrases = [label]
            if "&" in label:
                phrases.append(label.split("&")[0].strip())
            self._category_patterns.append((category, [_phrase_pattern(p) for p in phrases]))
        self._listing_patterns = [
            (value, _phrase_pattern(label.lower()))
            for value, label in LISTING_TYPES.items()
            if value != "other"
        ]

    async def parse(self, query: str) -> FilterSpec:
        return self.parse_sync(query)

    def parse_sync(self, query: str) -> FilterSpec:
        """
        Parse a query without suspending.

        Args:
            query: Free-text search query

        Returns:
            FilterSpec built from the recognised phrases
        """
        text = self._normalize(query)
        consumed: Set[str] = set()

        date_range, text = self._detect_date_range(text, consumed)
        max_price, text = self._detect_max_price(text)
        age_range, text = self._detect_age(text)

        tokens = re.findall(r"[a-z0-9]+", text)

        is_free = "free" in tokens
        if is_free:
            consumed.add("free")

        categories = self._detect_categories(text, tokens, consumed)
        listing_types = self._detect_listing_types(text, consumed)

        keywords = [
            token for token in tokens
            if len(token) > 2 and token not in self.STOPWORDS and token not in consumed
        ]

        spec = FilterSpec(
            date_range=date_range,
            categories=categories,
            listing_types=listing_types,
            is_free=is_free,
            max_price=max_price,
            age_range=age_range,
            keywords=keywords,
        )
        logger.debug(f"Rule-based filters for {query!r}: {spec}")
        return spec

    def _normalize(self, query: Optional[str]) -> str:
        text = (query or "").lower()
        return text.replace("'", "").replace("’", "")

    def _detect_date_range(self, text: str, consumed: Set[str]) -> Tuple[DateRange, str]:
        for date_range, patterns in self._date_patterns:
            for pattern in patterns:
                match = pattern.search(text)
                if match:
                    consumed.update(match.group(0).split())
                    return date_range, text[:match.start()] + " " + text[match.end():]
        return DateRange.NONE, text

    def _detect_max_price(self, text: str) -> Tuple[Optional[Decimal], str]:
        for pattern in self.PRICE_PATTERNS:
            match = pattern.search(text)
            if match:
                return Decimal(match.group("price")), text[:match.start()] + " " + text[match.end():]
        return None, text

    def _detect_age(self, text: str) -> Tuple[Optional[int], str]:
        for pattern, is_upper_limit in self.AGE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            age = int(match.group("age")) - (1 if is_upper_limit else 0)
            if 0 <= age <= 18:
                start, end = match.span("phrase")
                return age, text[:start] + " " + text[end:]
        return None, text

    def _detect_categories(self, text: str, tokens: List[str], consumed: Set[str]) -> List[str]:
        categories = []

        for category, patterns in self._category_patterns:
            for pattern in patterns:
                match = pattern.search(text)
                if match:
                    categories.append(category)
                    consumed.update(re.findall(r"[a-z0-9]+", match.group(0)))
                    break

        for category, synonyms in self.CATEGORY_BOOSTS.items():
            hits = [word for word in synonyms if word in tokens]
            if hits:
                consumed.update(hits)
                if category not in categories:
                    categories.append(category)

        return categories

    def _detect_listing_types(self, text: str, consumed: Set[str]) -> List[str]:
        listing_types = []

        for value, pattern in self._listing_patterns:
            match = pattern.search(text)
            if match:
                listing_types.append(value)
                consumed.update(match.group(0).split())

        return listing_types
