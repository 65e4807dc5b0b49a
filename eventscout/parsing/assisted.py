"""
Assisted query parser.

Delegates extraction to an external text-understanding dependency and
validates whatever comes back against the FilterSpec contract.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from eventscout.error_handling.errors import ParseUnavailable
from eventscout.models import FilterSpec, normalize_category, normalize_listing_type
from eventscout.services.text_understanding import TextUnderstandingClient
from .base import QueryParser
from .prompts import build_parse_instruction
from .rule_based import RuleBasedParser

logger = logging.getLogger(__name__)

# Accepted spellings of each field in the response
FIELD_ALIASES = {
    "date_range": ("date_range", "dateRange"),
    "categories": ("categories",),
    "listing_types": ("listing_types", "listingTypes"),
    "include_events": ("include_events", "includeEvents"),
    "include_listings": ("include_listings", "includeListings"),
    "is_free": ("is_free", "isFree"),
    "max_price": ("max_price", "maxPrice"),
    "age_range": ("age_range", "ageRange"),
    "keywords": ("keywords",),
}

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class AssistedParser(QueryParser):
    """Parser backed by a text-understanding dependency.

    Any problem reaching the dependency or interpreting its answer is raised
    as ParseUnavailable; the caller decides how to fall back.

    Attributes:
        client: Text-understanding client
        timeout_seconds: Upper bound on the whole request
    """

    name = "assisted"

    def __init__(
        self,
        client: Optional[TextUnderstandingClient],
        timeout_seconds: float = 4.0,
        max_tokens: int = 400
    ):
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.instruction = build_parse_instruction()

    async def parse(self, query: str) -> FilterSpec:
        """
        Parse a query with the text-understanding dependency.

        Args:
            query: Free-text search query

        Returns:
            Validated FilterSpec

        Raises:
            ParseUnavailable: If the dependency is missing, slow, failing or
                returns something that is not a FilterSpec
        """
        if self.client is None:
            raise ParseUnavailable("no text-understanding client configured")

        try:
            raw = await asyncio.wait_for(
                self.client.complete(self.instruction, query, max_tokens=self.max_tokens),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise ParseUnavailable(f"timed out after {self.timeout_seconds}s", e) from e
        except Exception as e:
            raise ParseUnavailable(f"request failed: {e}", e) from e

        data = self._decode(raw)
        spec = self._to_filter_spec(data)
        logger.info(f"Assisted filters for {query!r}: {spec}")
        return spec

    def _decode(self, raw: Optional[str]) -> Dict[str, Any]:
        if not raw or not raw.strip():
            raise ParseUnavailable("empty response")

        text = raw.strip()
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            # Tolerate prose or code fences around the object
            match = _JSON_OBJECT.search(text)
            if not match:
                raise ParseUnavailable("response is not JSON")
            try:
                data = json.loads(match.group(0))
            except json.JSONDecodeError as e:
                raise ParseUnavailable("response is not JSON", e) from e

        if not isinstance(data, dict):
            raise ParseUnavailable(f"expected a JSON object, got {type(data).__name__}")

        return data

    def _to_filter_spec(self, data: Dict[str, Any]) -> FilterSpec:
        fields: Dict[str, Any] = {}

        for field_name, aliases in FIELD_ALIASES.items():
            for alias in aliases:
                if alias in data and data[alias] is not None:
                    fields[field_name] = data[alias]
                    break

        for field_name in ("categories", "listing_types", "keywords"):
            if field_name in fields and not isinstance(fields[field_name], list):
                raise ParseUnavailable(f"{field_name} must be a list")

        if "categories" in fields:
            fields["categories"] = self._known_values(fields["categories"], normalize_category)
        if "listing_types" in fields:
            fields["listing_types"] = self._known_values(fields["listing_types"], normalize_listing_type)
        if "keywords" in fields:
            fields["keywords"] = [
                str(keyword).lower() for keyword in fields["keywords"]
                if len(str(keyword)) > 2 and str(keyword).lower() not in RuleBasedParser.STOPWORDS
            ]

        try:
            return FilterSpec(**fields)
        except ValidationError as e:
            raise ParseUnavailable(f"response failed validation: {e.error_count()} error(s)", e) from e

    def _known_values(self, values: List[Any], normalize) -> List[str]:
        known = []
        for value in values:
            try:
                known.append(normalize(value))
            except ValueError:
                logger.warning(f"Discarding unknown value from assisted parse: {value!r}")
        return known
