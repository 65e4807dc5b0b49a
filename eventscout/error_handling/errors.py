"""
Exception taxonomy for the search pipeline.

Every condition except OrchestratorFailure is recovered locally; none of
them crosses the public search boundary.
"""

from typing import Optional


class SearchError(Exception):
    """Base class for search pipeline errors."""


class ParseUnavailable(SearchError):
    """Assisted parsing could not produce a FilterSpec.

    Raised for a missing client, transport errors, timeouts and responses
    that are not a valid FilterSpec-shaped object.
    """

    def __init__(self, reason: str, cause: Optional[BaseException] = None):
        super().__init__(reason)
        self.reason = reason
        self.cause = cause


class SourceFetchFailed(SearchError):
    """A content source could not be fetched."""

    def __init__(self, source: str, cause: Optional[BaseException] = None):
        super().__init__(f"Failed to fetch {source}: {cause}")
        self.source = source
        self.cause = cause


class ComposeFailed(SearchError):
    """Assisted phrasing of the response failed."""


class OrchestratorFailure(SearchError):
    """Unexpected internal error while running a search."""
