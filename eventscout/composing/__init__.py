"""Response composition for search results"""

from .response_composer import (
    ResponseComposer,
    NO_RESULTS_MESSAGE,
    DEGRADED_MESSAGE,
    format_price,
    format_when,
)

__all__ = [
    "ResponseComposer",
    "NO_RESULTS_MESSAGE",
    "DEGRADED_MESSAGE",
    "format_price",
    "format_when",
]
