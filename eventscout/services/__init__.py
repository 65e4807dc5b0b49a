"""External collaborators used by the search core"""

from .repository import ContentRepository, InMemoryContentRepository, PostgresContentRepository
from .text_understanding import TextUnderstandingClient, AnthropicTextClient
from .tracking import (
    InteractionTracker,
    NullTracker,
    InMemoryInteractionTracker,
    PostgresInteractionTracker,
)

__all__ = [
    "ContentRepository",
    "InMemoryContentRepository",
    "PostgresContentRepository",
    "TextUnderstandingClient",
    "AnthropicTextClient",
    "InteractionTracker",
    "NullTracker",
    "InMemoryInteractionTracker",
    "PostgresInteractionTracker",
]
