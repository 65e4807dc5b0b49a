"""Query parser capability shared by the rule-based and assisted variants."""

from abc import ABC, abstractmethod

from eventscout.models import FilterSpec


class QueryParser(ABC):
    """Turns free-text search queries into a FilterSpec."""

    #: Short name reported in SearchResult.parser
    name = "parser"

    @abstractmethod
    async def parse(self, query: str) -> FilterSpec:
        """Parse ``query`` into a FilterSpec."""
