"""
Search routes for Event Scout.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from eventscout.models import SearchResult

logger = logging.getLogger(__name__)

router = APIRouter()


class SearchRequest(BaseModel):
    """Search request body"""
    query: str = Field(default="", max_length=500)
    user_id: Optional[str] = None


@router.post("/search", response_model=SearchResult)
async def search_events(body: SearchRequest, request: Request):
    """
    Search events and community listings with a natural-language query.

    1. Parses the query (assisted, falling back to rules)
    2. Fetches events and listings concurrently
    3. Filters, orders and truncates each set
    4. Returns the summary message with the matches
    """
    start_time = time.time()
    orchestrator = request.app.state.orchestrator

    result = await orchestrator.search(body.query, user_id=body.user_id)

    logger.info(
        f"Search {body.query!r} -> {result.total_matches} matches "
        f"in {(time.time() - start_time) * 1000:.0f}ms"
    )
    return result
