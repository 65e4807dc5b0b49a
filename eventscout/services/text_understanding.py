"""
Text-understanding dependency - Claude Haiku behind a narrow interface.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import anthropic

from eventscout.config import AssistantConfig

logger = logging.getLogger(__name__)


class TextUnderstandingClient(ABC):
    """Narrow interface to a language model."""

    @abstractmethod
    async def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: Optional[int] = None
    ) -> Optional[str]:
        """Send an instruction and a user prompt, return the text reply (or None)."""


class AnthropicTextClient(TextUnderstandingClient):
    """Text-understanding client using Claude Haiku (cost-optimized)"""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-haiku-20240307",
        max_tokens: int = 400,
        timeout_seconds: float = 4.0
    ):
        # The parser applies its own timeout; SDK retries would exceed it
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0
        )
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, config: AssistantConfig) -> Optional['AnthropicTextClient']:
        """Build a client from settings, or None when no API key is configured."""
        if not config.api_key:
            logger.info("ANTHROPIC_API_KEY not set; assisted parsing disabled")
            return None
        return cls(
            api_key=config.api_key,
            model=config.model,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds
        )

    async def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: Optional[int] = None
    ) -> Optional[str]:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens or self.max_tokens,
            temperature=0,
            system=system,
            messages=[{"role": "user", "content": prompt}]
        )

        if not response.content:
            return None

        block = response.content[0]
        return getattr(block, "text", None)
