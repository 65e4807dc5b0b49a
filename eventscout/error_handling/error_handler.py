"""
Error handler with retry logic for Event Scout.

Implements exponential backoff, per-attempt timeouts and diagnostic logging
for calls to external collaborators.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional
from datetime import datetime


# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior with exponential backoff.

    Attributes:
        max_retries: Maximum number of attempts (1 means no retry)
        timeout_seconds: Per-attempt timeout, None for no timeout
        backoff_base_seconds: Delay before the first retry
    """
    max_retries: int = 1
    timeout_seconds: Optional[float] = None
    backoff_base_seconds: float = 0.5

    def get_backoff_delay(self, attempt: int) -> float:
        """
        Calculate backoff delay before retry attempt.

        delay = backoff_base_seconds * (2 ^ attempt)

        Args:
            attempt: The retry attempt number (0-indexed)

        Returns:
            Delay in seconds before the retry attempt
        """
        return self.backoff_base_seconds * (2 ** attempt)


class ErrorHandler:
    """
    Error handler with retry logic and diagnostic logging.

    Attributes:
        config: Retry configuration
    """

    def __init__(
        self,
        max_retries: int = 1,
        timeout_seconds: Optional[float] = None,
        backoff_base_seconds: float = 0.5
    ):
        self.config = RetryConfig(
            max_retries=max(1, max_retries),
            timeout_seconds=timeout_seconds,
            backoff_base_seconds=backoff_base_seconds
        )

    async def retry_with_backoff(
        self,
        operation: Callable[..., Awaitable[Any]],
        *args,
        **kwargs
    ) -> Any:
        """
        Execute operation with exponential backoff retry logic.

        Each attempt is bounded by ``config.timeout_seconds`` when set; a
        timeout counts as a failed attempt.

        Args:
            operation: Async callable to execute
            *args: Positional arguments for the operation
            **kwargs: Keyword arguments for the operation

        Returns:
            Result from successful operation execution

        Raises:
            Exception: The last exception encountered if all retries are exhausted
        """
        last_exception = None
        name = getattr(operation, "__name__", repr(operation))

        for attempt in range(self.config.max_retries):
            try:
                logger.debug(f"Attempt {attempt + 1}/{self.config.max_retries} for operation {name}")

                if self.config.timeout_seconds is not None:
                    result = await asyncio.wait_for(
                        operation(*args, **kwargs),
                        timeout=self.config.timeout_seconds
                    )
                else:
                    result = await operation(*args, **kwargs)

                if attempt > 0:
                    logger.info(f"Operation {name} succeeded on attempt {attempt + 1}")
                return result

            except Exception as e:
                last_exception = e

                self.log_failure(
                    operation_name=name,
                    error=e,
                    attempt=attempt + 1,
                    max_attempts=self.config.max_retries,
                )

                if attempt == self.config.max_retries - 1:
                    break

                backoff_delay = self.config.get_backoff_delay(attempt)
                logger.info(f"Waiting {backoff_delay:.1f}s before retry...")
                await asyncio.sleep(backoff_delay)

        raise last_exception

    def log_failure(
        self,
        operation_name: str,
        error: BaseException,
        attempt: int = 1,
        max_attempts: int = 1,
        **context: Any
    ) -> None:
        """
        Log error with timestamp, context, and diagnostic data.

        Args:
            operation_name: Name of the operation that failed
            error: The exception that occurred
            attempt: Current attempt number
            max_attempts: Maximum number of attempts
            **context: Extra diagnostic values
        """
        details = {
            'timestamp': datetime.now().isoformat(),
            'operation': operation_name,
            'attempt': f"{attempt}/{max_attempts}",
            'error_type': type(error).__name__,
            'error_message': str(error),
            **{k: str(v) for k, v in context.items()},
        }

        logger.error(
            f"Operation failed: {operation_name} | "
            f"Attempt: {attempt}/{max_attempts} | "
            f"Error: {type(error).__name__}: {str(error)}"
        )
        logger.debug(f"Full error context: {details}")
