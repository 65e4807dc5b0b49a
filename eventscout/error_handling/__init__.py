"""
Error handling module for Event Scout.

Provides the search error taxonomy, retry logic and diagnostic logging.
"""

from .errors import (
    SearchError,
    ParseUnavailable,
    SourceFetchFailed,
    ComposeFailed,
    OrchestratorFailure,
)
from .error_handler import ErrorHandler, RetryConfig

__all__ = [
    'SearchError',
    'ParseUnavailable',
    'SourceFetchFailed',
    'ComposeFailed',
    'OrchestratorFailure',
    'ErrorHandler',
    'RetryConfig',
]
