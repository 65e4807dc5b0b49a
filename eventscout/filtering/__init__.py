"""
Filtering module for search candidates.

This module provides functionality to filter events and community listings
against a parsed FilterSpec.
"""

from .candidate_filter import FilterEngine
from .date_windows import DateWindow, resolve_window, weekend_window

__all__ = ['FilterEngine', 'DateWindow', 'resolve_window', 'weekend_window']
