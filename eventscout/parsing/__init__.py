"""
Query parsing module.

Two interchangeable QueryParser variants: a deterministic rule-based parser
and an assisted parser backed by a text-understanding dependency.
"""

from .base import QueryParser
from .rule_based import RuleBasedParser
from .assisted import AssistedParser

__all__ = ['QueryParser', 'RuleBasedParser', 'AssistedParser']
