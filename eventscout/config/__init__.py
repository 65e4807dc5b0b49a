"""Configuration module for Event Scout search."""

from .search_config import (
    SEARCH_CONFIG,
    SearchSettings,
    AssistantConfig,
    FetchConfig,
    LimitsConfig,
    FilteringConfig,
    DatabaseConfig,
    get_search_settings,
)

__all__ = [
    'SEARCH_CONFIG',
    'SearchSettings',
    'AssistantConfig',
    'FetchConfig',
    'LimitsConfig',
    'FilteringConfig',
    'DatabaseConfig',
    'get_search_settings',
]
