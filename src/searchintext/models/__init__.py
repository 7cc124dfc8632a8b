"""
Data models for searchintext.

This module contains all the core data structures used throughout the system.
"""

from .config import LimitsConfig, OutputConfig, OutputFormat, SearchSettings
from .search_query import SearchConfig
from .search_results import MatchKind, MatchResult, SearchCounters, SearchSummary

__all__ = [
    'LimitsConfig',
    'OutputConfig',
    'OutputFormat',
    'SearchSettings',
    'SearchConfig',
    'MatchKind',
    'MatchResult',
    'SearchCounters',
    'SearchSummary',
]
