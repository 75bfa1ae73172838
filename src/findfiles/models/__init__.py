"""
Data models for FindFiles.

This module contains all the core data structures used throughout the system.
"""

from .file_record import (
    CommandTemplate,
    DateWindow,
    FileRecord,
    QuoteStyle,
    SortDirection,
    SortField,
    SortKey,
)
from .search_options import DisplayMode, SearchOptions

__all__ = [
    'CommandTemplate',
    'DateWindow',
    'DisplayMode',
    'FileRecord',
    'QuoteStyle',
    'SearchOptions',
    'SortDirection',
    'SortField',
    'SortKey',
]
