"""Core wayback models, selection logic and configuration."""

from .errors import WaybackError, CutoffParseError, NotFoundError, HistoryError, RepositoryOpenError
from .models import (
    CommitRecord, TagRef, TagInfo, SelectionPolicy, Outcome, SelectionResult,
    LAYOUT, parse_wayback_time, format_wayback_time
)
from .wayback import HistoryWalker, TagResolver, Wayback, find_all, find_current_tag

__all__ = [
    'WaybackError',
    'CutoffParseError',
    'NotFoundError',
    'HistoryError',
    'RepositoryOpenError',
    'CommitRecord',
    'TagRef',
    'TagInfo',
    'SelectionPolicy',
    'Outcome',
    'SelectionResult',
    'LAYOUT',
    'parse_wayback_time',
    'format_wayback_time',
    'HistoryWalker',
    'TagResolver',
    'Wayback',
    'find_all',
    'find_current_tag',
]
