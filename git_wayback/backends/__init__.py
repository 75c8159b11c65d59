"""History sources the wayback search can run against."""

from .git_backend import GitHistorySource, GitCommitLog
from .memory import InMemoryHistory, MemoryCommitLog

__all__ = [
    'GitHistorySource',
    'GitCommitLog',
    'InMemoryHistory',
    'MemoryCommitLog',
]
