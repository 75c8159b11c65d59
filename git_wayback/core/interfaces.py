"""Core interfaces and abstract base classes for git-wayback."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List, Optional, Dict, Any

from .models import CommitHash, CommitRecord, TagRef


class ICommitLog(ABC):
    """Reverse-chronological commit iterator holding repository resources.

    Use as a context manager; ``close`` releases the underlying handle and
    is safe to call more than once.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[CommitRecord]:
        """Iterate commits newest first."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the iteration resource."""
        pass

    def __enter__(self) -> "ICommitLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class IHistorySource(ABC):
    """Read-only view of a repository's history."""

    @abstractmethod
    def head(self) -> CommitHash:
        """Return the hash of the commit the head reference points at."""
        pass

    @abstractmethod
    def log(self, start: str) -> ICommitLog:
        """Open a newest-first commit log starting from a hash or ref name."""
        pass

    @abstractmethod
    def tags(self) -> Iterator[TagRef]:
        """Enumerate all tag references in repository order."""
        pass

    @abstractmethod
    def commit(self, hexsha: CommitHash) -> CommitRecord:
        """Resolve a commit hash to its record."""
        pass


class IConfigManager(ABC):
    """Interface for configuration management."""

    @abstractmethod
    def load_config(self, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """Load configuration from file."""
        pass

    @abstractmethod
    def save_config(self, config: Dict[str, Any], config_path: Optional[Path] = None) -> bool:
        """Save configuration to file."""
        pass

    @abstractmethod
    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values."""
        pass

    @abstractmethod
    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """Validate configuration and return any errors."""
        pass
