"""Core data models and type definitions for git-wayback."""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .errors import CutoffParseError


# Type aliases for better readability
CommitHash = str

# Layout of a wayback time: date, time and an explicit numeric UTC offset,
# e.g. "2017-09-04 19:43:36 +0300".
LAYOUT = "%Y-%m-%d %H:%M:%S %z"
LAYOUT_DISPLAY = "YYYY-MM-DD HH:MM:SS +HHMM"
# strptime accepts unpadded fields, "Z" and "+03:00"; the layout does not
LAYOUT_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4}")


class SelectionPolicy(Enum):
    """How a wayback commit is selected."""
    TAGGED = "tagged"
    UNTAGGED = "untagged"

    @classmethod
    def from_flag(cls, require_tag: bool) -> "SelectionPolicy":
        """Map a 'tag required' flag to a policy."""
        return cls.TAGGED if require_tag else cls.UNTAGGED

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Outcome(Enum):
    """Outcome of a single selection call."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class CommitRecord:
    """A commit as seen by the wayback search."""
    hexsha: CommitHash
    committed_at: datetime
    summary: str = ""

    def short_sha(self, length: int = 12) -> str:
        return self.hexsha[:length]


@dataclass(frozen=True)
class TagRef:
    """A named tag reference and the commit hash it points at."""
    name: str
    target: CommitHash


@dataclass
class TagInfo:
    """A tag paired with the committer time of its target commit."""
    tag: str
    hexsha: CommitHash
    when: datetime


@dataclass
class SelectionResult:
    """Result of a wayback selection.

    A FOUND result always carries a commit. NOT_FOUND and FAILED results
    never do; FAILED carries the error that aborted the search.
    """
    policy: SelectionPolicy
    outcome: Outcome
    commit: Optional[CommitRecord] = None
    tag: Optional[str] = None
    error: Optional[Exception] = None

    @classmethod
    def found(cls, policy: SelectionPolicy, commit: CommitRecord,
              tag: Optional[str] = None) -> "SelectionResult":
        return cls(policy=policy, outcome=Outcome.FOUND, commit=commit, tag=tag)

    @classmethod
    def not_found(cls, policy: SelectionPolicy) -> "SelectionResult":
        return cls(policy=policy, outcome=Outcome.NOT_FOUND)

    @classmethod
    def failed(cls, policy: SelectionPolicy, error: Exception) -> "SelectionResult":
        return cls(policy=policy, outcome=Outcome.FAILED, error=error)

    @property
    def is_found(self) -> bool:
        return self.outcome is Outcome.FOUND


def parse_wayback_time(text: str) -> datetime:
    """Parse a wayback time written in LAYOUT.

    Args:
        text: Time such as "2017-09-04 19:43:36 +0300"

    Returns:
        Timezone-aware datetime

    Raises:
        CutoffParseError: If the text does not follow the layout
    """
    if not isinstance(text, str):
        raise CutoffParseError(repr(text), LAYOUT_DISPLAY, "not a string")

    stripped = text.strip()
    if not LAYOUT_PATTERN.fullmatch(stripped):
        raise CutoffParseError(text, LAYOUT_DISPLAY, "does not match layout")

    try:
        return datetime.strptime(stripped, LAYOUT)
    except ValueError as e:
        raise CutoffParseError(text, LAYOUT_DISPLAY, str(e)) from e


def format_wayback_time(when: datetime) -> str:
    """Render a datetime in LAYOUT."""
    return when.strftime(LAYOUT)
