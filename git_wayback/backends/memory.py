"""In-memory repository history."""

from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence

from ..core.errors import HistoryError
from ..core.interfaces import ICommitLog, IHistorySource
from ..core.models import CommitHash, CommitRecord, TagRef


class MemoryCommitLog(ICommitLog):
    """Commit log over an already ordered list of commits."""

    def __init__(self, commits: Sequence[CommitRecord]):
        self._commits = list(commits)
        self.close_count = 0

    def __iter__(self) -> Iterator[CommitRecord]:
        return iter(self._commits)

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def close(self) -> None:
        self.close_count += 1


class InMemoryHistory(IHistorySource):
    """A history graph held in dictionaries.

    Commits are added with their parents; ``log`` walks every ancestor of the
    start commit newest first by committer time, the way ``git log`` orders
    a full history walk.
    """

    def __init__(self) -> None:
        self.commits: Dict[CommitHash, CommitRecord] = {}
        self.parents: Dict[CommitHash, List[CommitHash]] = {}
        self.refs: Dict[str, CommitHash] = {}
        self.tag_refs: Dict[str, CommitHash] = {}
        self.head_ref: Optional[str] = None
        self.logs: List[MemoryCommitLog] = []

    def add_commit(self, hexsha: CommitHash, committed_at: datetime,
                   parents: Sequence[CommitHash] = (), summary: str = "") -> CommitRecord:
        if committed_at.tzinfo is None:
            raise ValueError(f"Commit {hexsha} needs a timezone-aware time")
        record = CommitRecord(hexsha=hexsha, committed_at=committed_at, summary=summary)
        self.commits[hexsha] = record
        self.parents[hexsha] = list(parents)
        return record

    def set_ref(self, name: str, hexsha: CommitHash) -> None:
        self.refs[name] = hexsha

    def set_head(self, target: str) -> None:
        """Point HEAD at a ref name or a commit hash."""
        self.head_ref = target

    def add_tag(self, name: str, hexsha: CommitHash) -> None:
        self.tag_refs[name] = hexsha

    def _resolve(self, rev: str) -> CommitHash:
        if rev == "HEAD":
            if self.head_ref is None:
                raise HistoryError("HEAD is not set")
            rev = self.head_ref
        hexsha = self.refs.get(rev) or self.tag_refs.get(rev) or rev
        if hexsha not in self.commits:
            raise HistoryError(f"Cannot resolve {rev!r}")
        return hexsha

    def head(self) -> CommitHash:
        return self._resolve("HEAD")

    def log(self, start: str) -> MemoryCommitLog:
        seen = set()
        # An unset HEAD is an empty history, like an unborn branch
        pending = [] if start == "HEAD" and self.head_ref is None else [self._resolve(start)]
        while pending:
            hexsha = pending.pop()
            if hexsha in seen:
                continue
            if hexsha not in self.commits:
                raise HistoryError(f"Missing commit object {hexsha}")
            seen.add(hexsha)
            pending.extend(self.parents[hexsha])

        ordered = sorted((self.commits[h] for h in seen),
                         key=lambda c: c.committed_at, reverse=True)
        log = MemoryCommitLog(ordered)
        self.logs.append(log)
        return log

    def tags(self) -> Iterator[TagRef]:
        for name, target in self.tag_refs.items():
            yield TagRef(name=name, target=target)

    def commit(self, hexsha: CommitHash) -> CommitRecord:
        try:
            return self.commits[hexsha]
        except KeyError:
            raise HistoryError(f"Missing commit object {hexsha}") from None
