"""GitPython-backed repository history."""

import logging
from pathlib import Path
from typing import Iterator, Union

import git
from git.exc import BadName, BadObject, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..core.errors import HistoryError, RepositoryOpenError
from ..core.interfaces import ICommitLog, IHistorySource
from ..core.models import CommitHash, CommitRecord, TagRef


logger = logging.getLogger(__name__)

# Errors GitPython raises for unknown revisions, missing objects and
# references that do not resolve to a commit.
GIT_READ_ERRORS = (BadName, BadObject, GitCommandError, ValueError, OSError)


def to_record(commit: git.Commit) -> CommitRecord:
    """Convert a GitPython commit to a CommitRecord."""
    return CommitRecord(
        hexsha=commit.hexsha,
        committed_at=commit.committed_datetime,
        summary=str(commit.summary),
    )


def iter_empty() -> Iterator[git.Commit]:
    """Closable commit generator that yields nothing."""
    yield from ()


class GitCommitLog(ICommitLog):
    """Newest-first commit log backed by ``git rev-list``."""

    def __init__(self, commits: Iterator[git.Commit], start: str):
        self._commits = commits
        self.start = start
        self.closed = False

    def __iter__(self) -> Iterator[CommitRecord]:
        if self.closed:
            raise HistoryError(f"Commit log from {self.start} is closed")

        try:
            for commit in self._commits:
                yield to_record(commit)
        except GIT_READ_ERRORS as e:
            raise HistoryError(f"Failed to walk history from {self.start}: {e}") from e

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        # Closing the generator drops the rev-list process it reads from
        self._commits.close()
        logger.debug(f"Closed commit log from {self.start}")


class GitHistorySource(IHistorySource):
    """Read-only history of a git repository on disk."""

    def __init__(self, repo: git.Repo, first_parent: bool = False):
        """Initialize from an open repository.

        Args:
            repo: GitPython repository
            first_parent: Follow only the first parent of merge commits
        """
        self.repo = repo
        self.first_parent = first_parent

    @classmethod
    def open(cls, path: Union[str, Path], first_parent: bool = False) -> "GitHistorySource":
        """Open the repository at ``path``.

        Raises:
            RepositoryOpenError: If the path does not exist or is not a
                git repository
        """
        try:
            repo = git.Repo(str(path), search_parent_directories=False)
        except NoSuchPathError as e:
            raise RepositoryOpenError(path, "path does not exist") from e
        except InvalidGitRepositoryError as e:
            raise RepositoryOpenError(path, "not a git repository") from e

        logger.debug(f"Git repository opened at {repo.git_dir}")
        return cls(repo, first_parent=first_parent)

    def head(self) -> CommitHash:
        try:
            return self.repo.head.commit.hexsha
        except GIT_READ_ERRORS as e:
            raise HistoryError(f"Cannot resolve HEAD: {e}") from e

    def log(self, start: str) -> GitCommitLog:
        if start == "HEAD" and not self.repo.head.is_valid():
            # No commits yet: nothing can predate the cutoff
            logger.debug("HEAD is unborn, commit log is empty")
            return GitCommitLog(iter_empty(), start)

        try:
            rev = self.repo.rev_parse(start)
        except GIT_READ_ERRORS as e:
            raise HistoryError(f"Cannot resolve {start!r}: {e}") from e

        kwargs = {'first_parent': True} if self.first_parent else {}
        commits = self.repo.iter_commits(rev.hexsha, **kwargs)
        logger.debug(f"Opened commit log from {start} ({rev.hexsha[:12]})")
        return GitCommitLog(commits, start)

    def tags(self) -> Iterator[TagRef]:
        try:
            refs = list(self.repo.tags)
        except GIT_READ_ERRORS as e:
            raise HistoryError(f"Cannot list tags: {e}") from e

        for ref in refs:
            try:
                # Annotated tags are peeled to the commit they tag
                target = ref.commit.hexsha
            except GIT_READ_ERRORS as e:
                raise HistoryError(f"Cannot resolve tag {ref.name}: {e}") from e
            yield TagRef(name=ref.name, target=target)

    def commit(self, hexsha: CommitHash) -> CommitRecord:
        try:
            return to_record(self.repo.commit(hexsha))
        except GIT_READ_ERRORS as e:
            raise HistoryError(f"Cannot resolve commit {hexsha}: {e}") from e

    def close(self) -> None:
        self.repo.close()

    def __enter__(self) -> "GitHistorySource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
