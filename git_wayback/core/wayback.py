"""Wayback selection: the newest commit or tag committed before a cutoff."""

import logging
from contextlib import closing
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import HistoryError, NotFoundError
from .interfaces import IHistorySource
from .models import (
    CommitRecord, SelectionPolicy, SelectionResult, TagInfo, format_wayback_time
)


logger = logging.getLogger(__name__)

TRACE_FORMAT = "%-12.12s %-32.32s %-12.12s"


def is_before(when: datetime, cutoff: datetime) -> bool:
    """Strict ordering used by every selection: equal times never qualify."""
    return when < cutoff


class HistoryWalker:
    """Finds the first commit of a newest-first log that predates a cutoff.

    The walker trusts the order of the log it is given. A log that is not in
    non-increasing commit time order yields the first qualifying commit
    encountered, which may not be the newest one.
    """

    def __init__(self, when: datetime):
        self.when = when

    def find(self, commits: Iterable[CommitRecord]) -> Optional[CommitRecord]:
        """Return the first commit committed strictly before the cutoff.

        Args:
            commits: Commits ordered newest first

        Returns:
            The matching commit, or None when no commit predates the cutoff

        Raises:
            HistoryError: If advancing the log fails
        """
        logger.debug("Searching for commit before: %s", format_wayback_time(self.when))
        logger.debug(TRACE_FORMAT, "Hash", "Commit Time", "Tag")

        for commit in commits:
            logger.debug(TRACE_FORMAT, commit.hexsha, format_wayback_time(commit.committed_at), "")
            if is_before(commit.committed_at, self.when):
                return commit

        return None


class TagResolver:
    """Finds the newest tag whose target commit predates a cutoff."""

    def __init__(self, source: IHistorySource, when: datetime):
        self.source = source
        self.when = when

    def collect(self) -> List[TagInfo]:
        """Resolve every tag to its commit time, newest first.

        Tags sharing a commit time are ordered by name.

        Raises:
            HistoryError: If any tag cannot be resolved; no partial list is
                returned
        """
        infos: List[TagInfo] = []

        with closing(self.source.tags()) as refs:
            for ref in refs:
                commit = self.source.commit(ref.target)
                infos.append(TagInfo(tag=ref.name, hexsha=commit.hexsha, when=commit.committed_at))

        # Stable sorts: name first, then time descending
        infos.sort(key=lambda info: info.tag)
        infos.sort(key=lambda info: info.when, reverse=True)

        logger.debug(f"Resolved {len(infos)} tags")
        return infos

    def select(self, infos: Sequence[TagInfo]) -> TagInfo:
        """Return the first tag of a newest-first list that predates the cutoff.

        Raises:
            NotFoundError: If no tag qualifies
        """
        logger.debug("Searching for tagged commit before: %s", format_wayback_time(self.when))
        logger.debug(TRACE_FORMAT, "Hash", "Commit Time", "Tag")

        for info in infos:
            logger.debug(TRACE_FORMAT, info.hexsha, format_wayback_time(info.when), info.tag)
            if is_before(info.when, self.when):
                return info

        raise NotFoundError()

    def find(self) -> Tuple[CommitRecord, str]:
        """Return the commit and name of the newest tag before the cutoff.

        Raises:
            NotFoundError: If no tag predates the cutoff, including when the
                repository has no tags
            HistoryError: If tag enumeration or resolution fails
        """
        info = self.select(self.collect())
        return self.source.commit(info.hexsha), info.tag


class Wayback:
    """Dispatches a wayback search to the tag or commit selection policy."""

    def __init__(self, source: IHistorySource, when: datetime,
                 require_tag: bool = False, start: str = "HEAD"):
        """Initialize a wayback search.

        Args:
            source: Repository history to search
            when: Wayback time; only commits strictly before it qualify
            require_tag: Restrict the search to tagged commits
            start: Hash or ref name the commit log starts from
        """
        self.source = source
        self.when = when
        self.policy = SelectionPolicy.from_flag(require_tag)
        self.start = start

    def find(self) -> SelectionResult:
        """Run the search once.

        Failures while walking history are returned as a FAILED result so
        that callers can tell them apart from NOT_FOUND.
        """
        try:
            if self.policy is SelectionPolicy.TAGGED:
                commit, tag = TagResolver(self.source, self.when).find()
                return SelectionResult.found(self.policy, commit, tag)

            with self.source.log(self.start) as commits:
                commit = HistoryWalker(self.when).find(commits)
        except NotFoundError:
            logger.info(f"No {self.policy.value} commit before {format_wayback_time(self.when)}")
            return SelectionResult.not_found(self.policy)
        except HistoryError as e:
            logger.error(f"{self.policy.label} search failed: {e}")
            return SelectionResult.failed(self.policy, e)

        if commit is None:
            logger.info(f"No {self.policy.value} commit before {format_wayback_time(self.when)}")
            return SelectionResult.not_found(self.policy)

        return SelectionResult.found(self.policy, commit)


def find_all(source: IHistorySource, when: datetime, start: str = "HEAD",
             policies: Optional[Sequence[SelectionPolicy]] = None) -> List[SelectionResult]:
    """Run one independent search per policy, tagged first by default."""
    policies = policies or (SelectionPolicy.TAGGED, SelectionPolicy.UNTAGGED)
    return [
        Wayback(source, when, require_tag=policy is SelectionPolicy.TAGGED, start=start).find()
        for policy in policies
    ]


def find_current_tag(source: IHistorySource) -> str:
    """Return the name of a tag pointing at the head commit.

    The first matching tag in enumeration order wins.

    Raises:
        NotFoundError: If no tag points at the head commit
        HistoryError: If the head or the tags cannot be read
    """
    head = source.head()

    with closing(source.tags()) as refs:
        for ref in refs:
            if ref.target == head:
                return ref.name

    raise NotFoundError()
