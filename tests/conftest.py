"""Test configuration and fixtures."""

import pytest
import tempfile
import shutil
from datetime import datetime, timezone
from pathlib import Path

import git

from git_wayback.backends.memory import InMemoryHistory


UTC = timezone.utc
ACTOR = git.Actor("Wayback Tester", "tester@example.com")


def utc(*args) -> datetime:
    """Build a UTC datetime."""
    return datetime(*args, tzinfo=UTC)


def commit_at(repo: git.Repo, message: str, when: datetime) -> git.Commit:
    """Create a commit in ``repo`` with a fixed author and committer time."""
    path = Path(repo.working_tree_dir) / "history.txt"
    with open(path, 'a', encoding='utf-8') as f:
        f.write(message + "\n")
    repo.index.add(["history.txt"])

    date = f"{int(when.timestamp())} {when.strftime('%z')}"
    return repo.index.commit(
        message,
        author=ACTOR,
        committer=ACTOR,
        author_date=date,
        commit_date=date,
    )


@pytest.fixture
def linear_history():
    """Three commits on a single branch, newest 2017-09-10."""
    history = InMemoryHistory()
    history.add_commit("c1", utc(2017, 8, 20), summary="first")
    history.add_commit("c2", utc(2017, 9, 1), parents=["c1"], summary="second")
    history.add_commit("c3", utc(2017, 9, 10), parents=["c2"], summary="third")
    history.set_ref("master", "c3")
    history.set_head("master")
    return history


@pytest.fixture
def tagged_history():
    """Commits tagged v1, v2 and v3, enumerated out of time order."""
    history = InMemoryHistory()
    history.add_commit("a2", utc(2017, 8, 15))
    history.add_commit("a3", utc(2017, 9, 2), parents=["a2"])
    history.add_commit("a1", utc(2017, 9, 10), parents=["a3"])
    history.set_ref("master", "a1")
    history.set_head("master")
    history.add_tag("v1", "a1")
    history.add_tag("v2", "a2")
    history.add_tag("v3", "a3")
    return history


@pytest.fixture
def temp_repo_dir():
    """Create a temporary directory for a git repository."""
    temp_dir = Path(tempfile.mkdtemp())

    try:
        yield temp_dir
    finally:
        shutil.rmtree(temp_dir)


@pytest.fixture
def git_repo(temp_repo_dir):
    """A git repository with three dated commits and two tags.

    Commits (newest first): third 2017-09-10, second 2017-09-01,
    first 2017-08-20. ``v0.1`` tags first (lightweight) and ``v0.2`` tags
    second (annotated).
    """
    repo = git.Repo.init(temp_repo_dir)
    first = commit_at(repo, "first", utc(2017, 8, 20, 12, 0, 0))
    second = commit_at(repo, "second", utc(2017, 9, 1, 12, 0, 0))
    commit_at(repo, "third", utc(2017, 9, 10, 12, 0, 0))

    repo.create_tag("v0.1", ref=first)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", ACTOR.name)
        writer.set_value("user", "email", ACTOR.email)
    repo.create_tag("v0.2", ref=second, message="Release 0.2")

    try:
        yield repo
    finally:
        repo.close()
