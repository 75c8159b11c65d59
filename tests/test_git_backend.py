"""Tests for the GitPython history backend."""

import pytest
from datetime import timedelta, timezone

import git

from git_wayback.backends.git_backend import GitCommitLog, GitHistorySource
from git_wayback.core.errors import HistoryError, NotFoundError, RepositoryOpenError
from git_wayback.core.models import Outcome, parse_wayback_time
from git_wayback.core.wayback import TagResolver, Wayback, find_all, find_current_tag

from conftest import commit_at, utc


class TestOpen:
    """Test cases for opening repositories."""

    def test_open_repository(self, git_repo):
        """Test that an existing repository opens."""
        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            assert source.head() == git_repo.head.commit.hexsha

    def test_missing_path(self, temp_repo_dir):
        """Test that a missing path raises RepositoryOpenError."""
        with pytest.raises(RepositoryOpenError) as exc_info:
            GitHistorySource.open(temp_repo_dir / "missing")

        assert "does not exist" in str(exc_info.value)

    def test_not_a_repository(self, temp_repo_dir):
        """Test that a plain directory raises RepositoryOpenError."""
        with pytest.raises(RepositoryOpenError) as exc_info:
            GitHistorySource.open(temp_repo_dir)

        assert "not a git repository" in str(exc_info.value)

    def test_open_error_is_history_error(self, temp_repo_dir):
        """Test the error hierarchy used by callers."""
        with pytest.raises(HistoryError):
            GitHistorySource.open(temp_repo_dir / "missing")


class TestHistory:
    """Test cases for reading history through GitPython."""

    @pytest.fixture
    def source(self, git_repo):
        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            yield source

    def test_log_is_newest_first(self, source):
        """Test the order and content of the commit log."""
        with source.log("HEAD") as commits:
            records = list(commits)

        assert [r.summary for r in records] == ["third", "second", "first"]
        assert records[0].committed_at == utc(2017, 9, 10, 12, 0, 0)
        assert records[0].committed_at.tzinfo is not None

    def test_log_closes_once(self, source):
        """Test that closing is idempotent."""
        log = source.log("HEAD")
        assert isinstance(log, GitCommitLog)

        log.close()
        log.close()

        assert log.closed

    def test_closed_log_cannot_be_iterated(self, source):
        """Test that iterating a closed log fails."""
        log = source.log("HEAD")
        log.close()

        with pytest.raises(HistoryError):
            list(log)

    def test_log_unknown_ref(self, source):
        """Test that an unknown start ref raises HistoryError."""
        with pytest.raises(HistoryError):
            source.log("no-such-branch")

    def test_tags_peel_annotated(self, source, git_repo):
        """Test that lightweight and annotated tags resolve to commits."""
        tags = {ref.name: ref.target for ref in source.tags()}

        first, second = [c.hexsha for c in git_repo.iter_commits("HEAD")][1:][::-1]
        assert tags == {"v0.1": first, "v0.2": second}

    def test_commit_lookup(self, source, git_repo):
        """Test resolving a hash to a record."""
        head = git_repo.head.commit
        record = source.commit(head.hexsha)

        assert record.hexsha == head.hexsha
        assert record.summary == "third"

    def test_commit_lookup_missing(self, source):
        """Test that an unknown hash raises HistoryError."""
        with pytest.raises(HistoryError):
            source.commit("0" * 40)

    def test_offset_preserved(self, git_repo):
        """Test that the committer's UTC offset survives the conversion."""
        east = timezone(timedelta(hours=3))
        commit_at(git_repo, "east", utc(2017, 9, 11).astimezone(east))

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            record = source.commit("HEAD")

        assert record.committed_at.utcoffset() == timedelta(hours=3)
        assert record.committed_at == utc(2017, 9, 11)


class TestWaybackOnGit:
    """End-to-end searches against a real repository."""

    def test_untagged_search(self, git_repo):
        """Test the any-commit policy on a real history."""
        cutoff = parse_wayback_time("2017-09-04 19:43:36 +0300")

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            result = Wayback(source, cutoff).find()

        assert result.outcome is Outcome.FOUND
        assert result.commit.summary == "second"

    def test_tagged_search(self, git_repo):
        """Test the tag-required policy picks the annotated tag."""
        cutoff = parse_wayback_time("2017-09-04 19:43:36 +0300")

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            result = Wayback(source, cutoff, require_tag=True).find()

        assert result.tag == "v0.2"
        assert result.commit.summary == "second"

    def test_tagged_search_skips_newer_tags(self, git_repo):
        """Test that tags newer than the cutoff are ignored."""
        cutoff = parse_wayback_time("2017-08-25 00:00:00 +0000")

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            commit, tag = TagResolver(source, cutoff).find()

        assert tag == "v0.1"
        assert commit.summary == "first"

    def test_nothing_before_cutoff(self, git_repo):
        """Test both policies before the first commit."""
        cutoff = parse_wayback_time("2001-01-01 00:00:00 +0000")

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            results = find_all(source, cutoff)

        assert [r.outcome for r in results] == [Outcome.NOT_FOUND, Outcome.NOT_FOUND]

    def test_empty_repository(self, temp_repo_dir):
        """Test that a repository without commits has nothing before any cutoff."""
        git.Repo.init(temp_repo_dir)
        cutoff = parse_wayback_time("2017-09-04 19:43:36 +0300")

        with GitHistorySource.open(temp_repo_dir) as source:
            log = source.log("HEAD")
            with log as commits:
                assert list(commits) == []
            assert log.closed

            results = find_all(source, cutoff)

        assert [r.outcome for r in results] == [Outcome.NOT_FOUND, Outcome.NOT_FOUND]
        assert all(r.error is None for r in results)

    def test_empty_repository_unknown_ref(self, temp_repo_dir):
        """Test that a named ref still has to exist in an empty repository."""
        git.Repo.init(temp_repo_dir)
        cutoff = parse_wayback_time("2017-09-04 19:43:36 +0300")

        with GitHistorySource.open(temp_repo_dir) as source:
            result = Wayback(source, cutoff, start="no-such-branch").find()

        assert result.outcome is Outcome.FAILED

    def test_first_parent(self, git_repo):
        """Test that first-parent logs skip commits merged from a side branch."""
        main = git_repo.active_branch
        base = git_repo.head.commit

        side = git_repo.create_head("side", base)
        side.checkout()
        side_commit = commit_at(git_repo, "side work", utc(2017, 9, 12))
        main.checkout()
        tip = commit_at(git_repo, "main work", utc(2017, 9, 13))

        merge = git_repo.index.commit(
            "merge side",
            parent_commits=(tip, side_commit),
            head=True,
            author_date="1505347200 +0000",
            commit_date="1505347200 +0000",
        )
        cutoff = utc(2017, 9, 13)

        with GitHistorySource.open(git_repo.working_tree_dir, first_parent=True) as source:
            with source.log("HEAD") as commits:
                summaries = [c.summary for c in commits]
            result = Wayback(source, cutoff).find()

        assert merge.summary == "merge side"
        assert "side work" not in summaries
        assert result.commit.summary == "third"

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            result = Wayback(source, cutoff).find()

        assert result.commit.summary == "side work"

    def test_current_tag(self, git_repo):
        """Test looking up the tag of HEAD."""
        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            with pytest.raises(NotFoundError):
                find_current_tag(source)

        git_repo.create_tag("v0.3", ref=git_repo.head.commit)

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            assert find_current_tag(source) == "v0.3"

    def test_dangling_tag_fails_tagged_search(self, git_repo):
        """Test that a tag pointing at a tree fails the tagged search."""
        git_repo.create_tag("tree-tag", ref=git_repo.head.commit.tree.hexsha)
        cutoff = parse_wayback_time("2017-09-04 19:43:36 +0300")

        with GitHistorySource.open(git_repo.working_tree_dir) as source:
            tagged, untagged = find_all(source, cutoff)

        assert tagged.outcome is Outcome.FAILED
        assert isinstance(tagged.error, HistoryError)
        assert untagged.outcome is Outcome.FOUND
