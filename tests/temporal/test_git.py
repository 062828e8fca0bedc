"""Tests for entropyx.temporal.git."""

import os
import shutil
import subprocess

import pytest

from entropyx.exceptions import GitError
from entropyx.temporal.git import GitTraversal, parse_log

needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class TestParseLog:
    def test_parses_hash_date_parents(self):
        raw = (
            "aaa111|2024-03-01T10:00:00+02:00|bbb222 ccc333\n"
            "bbb222|2024-02-01T09:30:00+00:00|ccc333\n"
            "ccc333|2024-01-01T08:00:00-05:00|\n"
        )
        commits = parse_log(raw)
        assert [c.hash for c in commits] == ["aaa111", "bbb222", "ccc333"]
        assert commits[0].parents == ("bbb222", "ccc333")
        assert commits[0].is_merge
        assert commits[2].parents == ()
        assert commits[2].timestamp.utcoffset().total_seconds() == -5 * 3600

    def test_skips_blank_and_malformed_lines(self):
        raw = "\nnot-a-commit\nabc|not-a-date|\ndef|2024-01-01T00:00:00+00:00|\n"
        assert [c.hash for c in parse_log(raw)] == ["def"]


def _git(repo, *args, date="2024-01-01T00:00:00+00:00"):
    env = dict(
        os.environ,
        GIT_AUTHOR_DATE=date,
        GIT_COMMITTER_DATE=date,
        GIT_AUTHOR_NAME="Test",
        GIT_AUTHOR_EMAIL="test@example.com",
        GIT_COMMITTER_NAME="Test",
        GIT_COMMITTER_EMAIL="test@example.com",
    )
    subprocess.run(["git", "-C", str(repo), *args], check=True, capture_output=True, env=env)


@pytest.fixture
def repo(tmp_path):
    """Three-commit repository with a tag on the second commit."""
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init", "-q")
    for i in range(3):
        (path / f"mod{i}.py").write_text(f"import os\n\nx = {i}\n")
        _git(path, "add", ".")
        _git(path, "commit", "-q", "-m", f"commit {i}", date=f"2024-01-0{i + 1}T00:00:00+00:00")
        if i == 1:
            _git(path, "tag", "v1")
    return path


@needs_git
class TestGitTraversal:
    def test_is_git_repo(self, repo, tmp_path):
        assert GitTraversal(str(repo)).is_git_repo()
        plain = tmp_path / "plain"
        plain.mkdir()
        assert not GitTraversal(str(plain)).is_git_repo()

    def test_all_commits_newest_first(self, repo):
        commits = GitTraversal(str(repo)).get_all_commits()
        assert len(commits) == 3
        assert commits[0].timestamp > commits[-1].timestamp

    def test_head_commit(self, repo):
        git = GitTraversal(str(repo))
        assert git.get_head_commit() == git.get_all_commits()[0]

    def test_checkpoints_include_tagged(self, repo):
        git = GitTraversal(str(repo))
        second = git.get_all_commits()[1]
        assert [c.hash for c in git.get_checkpoint_commits()] == [second.hash]

    def test_commits_from_prefix(self, repo):
        git = GitTraversal(str(repo))
        oldest_first = list(reversed(git.get_all_commits()))
        result = git.get_commits_from(oldest_first[1].hash[:7])
        assert [c.hash for c in result] == [c.hash for c in oldest_first[1:]]

    def test_commits_from_unknown(self, repo):
        assert GitTraversal(str(repo)).get_commits_from("ffffffff") == []

    def test_changed_files(self, repo):
        git = GitTraversal(str(repo))
        head = git.get_head_commit()
        assert git.get_changed_files(head.hash) == ["mod2.py"]

    def test_repo_info_without_remote(self, repo):
        assert GitTraversal(str(repo)).get_repo_info() == ("repo", "")

    def test_export_tree(self, repo, tmp_path):
        git = GitTraversal(str(repo))
        first = git.get_all_commits()[-1]
        dest = tmp_path / "export"
        dest.mkdir()
        assert git.export_tree(first.hash, dest) == ["mod0.py"]
        assert (dest / "mod0.py").read_text() == "import os\n\nx = 0\n"

    def test_bad_revision_raises(self, repo, tmp_path):
        with pytest.raises(GitError):
            GitTraversal(str(repo)).export_tree("0" * 40, tmp_path)
