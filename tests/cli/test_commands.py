"""CLI smoke tests using typer's CliRunner."""

import json
import os
import shutil
import subprocess

import pytest
from typer.testing import CliRunner

from entropyx import __version__
from entropyx.cli import app
from entropyx.metrics import aggregate
from entropyx.persistence import MetricsStore
from entropyx.snapshot import load_snapshot

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    # Wide console so rich does not wrap table cells or error lines
    monkeypatch.setenv("COLUMNS", "400")
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("ENTROPYX_"):
            monkeypatch.delenv(key)


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "proj"
    root.mkdir()
    (root / "big.py").write_text("import os\n" + "x = 1\n" * 40)
    (root / "small.py").write_text("y = 2\n")
    (root / "lib.ts").write_text("import a from 'a';\nexport const b = a;\n")
    (root / "notes.txt").write_text("not source\n")
    return root


@pytest.fixture
def filled_db(tmp_path, make_file, make_commit):
    """Database with three commits whose entropy rises then falls."""
    path = tmp_path / "hist.db"
    store = MetricsStore(path)
    sizes = [[100, 100], [100, 100, 100, 100], [400, 10]]
    for i, slocs in enumerate(sizes):
        commit = make_commit(f"{i}" * 40, hours=i)
        files = [make_file(path=f"f{j}.py", sloc=s, commit_hash=commit.hash) for j, s in enumerate(slocs)]
        store.save_scan_result(commit, files, aggregate(files, commit.hash))
    return path


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "scan" in result.output


class TestScanHere:
    def test_prints_source_files(self, project):
        result = runner.invoke(app, ["scan", "here", str(project)])
        assert result.exit_code == 0, result.output
        assert "big.py" in result.output
        assert "lib.ts" in result.output
        assert "notes.txt" not in result.output

    def test_include(self, project):
        result = runner.invoke(app, ["scan", "here", str(project), "--include", "*.ts"])
        assert result.exit_code == 0, result.output
        assert "lib.ts" in result.output
        assert "big.py" not in result.output

    def test_save_snapshot(self, project, tmp_path):
        out = tmp_path / "snap.json"
        result = runner.invoke(app, ["scan", "here", str(project), "--save", str(out)])
        assert result.exit_code == 0, result.output
        snap = load_snapshot(out)
        assert sorted(f.path for f in snap.files) == ["big.py", "lib.ts", "small.py"]
        assert "files" in json.loads(out.read_text())

    def test_bad_kind(self, project):
        result = runner.invoke(app, ["scan", "here", str(project), "--kind", "tests"])
        assert result.exit_code == 1

    def test_no_matches(self, project):
        result = runner.invoke(app, ["scan", "here", str(project), "--include", "*.rs"])
        assert result.exit_code == 0
        assert "No matching source files" in result.output


class TestHeatmapRefactor:
    def test_heatmap(self, project):
        result = runner.invoke(app, ["heatmap", str(project), "--top", "2"])
        assert result.exit_code == 0, result.output
        assert "big.py" in result.output

    def test_refactor_focus(self, project):
        result = runner.invoke(app, ["refactor", str(project), "--focus", "sloc,coupling"])
        assert result.exit_code == 0, result.output
        assert "big.py" in result.output


class TestReportAndDb:
    def test_empty_database(self, tmp_path):
        result = runner.invoke(app, ["report", "--db", str(tmp_path / "empty.db")])
        assert result.exit_code == 0
        assert "No scanned commits" in result.output

    def test_report_with_history(self, filled_db, tmp_path):
        out = tmp_path / "current.json"
        result = runner.invoke(app, ["report", "--db", str(filled_db), "--save", str(out)])
        assert result.exit_code == 0, result.output
        assert "Troubled commits" in result.output
        assert "Heroic commits" in result.output
        snap = load_snapshot(out)
        assert snap.commit_count == 3
        assert [h.hash[0] for h in snap.history] == ["0", "1", "2"]
        assert len(snap.files) == 2

    def test_report_unknown_commit(self, filled_db):
        result = runner.invoke(app, ["report", "--db", str(filled_db), "--commit", "ffff"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_report_specific_commit(self, filled_db):
        result = runner.invoke(app, ["report", "--db", str(filled_db), "--commit", "1111"])
        assert result.exit_code == 0, result.output
        assert "11111111" in result.output

    def test_db_list_and_clear(self, filled_db):
        MetricsStore(filled_db).register_repo("demo", "")
        listed = runner.invoke(app, ["db", "list", "--db", str(filled_db)])
        assert listed.exit_code == 0
        assert "demo" in listed.output
        assert "Stored commits:" in listed.output

        cleared = runner.invoke(app, ["db", "clear", "--db", str(filled_db), "--yes"])
        assert cleared.exit_code == 0
        assert MetricsStore(filled_db).commit_count() == 0

    def test_db_clear_aborts_without_confirmation(self, filled_db):
        result = runner.invoke(app, ["db", "clear", "--db", str(filled_db)], input="n\n")
        assert result.exit_code == 1
        assert MetricsStore(filled_db).commit_count() == 3


class TestCompare:
    def test_compare_snapshots(self, project, tmp_path):
        base = tmp_path / "base.json"
        cur = tmp_path / "cur.json"
        assert runner.invoke(app, ["scan", "here", str(project), "--save", str(base)]).exit_code == 0
        (project / "extra.py").write_text("z = 3\n" * 25)
        assert runner.invoke(app, ["scan", "here", str(project), "--save", str(cur)]).exit_code == 0

        result = runner.invoke(app, ["compare", str(base), str(cur)])
        assert result.exit_code == 0, result.output
        assert "Entropy forecast" in result.output
        assert "extra.py" in result.output

    def test_compare_malformed(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{")
        result = runner.invoke(app, ["compare", str(bad), str(bad)])
        assert result.exit_code == 1
        assert "Invalid snapshot" in result.output


class TestScanLang:
    def test_lists_languages(self, project):
        result = runner.invoke(app, ["scan", "lang", str(project)])
        assert result.exit_code == 0, result.output
        assert "Detected languages" in result.output
        assert "Python" in result.output
        assert "TypeScript" in result.output
        assert "lib.ts" in result.output
        assert "notes.txt" not in result.output

    def test_include(self, project):
        result = runner.invoke(app, ["scan", "lang", str(project), "--include", "*.ts"])
        assert result.exit_code == 0, result.output
        assert "lib.ts" in result.output
        assert "big.py" not in result.output

    def test_nothing_recognized(self, project):
        result = runner.invoke(app, ["scan", "lang", str(project), "--include", "*.rs"])
        assert result.exit_code == 0
        assert "No recognized source files found" in result.output


class TestToolsCheck:
    @pytest.fixture
    def lizard_missing(self, monkeypatch):
        monkeypatch.setattr(
            "entropyx.scanning.tools.shutil.which", lambda name: None if name == "lizard" else f"/usr/bin/{name}"
        )

    def test_reports_missing_tool(self, project, lizard_missing):
        result = runner.invoke(app, ["check", "tools", str(project)])
        assert result.exit_code == 1
        assert "Python" in result.output
        assert "missing" in result.output
        assert "pip install lizard" in result.output

    def test_top_level_alias(self, project, lizard_missing):
        result = runner.invoke(app, ["tools", str(project)])
        assert result.exit_code == 1
        assert "pip install lizard" in result.output

    def test_all_available(self, project, monkeypatch):
        monkeypatch.setattr("entropyx.scanning.tools.shutil.which", lambda name: f"/usr/bin/{name}")
        result = runner.invoke(app, ["check", "tools", str(project)])
        assert result.exit_code == 0, result.output
        assert "available" in result.output
        assert "missing" not in result.output

    def test_empty_directory_only_needs_git(self, tmp_path, monkeypatch):
        monkeypatch.setattr("entropyx.scanning.tools.shutil.which", lambda name: None if name == "lizard" else "/bin/git")
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(app, ["tools", str(empty)])
        assert result.exit_code == 0, result.output
        assert "No recognized source files detected" in result.output


needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


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


def _commit_all(repo, message, day):
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", message, date=f"2024-01-{day:02d}T00:00:00+00:00")


@pytest.fixture
def git_repo(tmp_path):
    """Repository with three commits, each adding one Python module."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    for i in range(3):
        (repo / f"m{i}.py").write_text("x = 1\n" * (i + 1) * 10)
        _commit_all(repo, f"c{i}", i + 1)
    return repo


@pytest.mark.slow
@needs_git
class TestGitScan:

    def test_full_scan_then_report(self, tmp_path, git_repo):
        repo = git_repo
        db = tmp_path / "repo.db"
        first = runner.invoke(app, ["scan", "full", str(repo), "--db", str(db), "--workers", "2"])
        assert first.exit_code == 0, first.output
        assert MetricsStore(db).commit_count() == 3

        again = runner.invoke(app, ["scan", "full", str(repo), "--db", str(db)])
        assert again.exit_code == 0
        assert "3 skipped" in again.output

        history = MetricsStore(db).get_history()
        assert [m.total_files for _, m in history] == [1, 2, 3]

        report = runner.invoke(app, ["report", str(repo), "--db", str(db)])
        assert report.exit_code == 0, report.output

    def test_not_a_repo(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        result = runner.invoke(app, ["scan", "head", str(plain), "--db", str(tmp_path / "x.db")])
        assert result.exit_code == 1
        assert "not a git repository" in result.output


@needs_git
class TestScanDetails:
    def test_without_history(self, tmp_path, git_repo):
        result = runner.invoke(app, ["scan", "details", str(git_repo), "--db", str(tmp_path / "none.db")])
        assert result.exit_code == 0, result.output
        assert "SLOC by language" in result.output
        assert "Python" in result.output
        assert "Changed in" in result.output
        assert "m2.py" in result.output
        assert "No stored history" in result.output
        assert not (tmp_path / "none.db").exists()

    def test_assesses_head_against_stored_history(self, tmp_path, git_repo):
        db = tmp_path / "repo.db"
        stored = runner.invoke(app, ["scan", "full", str(git_repo), "--db", str(db), "--workers", "1"])
        assert stored.exit_code == 0, stored.output

        (git_repo / "m3.py").write_text("y = 2\n" * 200)
        _commit_all(git_repo, "c3", 4)

        result = runner.invoke(app, ["scan", "details", str(git_repo), "--db", str(db)])
        assert result.exit_code == 0, result.output
        assert "Changed in" in result.output
        assert "m3.py" in result.output
        assert "Health at" in result.output
        assert MetricsStore(db).commit_count() == 3
