"""Shared test fixtures for EntropyX tests."""

from datetime import datetime, timedelta, timezone

import pytest

from entropyx.models import CodeKind, CommitInfo, FileMetrics, RepoMetrics

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def make_file(
    path="a.py",
    sloc=100,
    cc=1.0,
    mi=50.0,
    high=0,
    medium=0,
    low=0,
    coupling=0.0,
    commit_hash="c1",
    kind=CodeKind.PRODUCTION,
    language="Python",
):
    """FileMetrics with sensible defaults for tests."""
    return FileMetrics(
        commit_hash=commit_hash,
        path=path,
        language=language,
        sloc=sloc,
        cyclomatic_complexity=cc,
        maintainability_index=mi,
        smells_high=high,
        smells_medium=medium,
        smells_low=low,
        coupling_proxy=coupling,
        maintainability_proxy=(100.0 - mi) / 100.0,
        kind=kind,
    )


def make_commit(hash_, hours=0, parents=()):
    """CommitInfo ``hours`` after BASE_TIME."""
    return CommitInfo(hash=hash_, timestamp=BASE_TIME + timedelta(hours=hours), parents=tuple(parents))


def make_history(entropies, sloc=1000, files=10):
    """Chronological (CommitInfo, RepoMetrics) pairs, one per entropy value."""
    history = []
    for i, entropy in enumerate(entropies):
        commit = make_commit(f"c{i:02d}", hours=i)
        history.append((commit, RepoMetrics(commit.hash, files, sloc, entropy)))
    return history


@pytest.fixture
def db_path(tmp_path):
    """Path of a fresh metrics database inside a temp dir."""
    return tmp_path / "metrics.db"


@pytest.fixture
def equal_files():
    """Four files of equal size: entropy is exactly 2 bits."""
    return [make_file(path=f"f{i}.py", sloc=50) for i in range(4)]


@pytest.fixture(name="make_file")
def make_file_fixture():
    return make_file


@pytest.fixture(name="make_commit")
def make_commit_fixture():
    return make_commit


@pytest.fixture(name="make_history")
def make_history_fixture():
    return make_history
