"""Tests for entropyx.scanning.filters."""

import pytest

from entropyx.models import CodeKind
from entropyx.scanning.filters import (
    classify_kind,
    is_dir_ignored,
    is_ex_ignored,
    is_path_ignored,
    load_exignore_patterns,
    load_utility_patterns,
    match_glob,
    matches_include,
    parse_patterns,
)


class TestIgnoredDirs:
    @pytest.mark.parametrize("name", [".git", "node_modules", "BIN", "obj", "__pycache__", ".idea", "Pods"])
    def test_ignored(self, name):
        assert is_dir_ignored(name)

    def test_not_ignored(self):
        assert not is_dir_ignored("src")

    def test_path_segments(self):
        assert is_path_ignored("src/node_modules/x.js")
        assert not is_path_ignored("src/build.py")  # file names are not directories


class TestMatchGlob:
    @pytest.mark.parametrize(
        "name,pattern,expected",
        [
            ("anything", "*", True),
            ("Service.cs", "*.cs", True),
            ("service.CS", "*.cs", True),
            ("Service.csx", "*.cs", False),
            ("test_api.py", "test_*", True),
            ("api_test.py", "test_*", False),
            ("Program.cs", ".cs", True),
            ("Generated", "generated", True),
            ("Generated2", "generated", False),
        ],
    )
    def test_patterns(self, name, pattern, expected):
        assert match_glob(name, pattern) is expected


class TestExIgnore:
    def test_matches_any_segment(self):
        assert is_ex_ignored("src/Migrations/001.cs", ["migrations"])
        assert is_ex_ignored("src/a.Designer.cs", ["*.designer.cs"])
        assert not is_ex_ignored("src/a.cs", ["migrations"])

    def test_no_patterns(self):
        assert not is_ex_ignored("anything", [])

    def test_include(self):
        assert matches_include("deep/dir/x.py", None)
        assert matches_include("deep/dir/x.py", ["*.py"])
        assert not matches_include("deep/dir/x.ts", ["*.py"])
        # Include patterns test the file name only
        assert not matches_include("py/readme.md", ["py"])


class TestPatternFiles:
    def test_loads_patterns_skipping_comments(self, tmp_path):
        (tmp_path / ".exignore").write_text("# generated code\n\n*.g.cs\n  Migrations  \n")
        assert load_exignore_patterns(tmp_path) == ["*.g.cs", "Migrations"]

    def test_missing_file(self, tmp_path):
        assert load_utility_patterns(tmp_path) == []

    def test_classify_kind(self, tmp_path):
        (tmp_path / ".utilityfiles").write_text("scripts\n*.config.js\n")
        patterns = load_utility_patterns(tmp_path)
        assert classify_kind("scripts/deploy.py", patterns) is CodeKind.UTILITY
        assert classify_kind("webpack.config.js", patterns) is CodeKind.UTILITY
        assert classify_kind("src/app.js", patterns) is CodeKind.PRODUCTION


class TestParsePatterns:
    def test_comma_separated(self):
        assert parse_patterns("*.py, *.ts ,,") == ["*.py", "*.ts"]

    def test_empty(self):
        assert parse_patterns(None) is None
        assert parse_patterns("") is None
        assert parse_patterns(" , ") is None
