"""Tests for entropyx.scanning.pipeline."""

import math

import pytest

from entropyx.exceptions import InvalidPathError
from entropyx.models import CodeKind
from entropyx.scanning.lizard import FileComplexity
from entropyx.scanning.pipeline import ScanPipeline, maintainability_index, maintainability_proxy


class StubAnalyzer:
    def __init__(self, results):
        self.results = results
        self.calls = []

    def analyze_directory(self, path):
        self.calls.append(path)
        return self.results


@pytest.fixture
def tree(tmp_path):
    """Small mixed-language tree with ignored dirs and pattern files."""
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "scripts").mkdir()
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "src" / "Migrations").mkdir()

    (root / "src" / "app.py").write_text("import os\nimport sys\n\n# comment\ndef main():\n    return 1\n")
    (root / "src" / "Service.cs").write_text("using System;\n// c\nclass S {}\n")
    (root / "src" / "Migrations" / "001.cs").write_text("class M {}\n")
    (root / "scripts" / "deploy.py").write_text("print('x')\n")
    (root / "node_modules" / "lib" / "index.js").write_text("module.exports = 1;\n")
    (root / "notes.txt").write_text("hello\nworld\n")
    (root / "logo.png").write_bytes(b"\x89PNG\x00\x00binary")
    (root / ".exignore").write_text("migrations\n")
    (root / ".utilityfiles").write_text("scripts\n")
    return root


class TestMaintainability:
    def test_formula(self):
        expected = (171 - 0.23 * 5 - 16.2 * math.log(100)) * 100 / 171
        assert maintainability_index(100, 5.0) == pytest.approx(expected)

    def test_small_file_uses_one_line(self):
        assert maintainability_index(0, 0.0) == pytest.approx(100.0)

    def test_clamped_at_zero(self):
        assert maintainability_index(10**9, 1000.0) == 0.0

    def test_proxy(self):
        assert maintainability_proxy(100.0) == 0.0
        assert maintainability_proxy(25.0) == 0.75
        assert maintainability_proxy(0.0) == 1.0


class TestScanDirectory:
    def test_filters_and_kinds(self, tree):
        files = ScanPipeline().scan_directory(tree)
        paths = [f.path for f in files]
        assert paths == [
            ".exignore",
            ".utilityfiles",
            "logo.png",
            "notes.txt",
            "scripts/deploy.py",
            "src/Service.cs",
            "src/app.py",
        ]
        kinds = {f.path: f.kind for f in files}
        assert kinds["scripts/deploy.py"] is CodeKind.UTILITY
        assert kinds["src/app.py"] is CodeKind.PRODUCTION

    def test_source_only(self, tree):
        files = ScanPipeline().scan_directory(tree, source_only=True)
        assert [f.path for f in files] == ["scripts/deploy.py", "src/Service.cs", "src/app.py"]

    def test_include_patterns(self, tree):
        files = ScanPipeline().scan_directory(tree, ["*.py"])
        assert [f.path for f in files] == ["scripts/deploy.py", "src/app.py"]

    def test_line_metrics(self, tree):
        by_path = {f.path: f for f in ScanPipeline().scan_directory(tree, commit_hash="abc")}
        app = by_path["src/app.py"]
        assert app.commit_hash == "abc"
        assert app.language == "Python"
        assert app.sloc == 4
        assert app.coupling_proxy == 2.0
        assert by_path["src/Service.cs"].sloc == 2
        assert by_path["logo.png"].sloc == 0
        assert by_path["notes.txt"].language == ""

    def test_complexity_attached(self, tree):
        analyzer = StubAnalyzer({"SRC/APP.PY": FileComplexity(7.5, 1, 2, 3, 4)})
        files = ScanPipeline(analyzer).scan_directory(tree, ["*.py"])
        app = next(f for f in files if f.path == "src/app.py")
        assert app.cyclomatic_complexity == 7.5
        assert (app.smells_high, app.smells_medium, app.smells_low) == (1, 2, 3)
        assert app.maintainability_index == pytest.approx(maintainability_index(4, 7.5))
        assert app.maintainability_proxy == pytest.approx(maintainability_proxy(app.maintainability_index))
        other = next(f for f in files if f.path == "scripts/deploy.py")
        assert other.cyclomatic_complexity == 0.0

    def test_pattern_root(self, tree, tmp_path):
        elsewhere = tmp_path / "patterns"
        elsewhere.mkdir()
        (elsewhere / ".exignore").write_text("src\n")
        files = ScanPipeline().scan_directory(tree, pattern_root=elsewhere, source_only=True)
        assert [f.path for f in files] == ["scripts/deploy.py"]
        assert files[0].kind is CodeKind.PRODUCTION

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(InvalidPathError):
            ScanPipeline().scan_directory(tmp_path / "missing")


class TestListLanguages:
    def test_respects_ignores_and_sorts(self, tree):
        found = ScanPipeline().list_languages(tree)
        assert found == [
            ("CSharp", "src/Service.cs"),
            ("Python", "scripts/deploy.py"),
            ("Python", "src/app.py"),
        ]

    def test_include_patterns(self, tree):
        assert ScanPipeline().list_languages(tree, ["*.cs"]) == [("CSharp", "src/Service.cs")]

    def test_reads_no_contents(self, tree):
        analyzer = StubAnalyzer({})
        ScanPipeline(analyzer).list_languages(tree)
        assert analyzer.calls == []

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(InvalidPathError):
            ScanPipeline().list_languages(tmp_path / "missing")
