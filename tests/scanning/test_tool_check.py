"""Tests for entropyx.scanning.tools."""

import pytest

from entropyx.scanning import tools
from entropyx.scanning.tools import ToolStatus, check_tools, install_instructions, required_tools


class TestRequiredTools:
    def test_git_always_needed(self):
        assert required_tools([]) == ["git"]

    def test_source_files_need_lizard(self):
        assert required_tools(["Python", "CSharp"]) == ["git", "lizard"]


class TestInstallInstructions:
    @pytest.mark.parametrize("platform", ["linux", "macos", "windows"])
    def test_lizard_via_pip(self, platform):
        assert install_instructions("lizard", platform) == "pip install lizard"

    def test_case_insensitive(self):
        assert install_instructions("GIT", "MacOS") == "brew install git"

    def test_unknown_tool_falls_back(self):
        assert install_instructions("cloc", "linux") == "Please install 'cloc' for platform 'linux' manually."


class TestCheckTools:
    def test_reports_each_tool(self, monkeypatch):
        monkeypatch.setattr(tools.shutil, "which", lambda name: "/usr/bin/git" if name == "git" else None)
        assert check_tools(["git", "lizard"], platform="linux") == [
            ToolStatus("git", True),
            ToolStatus("lizard", False, "pip install lizard"),
        ]

    def test_defaults_to_current_platform(self, monkeypatch):
        monkeypatch.setattr(tools.shutil, "which", lambda name: None)
        monkeypatch.setattr(tools, "current_platform", lambda: "macos")
        [status] = check_tools(["git"])
        assert status.install_hint == "brew install git"
