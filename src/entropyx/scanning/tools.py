"""External tool availability: which tools a tree needs and how to install them."""

import shutil
import sys
from collections.abc import Iterable
from dataclasses import dataclass

from .lizard import LIZARD_EXECUTABLE

GIT_EXECUTABLE = "git"

# git is needed for every history scan; lizard only when there is code to analyze
BASE_TOOLS = (GIT_EXECUTABLE,)
SOURCE_TOOLS = (LIZARD_EXECUTABLE,)

_INSTALL = {
    (GIT_EXECUTABLE, "linux"): "sudo apt-get install git",
    (GIT_EXECUTABLE, "macos"): "brew install git",
    (GIT_EXECUTABLE, "windows"): "winget install --id Git.Git",
    (LIZARD_EXECUTABLE, "linux"): "pip install lizard",
    (LIZARD_EXECUTABLE, "macos"): "pip install lizard",
    (LIZARD_EXECUTABLE, "windows"): "pip install lizard",
}


@dataclass(frozen=True)
class ToolStatus:
    name: str
    available: bool
    install_hint: str = ""


def current_platform() -> str:
    """One of ``linux``, ``macos`` or ``windows``."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    return "linux"


def required_tools(languages: Iterable[str]) -> list[str]:
    tools = set(BASE_TOOLS)
    if any(languages):
        tools.update(SOURCE_TOOLS)
    return sorted(tools)


def install_instructions(tool: str, platform: str) -> str:
    return _INSTALL.get(
        (tool.lower(), platform.lower()), f"Please install '{tool}' for platform '{platform}' manually."
    )


def check_tools(tools: Iterable[str], platform: str = "") -> list[ToolStatus]:
    platform = platform or current_platform()
    statuses = []
    for tool in tools:
        if shutil.which(tool) is not None:
            statuses.append(ToolStatus(tool, True))
        else:
            statuses.append(ToolStatus(tool, False, install_instructions(tool, platform)))
    return statuses
