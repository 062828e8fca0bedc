"""Coupling proxy: import/dependency directives per file."""

from collections.abc import Iterable


def _is_csharp_using_directive(line: str) -> bool:
    # "using Ns;", "using static Ns;", "using Alias = Ns;" but not
    # "using var x = ...;", "using (...)" or "using Type name = ...;"
    if not line.startswith("using ") or not line.endswith(";"):
        return False

    inner = line[len("using ") : -1].strip()
    if inner.startswith("(") or inner.startswith("var "):
        return False
    if inner.startswith("static "):
        inner = inner[len("static ") :]

    space = inner.find(" ")
    if space >= 0 and not inner[space + 1 :].startswith("="):
        return False
    return True


def is_dependency_directive(line: str, language: str) -> bool:
    if language == "CSharp":
        return _is_csharp_using_directive(line)
    if language == "Java":
        return line.startswith("import ") and line.endswith(";")
    if language in ("TypeScript", "JavaScript"):
        return line.startswith("import ") or "require('" in line or 'require("' in line
    if language == "Python":
        return line.startswith("import ") or line.startswith("from ")
    if language in ("C", "Cpp"):
        return line.startswith("#include")
    if language == "Rust":
        return line.startswith("use ") or line.startswith("extern crate ")
    return False


def count_dependencies(lines: Iterable[str], language: str) -> int:
    """Number of import-like directives, a proxy for efferent coupling."""
    count = 0
    for raw in lines:
        line = raw.strip()
        if line and is_dependency_directive(line, language):
            count += 1
    return count
