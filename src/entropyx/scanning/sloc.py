"""Source-lines-of-code counting."""

from collections.abc import Iterable

from .languages import get_language_config


def count_sloc(lines: Iterable[str], language: str) -> int:
    """Count non-blank, non-comment lines.

    C-style languages skip ``//`` lines and ``/* ... */`` blocks (a line
    that opens a block comment counts as comment even if code follows the
    closing ``*/``). Python skips ``#`` lines. Other files count every
    non-blank line.
    """
    config = get_language_config(language)
    c_style = config is not None and config.c_style_comments
    hash_style = config is not None and config.hash_comments

    in_block = False
    count = 0
    for raw in lines:
        line = raw.strip()

        if in_block:
            if "*/" in line:
                in_block = False
            continue

        if not line:
            continue

        if c_style and line.startswith("/*"):
            if "*/" not in line:
                in_block = True
            continue

        if c_style and line.startswith("//"):
            continue

        if hash_style and line.startswith("#"):
            continue

        count += 1

    return count
