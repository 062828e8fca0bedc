"""Language configurations: file extensions and comment syntax.

Adding a new language:
  1. Add a LanguageConfig entry to LANGUAGES below.
  2. Teach coupling.py its import directive, if it has one.
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Union


@dataclass(frozen=True)
class LanguageConfig:
    """What the line counters need to know about a language."""

    name: str
    extensions: tuple[str, ...]

    # Skip "//" lines and "/* ... */" blocks when counting SLOC
    c_style_comments: bool = False

    # Skip "#" lines when counting SLOC
    hash_comments: bool = False


LANGUAGES = {
    "Java": LanguageConfig(name="Java", extensions=(".java",), c_style_comments=True),
    "CSharp": LanguageConfig(name="CSharp", extensions=(".cs",), c_style_comments=True),
    "C": LanguageConfig(name="C", extensions=(".c", ".h"), c_style_comments=True),
    "Cpp": LanguageConfig(
        name="Cpp", extensions=(".cpp", ".cc", ".cxx", ".hpp"), c_style_comments=True
    ),
    "TypeScript": LanguageConfig(
        name="TypeScript", extensions=(".ts", ".tsx"), c_style_comments=True
    ),
    "JavaScript": LanguageConfig(
        name="JavaScript", extensions=(".js", ".jsx", ".mjs", ".cjs"), c_style_comments=True
    ),
    "Rust": LanguageConfig(name="Rust", extensions=(".rs",), c_style_comments=True),
    "Python": LanguageConfig(name="Python", extensions=(".py",), hash_comments=True),
}

# Extension to language mapping (built from LANGUAGES)
_EXTENSION_TO_LANGUAGE: dict[str, str] = {}
for _lang_name, _cfg in LANGUAGES.items():
    for _ext in _cfg.extensions:
        _EXTENSION_TO_LANGUAGE[_ext] = _lang_name


def detect_language(filepath: Union[str, PurePath]) -> str:
    """Detect language from file extension (case-insensitive).

    Returns:
        Language name (e.g. "Python", "Cpp") or "" when unrecognized
    """
    return _EXTENSION_TO_LANGUAGE.get(PurePath(filepath).suffix.lower(), "")


def get_language_config(name: str) -> Union[LanguageConfig, None]:
    return LANGUAGES.get(name)
