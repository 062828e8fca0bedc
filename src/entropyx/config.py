"""Configuration loading and management for EntropyX.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.entropyx.toml)
    3. Project config (./entropyx.toml)
    4. Explicit config file
    5. Environment variables (ENTROPYX_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(workers=4)
    >>> config.workers
    4
    >>> config.thresholds.troubled_entropy_delta
    0.1
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

KindFilter = Literal["all", "production", "utility"]

FOCUS_DIMENSIONS = ("sloc", "cc", "mi", "smells", "coupling")
FOCUS_CHOICES = ("overall",) + FOCUS_DIMENSIONS


@dataclass(frozen=True)
class TrendThresholds:
    """Commit classification thresholds.

    A commit is troubled when its entropy delta from the predecessor exceeds
    ``troubled_entropy_delta`` bits, or (when per-commit file statistics are
    available) its smell density or average complexity rises by more than
    the corresponding threshold. It is heroic when the entropy delta is below
    ``-heroic_entropy_delta``.

    Attributes:
        troubled_entropy_delta: Entropy rise (bits) that marks a troubled commit
        heroic_entropy_delta: Entropy drop (bits, positive number) that marks a heroic commit
        smell_density_delta: Rise in weighted smells per KSLOC that marks a troubled commit
        complexity_delta: Rise in average cyclomatic complexity that marks a troubled commit
    """

    troubled_entropy_delta: float = 0.10
    heroic_entropy_delta: float = 0.10
    smell_density_delta: float = 5.0
    complexity_delta: float = 2.0

    def __post_init__(self) -> None:
        for field_name in (
            "troubled_entropy_delta",
            "heroic_entropy_delta",
            "smell_density_delta",
            "complexity_delta",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be positive")


DEFAULT_TREND_THRESHOLDS = TrendThresholds()


@dataclass(frozen=True)
class SmellThresholds:
    """Per-function cyclomatic complexity buckets for smell severities.

    A function with CCN > high is a high smell, medium < CCN <= high is a
    medium smell, and low < CCN <= medium is a low smell.
    """

    high: int = 20
    medium: int = 15
    low: int = 10

    def __post_init__(self) -> None:
        if not 0 < self.low < self.medium < self.high:
            raise ValueError("smell thresholds must satisfy 0 < low < medium < high")


DEFAULT_SMELL_THRESHOLDS = SmellThresholds()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for scanning and reporting.

    Attributes:
        Storage:
            db_path: SQLite database file holding the commit history

        Performance tuning:
            workers: Parallel commit scans (None = auto-detect)
            analyzer_timeout_seconds: Timeout for one external analyzer run
            git_timeout_seconds: Timeout for one git subprocess

        Reporting:
            max_chart_points: Maximum points in a sampled history series
            focus: Default refactor focus
            kind: Default code kind filter
            top: Default number of files in rankings

        Nested:
            thresholds: Troubled/heroic classification thresholds
            smells: Smell severity buckets
    """

    db_path: str = "entropyx.db"

    workers: Optional[int] = None
    analyzer_timeout_seconds: int = 300
    git_timeout_seconds: int = 60

    max_chart_points: int = 200
    focus: str = "overall"
    kind: KindFilter = "all"
    top: int = 10

    thresholds: TrendThresholds = field(default_factory=TrendThresholds)
    smells: SmellThresholds = field(default_factory=SmellThresholds)

    def __post_init__(self) -> None:
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.analyzer_timeout_seconds < 1:
            raise ValueError("analyzer_timeout_seconds must be at least 1")
        if self.git_timeout_seconds < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        if self.max_chart_points < 2:
            raise ValueError("max_chart_points must be at least 2")
        if self.kind not in ("all", "production", "utility"):
            raise ValueError("kind must be one of: all, production, utility")
        if self.top < 1:
            raise ValueError("top must be at least 1")


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset CLI options keep file/env values

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is missing or invalid
    """
    merged: dict = {}

    global_config = Path.home() / ".entropyx.toml"
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "entropyx.toml"
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    merged["thresholds"] = _nested(merged.pop("thresholds", None), TrendThresholds, "thresholds")
    merged["smells"] = _nested(merged.pop("smells", None), SmellThresholds, "smells")

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _nested(value: Any, cls: type, section: str) -> Any:
    """Build a nested config dataclass from a TOML table."""
    if value is None:
        return cls()
    if isinstance(value, cls):
        return value
    if not isinstance(value, dict):
        raise InvalidConfigError(section, value, "expected a table")
    try:
        return cls(**value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid [{section}] config: {e}")


def _read_config_file(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ENTROPYX_* environment variables.

    Supported environment variables:
        ENTROPYX_DB_PATH: str
        ENTROPYX_WORKERS: int
        ENTROPYX_ANALYZER_TIMEOUT_SECONDS: int
        ENTROPYX_GIT_TIMEOUT_SECONDS: int
        ENTROPYX_MAX_CHART_POINTS: int
        ENTROPYX_FOCUS: str
        ENTROPYX_KIND: all/production/utility
        ENTROPYX_TOP: int

    Returns:
        Dict of field_name -> parsed_value for any ENTROPYX_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"ENTROPYX_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Numbers are parsed with ``int()``/``float()``, which never consult the
    process locale.
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    # Nested dataclasses are configured through TOML tables only
    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
