"""Configuration loading and management for Playwright Insight.

Configuration sources are merged in priority order:
    1. Defaults (defined in DashboardConfig)
    2. Global config (~/.playwright-insight.toml)
    3. Project config (./playwright-insight.toml)
    4. Explicit config file
    5. Environment variables (PWINSIGHT_* prefix)
    6. Keyword overrides (typically CLI flags)

Every directory the dashboard reads is an explicit field here. Services
receive a config instance; nothing reads the process working directory
on its own.

Example:
    >>> config = load_config(root_dir="/srv/e2e", verbose=True)
    >>> config.results_path.name
    'test-results'
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError, InvalidPathError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "PWINSIGHT_"
CONFIG_FILENAME = "playwright-insight.toml"


@dataclass(frozen=True)
class DashboardConfig:
    """Locations and tuning knobs for the reporting dashboard.

    Attributes:
        Locations (relative paths resolve against root_dir):
            root_dir: Base directory of the Playwright project
            results_dir: Live results directory (latest, not yet archived runs)
            archive_dir: Historical copies of dated results files
            tests_dir: Spec source tree
            mapping_file: Requirement ID -> description JSON object
            overrides_file: Manual status overrides JSON object
            spec_suffix: File suffix that marks a spec source file

        Flaky detection:
            flaky_window_days: Number of calendar days compared (ending today)
            flaky_min_runs: Dated runs that must exist inside the window

        Output control:
            slowest_limit: Size of the slowest-tests list
            max_file_size_mb: Files above this size are skipped
            verbosity: Logging verbosity level
    """

    # Locations
    root_dir: str = "."
    results_dir: str = "test-results"
    archive_dir: str = "archive"
    tests_dir: str = "tests"
    mapping_file: str = "mapping.json"
    overrides_file: str = ".playwright-insight/overrides.json"
    spec_suffix: str = ".spec.ts"

    # Flaky detection
    flaky_window_days: int = 3
    flaky_min_runs: int = 2

    # Output control
    slowest_limit: int = 10
    max_file_size_mb: float = 50.0
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.flaky_window_days < 1:
            raise InvalidConfigError(
                "flaky_window_days", self.flaky_window_days, "must be at least 1"
            )
        if not 1 <= self.flaky_min_runs <= self.flaky_window_days:
            raise InvalidConfigError(
                "flaky_min_runs",
                self.flaky_min_runs,
                f"must be between 1 and flaky_window_days ({self.flaky_window_days})",
            )
        if self.slowest_limit < 1:
            raise InvalidConfigError("slowest_limit", self.slowest_limit, "must be at least 1")
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError(
                "max_file_size_mb", self.max_file_size_mb, "must be positive"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )
        if not self.spec_suffix:
            raise InvalidConfigError("spec_suffix", self.spec_suffix, "must not be empty")

    def _resolve(self, value: str) -> Path:
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return Path(self.root_dir).expanduser() / path

    @property
    def root_path(self) -> Path:
        return Path(self.root_dir).expanduser()

    @property
    def results_path(self) -> Path:
        return self._resolve(self.results_dir)

    @property
    def archive_path(self) -> Path:
        return self._resolve(self.archive_dir)

    @property
    def tests_path(self) -> Path:
        return self._resolve(self.tests_dir)

    @property
    def mapping_path(self) -> Path:
        return self._resolve(self.mapping_file)

    @property
    def overrides_path(self) -> Path:
        return self._resolve(self.overrides_file)

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


def load_config(config_file: Optional[Path] = None, **overrides) -> DashboardConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options fall through.

    Returns:
        Validated DashboardConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidPathError: If root_dir is not an existing directory
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    root_override = overrides.get("root_dir")
    project_root = Path(root_override) if root_override else Path.cwd()
    project_config = project_root / CONFIG_FILENAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    root = Path(str(merged.get("root_dir", "."))).expanduser()
    if not root.is_dir():
        raise InvalidPathError(root, "root_dir is not a directory")

    try:
        return DashboardConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from PWINSIGHT_* environment variables.

    Example: ``PWINSIGHT_ARCHIVE_DIR=/data/archive`` sets ``archive_dir``.
    """
    type_hints = get_type_hints(DashboardConfig)

    result: dict[str, Any] = {}

    for field_name in DashboardConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(field_name, env_value, f"{env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type."""
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

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    A ``[playwright-insight]`` table is accepted as well as top-level keys.
    """
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
        data = tomllib.load(f)
    section = data.get("playwright-insight")
    if isinstance(section, dict):
        return section
    return data
