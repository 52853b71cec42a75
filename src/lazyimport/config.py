"""Configuration — ``[tool.lazyimport]`` in pyproject.toml plus environment.

Recognised keys::

    [tool.lazyimport]
    exclusions = ["numpy", "pandas\\..*"]   # always imported eagerly
    package-only = true                      # only defer bare package names

Environment overrides (applied after the file):

- ``LAZYIMPORT_EXCLUSIONS``: comma-separated patterns, appended.
- ``LAZYIMPORT_PACKAGE_ONLY``: ``1``/``true`` or ``0``/``false``.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

# Try tomllib (Python 3.11+) then tomli for pyproject.toml parsing
try:
    import tomllib
except ImportError:
    try:
        import tomli as tomllib  # type: ignore[no-redefine]
    except ImportError:
        tomllib = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

# ── Constants ──

ENV_EXCLUSIONS = "LAZYIMPORT_EXCLUSIONS"
ENV_PACKAGE_ONLY = "LAZYIMPORT_PACKAGE_ONLY"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Malformed lazyimport configuration."""


@dataclass
class LazyImportConfig:
    """Options for a :class:`~lazyimport.interceptor.LazyImporter`.

    Attributes:
        exclusions: Regular expressions naming requests that are always
            imported eagerly, together with everything they import.
        package_only: Only defer bare top-level package names; dotted and
            relative requests are imported eagerly.
    """

    exclusions: list[str] = field(default_factory=list)
    package_only: bool = True


def _find_pyproject(start: Path) -> Optional[Path]:
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _parse_bool(raw: str, source: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{source}: expected a boolean, got {raw!r}")


def _read_table(pyproject: Path) -> dict:
    if tomllib is None:
        logger.warning("No TOML parser available; ignoring %s", pyproject)
        return {}
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read {pyproject}: {e}") from e
    tool = data.get("tool", {})
    if not isinstance(tool, dict):
        raise ConfigError(f"{pyproject}: [tool] must be a table")
    table = tool.get("lazyimport", {})
    if not isinstance(table, dict):
        raise ConfigError(f"{pyproject}: [tool.lazyimport] must be a table")
    return table


def config_from_table(table: Mapping, source: str = "[tool.lazyimport]") -> LazyImportConfig:
    """Build a config from a parsed ``[tool.lazyimport]`` table."""
    config = LazyImportConfig()

    exclusions = table.get("exclusions", [])
    if not isinstance(exclusions, list) or not all(isinstance(p, str) for p in exclusions):
        raise ConfigError(f"{source}: 'exclusions' must be a list of strings")
    config.exclusions = list(exclusions)

    package_only = table.get("package-only", table.get("package_only", True))
    if not isinstance(package_only, bool):
        raise ConfigError(f"{source}: 'package-only' must be a boolean")
    config.package_only = package_only
    return config


def load_config(
    project_path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LazyImportConfig:
    """Load configuration for a project.

    Args:
        project_path: Directory to search upwards from for pyproject.toml.
            Defaults to the current working directory.
        environ: Environment mapping; defaults to ``os.environ``.

    Raises:
        ConfigError: If the file or an environment variable is malformed.
    """
    environ = os.environ if environ is None else environ
    start = Path(project_path).resolve() if project_path else Path.cwd()

    pyproject = _find_pyproject(start)
    if pyproject is not None:
        config = config_from_table(_read_table(pyproject), source=str(pyproject))
        logger.debug("Loaded config from %s", pyproject)
    else:
        config = LazyImportConfig()

    extra = environ.get(ENV_EXCLUSIONS, "")
    config.exclusions.extend(p.strip() for p in extra.split(",") if p.strip())

    package_only = environ.get(ENV_PACKAGE_ONLY)
    if package_only is not None:
        config.package_only = _parse_bool(package_only, ENV_PACKAGE_ONLY)

    return config
