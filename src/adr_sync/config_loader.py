"""
Hierarchical YAML configuration loader for adr_sync.

Discovers config files by convention, supports ``!include`` and
``${VAR}`` / ``${VAR:-default}`` interpolation, and merges files with
"project wins" semantics.

Usage:
    from adr_sync.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ADR_SYNC_CONFIG"
PROJECT_CONFIG_DIR = ".adr_sync"

# ---------------------------------------------------------------------------
# Env var interpolation
# ---------------------------------------------------------------------------

# Matches ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` with environment values.

    An unset or empty VAR resolves to *default* when one is given, else to
    the empty string. A ``${`` with no closing brace is left as is.
    """

    def _replace(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        default = match.group(2)
        return default if default is not None else ""

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(obj: Any) -> Any:
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# YAML !include support
# ---------------------------------------------------------------------------


class IncludeLoader(yaml.SafeLoader):
    """``yaml.SafeLoader`` subclass that understands ``!include``.

    The global ``yaml.SafeLoader`` is never modified. Each load carries an
    include stack so circular includes are reported instead of recursing.
    """


def _include_constructor(loader: IncludeLoader, node: yaml.ScalarNode) -> Any:
    target = Path(loader.construct_scalar(node))
    if not target.is_absolute():
        target = Path(loader.name).resolve().parent / target
    target = target.resolve()

    include_stack: list[Path] = getattr(loader, "_include_stack", [])
    if target in include_stack:
        chain = " -> ".join(str(p) for p in [*include_stack, target])
        raise ValueError(f"Circular include detected: {chain}")

    if not target.exists():
        raise FileNotFoundError(
            f"Include file not found: {target} "
            f"(referenced from {Path(loader.name).resolve()})"
        )

    return _load_yaml_file(target, include_stack=[*include_stack, target])


IncludeLoader.add_constructor("!include", _include_constructor)


def _load_yaml_file(
    path: Path, *, include_stack: list[Path] | None = None
) -> Any:
    path = path.resolve()
    with open(path, "r", encoding="utf-8") as fh:
        loader = IncludeLoader(fh)
        loader._include_stack = include_stack or [path]  # type: ignore[attr-defined]
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

PROJECT_CONFIG_NAMES = ("config.yml", "config.yaml")
USER_CONFIG_PATH = Path(".config") / "adr_sync" / "config.yml"


def _candidate_paths() -> list[Path]:
    explicit = os.environ.get(CONFIG_ENV_VAR)
    found = [Path(explicit).expanduser().resolve()] if explicit else []
    project_dir = Path.cwd() / PROJECT_CONFIG_DIR
    found.extend(project_dir / name for name in PROJECT_CONFIG_NAMES)
    found.append(Path.home() / USER_CONFIG_PATH)
    return found


def discover_config_files() -> list[Path]:
    """Existing config files, highest precedence first.

    ``$ADR_SYNC_CONFIG``, then ``./.adr_sync/config.yml`` and
    ``./.adr_sync/config.yaml``, then ``~/.config/adr_sync/config.yml``.
    Missing candidates are dropped silently.
    """
    return [path for path in _candidate_paths() if path.is_file()]


# ---------------------------------------------------------------------------
# Hierarchical merge
# ---------------------------------------------------------------------------


def _read_sections(path: Path) -> dict[str, Any]:
    try:
        data = _load_yaml_file(path)
    except (OSError, ValueError, yaml.YAMLError):
        logger.exception("Failed to load config file %s", path)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Config file %s has non-dict root (%s), skipping",
            path,
            type(data).__name__,
        )
        return {}
    return data


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge all discovered config files.

    Lower-precedence files are read first. A section (``confluence``,
    ``adr``, ``logging``) from a higher-precedence file replaces the whole
    section from a lower one. ``${VAR}`` references are expanded after
    merging, so a project file can reference variables defined in .env.

    Returns an empty dict when no config files exist.
    """
    paths = discover_config_files()
    if not paths:
        logger.debug("No config files found, using defaults")
        return {}

    merged: dict[str, Any] = {}
    origin: dict[str, Path] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        sections = _read_sections(path)
        merged.update(sections)
        origin.update(dict.fromkeys(sections, path))

    for section, path in origin.items():
        logger.debug("Section %r taken from %s", section, path)
    return _interpolate_recursive(merged)
