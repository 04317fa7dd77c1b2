"""
YAML configuration loader.

Search precedence (first match wins):

1. An explicit path argument (``--config`` on the CLI).
2. ``<project>/crossbuild.yaml`` – project-local configuration.
3. The packaged default shipped inside the wheel.
"""

from __future__ import annotations

from importlib.resources import as_file, files
from pathlib import Path
from typing import Optional

import structlog
import yaml
from pydantic import ValidationError

from crossbuild.utils.errors import ConfigError

from .schema import CrossBuildConfig

log = structlog.get_logger()

CONFIG_FILENAME = "crossbuild.yaml"

_DEFAULT_CONFIG = files("crossbuild.resources") / "default_config.yaml"


def _first_existing(*candidates: Optional[Path]) -> Optional[Path]:
    """Return the first path in *candidates* that exists on disk."""
    for p in candidates:
        if p is not None and p.exists():
            return p
    return None


def _load_yaml(path: Path) -> dict:
    """Read a YAML mapping; an empty file yields an empty dict."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML – {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def load_config(
    *,
    config_path: Optional[str | Path] = None,
    project_root: Optional[str | Path] = None,
) -> CrossBuildConfig:
    """Return a validated :class:`CrossBuildConfig`.

    Args:
        config_path: Explicit YAML path. Must exist when given.
        project_root: Project directory searched for ``crossbuild.yaml``.

    Raises:
        ConfigError: The explicit file is missing, or the YAML fails to parse
            or validate.
    """
    explicit = Path(config_path).expanduser().resolve() if config_path else None
    if explicit is not None and not explicit.is_file():
        raise ConfigError(f"configuration file not found: {explicit}")

    local = (
        Path(project_root).expanduser().resolve() / CONFIG_FILENAME
        if project_root
        else None
    )
    resolved = _first_existing(explicit, local)
    if resolved is None:
        with as_file(_DEFAULT_CONFIG) as p:
            data = _load_yaml(p)
            source = str(p)
    else:
        data = _load_yaml(resolved)
        source = str(resolved)

    try:
        cfg = CrossBuildConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source} – {exc}") from exc
    log.debug("config.loaded", source=source)
    return cfg
