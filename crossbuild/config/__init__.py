"""
Configuration package façade.

Exports the small, stable surface that external callers rely on:

* :func:`load_config` – locate, parse and validate ``crossbuild.yaml``.
* :class:`CrossBuildConfig` – Pydantic model of the validated configuration.
"""

from .loader import CONFIG_FILENAME, load_config  # noqa: F401
from .schema import CrossBuildConfig  # noqa: F401

__all__: list[str] = ["CONFIG_FILENAME", "load_config", "CrossBuildConfig"]
