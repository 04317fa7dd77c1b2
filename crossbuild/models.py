"""
Domain-level data models shared by the engine, builder and CLI layers.

The module provides:

* **`Architecture`** – closed enumeration of target CPU architectures.
* **`host_architecture`** – maps the running machine onto that enumeration.
* **`ContainerImage`** – per-architecture build descriptor. Each instance owns
  its environment mapping; nothing else holds a reference to it.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping

from crossbuild.engines.base import Engine


class Architecture(str, Enum):
    """Target CPU architecture, spelled the way ``GOARCH`` expects it."""

    AMD64 = "amd64"
    ARM64 = "arm64"
    ARM = "arm"
    I386 = "386"

    def __str__(self) -> str:
        return self.value


# ``platform.machine()`` spellings seen on Linux, macOS, the BSDs and Windows.
_MACHINE_ALIASES: Dict[str, Architecture] = {
    "x86_64": Architecture.AMD64,
    "amd64": Architecture.AMD64,
    "aarch64": Architecture.ARM64,
    "arm64": Architecture.ARM64,
    "armv7l": Architecture.ARM,
    "armv6l": Architecture.ARM,
    "i386": Architecture.I386,
    "i686": Architecture.I386,
    "x86": Architecture.I386,
}


def host_architecture(
    machine: str | None = None, default: Architecture | None = None
) -> Architecture:
    """Return the :class:`Architecture` of the host.

    Args:
        machine: Override for ``platform.machine()``; used by tests.
        default: Returned for unknown machine types instead of raising.

    Raises:
        ValueError: If the machine type has no known mapping and no
            *default* was given.
    """
    raw = (machine if machine is not None else platform.machine()).lower()
    try:
        return _MACHINE_ALIASES[raw]
    except KeyError:
        if default is not None:
            return default
        raise ValueError(f"unknown host architecture: {raw!r}") from None


@dataclass
class ContainerImage:
    """Build descriptor for one target OS/architecture pair.

    Attributes:
        os: Target OS tag, e.g. ``"freebsd"``.
        arch: Target architecture.
        ref: Container image reference.
        engine: Engine the image is meant to run on.
        env: Environment variables exported inside the container. Copied on
            construction so that two images never share one mapping.
    """

    os: str
    arch: Architecture
    ref: str
    engine: Engine = field(default_factory=Engine)
    env: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.arch = Architecture(self.arch)
        self.env = dict(self.env)

    @property
    def id(self) -> str:
        """Identity token namespacing temp and output paths (``os-arch``)."""
        return f"{self.os}-{self.arch.value}"

    def set_env(self, key: str, value: str) -> None:
        self.env[key] = value

    def env_snapshot(self) -> Mapping[str, str]:
        """Return a copy of the environment, sorted by variable name."""
        return dict(sorted(self.env.items()))
