"""Shared, read-only build context.

A :class:`BuildContext` is built once per invocation from the command-line
flags and configuration, then handed to every image's build. It is frozen and
its environment is exposed through a read-only mapping, so concurrent builds
can share it safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Tuple

from crossbuild.engines.base import Engine
from crossbuild.utils.paths import join_container_path, join_host_path

#: Directory, relative to the work dir, holding every crossbuild output.
OUTPUT_PREFIX = "crossbuild"

WORK_DIR_CONTAINER = "/app"
CACHE_DIR_CONTAINER = "/go"

_BIN_DIR = "bin"
_DIST_DIR = "dist"
_TMP_DIR = "tmp"


@dataclass(frozen=True)
class Volume:
    """Host/container directory layout of the project mount.

    Attributes:
        work_dir_host: Project root on the host, mounted at ``/app``.
        cache_dir_host: Go build cache on the host, mounted at ``/go``.

    Raises:
        ValueError: If a host root is relative or coincides with a
            container-side root.
    """

    work_dir_host: Path
    cache_dir_host: Path
    work_dir_container: str = WORK_DIR_CONTAINER
    cache_dir_container: str = CACHE_DIR_CONTAINER

    def __post_init__(self) -> None:
        object.__setattr__(self, "work_dir_host", Path(self.work_dir_host))
        object.__setattr__(self, "cache_dir_host", Path(self.cache_dir_host))
        container_roots = {self.work_dir_container, self.cache_dir_container}
        for attr in ("work_dir_host", "cache_dir_host"):
            value: Path = getattr(self, attr)
            if not value.is_absolute():
                raise ValueError(f"{attr} must be absolute, got {value}")
            if value.as_posix() in container_roots:
                raise ValueError(f"{attr} {value} collides with a container-side root")
        for root in container_roots:
            if not root.startswith("/"):
                raise ValueError(f"container root must be absolute, got {root!r}")

    # ------------------------------------------------------------------ #
    # Host side                                                          #
    # ------------------------------------------------------------------ #
    @property
    def bin_dir_host(self) -> Path:
        return join_host_path(self.work_dir_host, OUTPUT_PREFIX, _BIN_DIR)

    @property
    def dist_dir_host(self) -> Path:
        return join_host_path(self.work_dir_host, OUTPUT_PREFIX, _DIST_DIR)

    @property
    def tmp_dir_host(self) -> Path:
        return join_host_path(self.work_dir_host, OUTPUT_PREFIX, _TMP_DIR)

    # ------------------------------------------------------------------ #
    # Container side                                                     #
    # ------------------------------------------------------------------ #
    @property
    def bin_dir_container(self) -> str:
        return join_container_path(self.work_dir_container, OUTPUT_PREFIX, _BIN_DIR)

    @property
    def dist_dir_container(self) -> str:
        return join_container_path(self.work_dir_container, OUTPUT_PREFIX, _DIST_DIR)

    @property
    def tmp_dir_container(self) -> str:
        return join_container_path(self.work_dir_container, OUTPUT_PREFIX, _TMP_DIR)

    def join_container(self, *parts: str) -> str:
        """Return *parts* joined under the container work directory."""
        return join_container_path(self.work_dir_container, *parts)

    def join_host(self, *parts: str) -> Path:
        """Return *parts* joined under the host work directory."""
        return join_host_path(self.work_dir_host, *parts)


@dataclass(frozen=True)
class BuildContext:
    """Everything an image build needs besides the image itself.

    ``env`` holds global overrides (config file, then ``--env``); it is
    frozen into a read-only mapping on construction.
    """

    name: str
    volume: Volume
    engine: Engine
    release: bool = False
    app_id: str = ""
    app_version: str = "1.0.0"
    app_build: int = 1
    icon: str = "Icon.png"
    package: str = "."
    tags: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    pull: bool = False
    namespace: str = "default"

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("application name must not be empty")
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    def work_dir_container(self) -> str:
        return self.volume.work_dir_container

    def tmp_dir_container(self) -> str:
        return self.volume.tmp_dir_container

    def bin_dir_container(self) -> str:
        return self.volume.bin_dir_container

    def dist_dir_container(self) -> str:
        return self.volume.dist_dir_container
