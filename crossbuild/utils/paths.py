"""Path joining for the two sides of a volume mount.

Container paths are always POSIX, whatever the host OS, so they are joined
with :mod:`posixpath` rather than :mod:`pathlib`.
"""

from __future__ import annotations

import posixpath
from pathlib import Path


def join_container_path(*parts: str) -> str:
    """Join *parts* into a container-side path. No I/O is performed."""
    cleaned = [str(p) for p in parts if str(p)]
    if not cleaned:
        return ""
    return posixpath.normpath(posixpath.join(*cleaned))


def join_host_path(*parts: str | Path) -> Path:
    """Join *parts* into a host-side :class:`~pathlib.Path`."""
    return Path(*[str(p) for p in parts if str(p)])
