"""Per-architecture container image construction.

:func:`create_image` is a pure function of its arguments: it selects the
image reference, copies the base environment and layers the cross toolchain
variables for the target on top.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from crossbuild.engines.base import Engine
from crossbuild.models import Architecture, ContainerImage, host_architecture
from crossbuild.utils.errors import UnsupportedTarget

FREEBSD_OS = "freebsd"

#: Built-in image references keyed by ``(os, arch)``.
DEFAULT_IMAGES: Dict[Tuple[str, Architecture], str] = {
    (FREEBSD_OS, Architecture.AMD64): "fyneio/fyne-cross-images:freebsd-amd64",
    (FREEBSD_OS, Architecture.ARM64): "fyneio/fyne-cross-images:freebsd-arm64",
}

_FREEBSD_SYSROOT = "/freebsd"
_FREEBSD_TRIPLES: Dict[Architecture, str] = {
    Architecture.AMD64: "x86_64-unknown-freebsd12",
    Architecture.ARM64: "aarch64-unknown-freebsd12",
}

LDFLAGS_VAR = "CGO_LDFLAGS"
LLD_FLAG = "-fuse-ld=lld"

# Registry assumed for short image names under Podman.
_DEFAULT_REGISTRY = "docker.io"


def default_image(os_tag: str, arch: Architecture) -> str:
    """Return the built-in image reference for *os_tag*/*arch*.

    Raises:
        UnsupportedTarget: No image is published for the pair.
    """
    try:
        return DEFAULT_IMAGES[(os_tag, Architecture(arch))]
    except (KeyError, ValueError):
        raise UnsupportedTarget(os_tag, str(arch)) from None


def toolchain_env(os_tag: str, arch: Architecture) -> Dict[str, str]:
    """Return the mandatory cross toolchain variables for the target."""
    arch = Architecture(arch)
    env = {"GOOS": os_tag, "GOARCH": arch.value}
    if os_tag == FREEBSD_OS:
        triple = _FREEBSD_TRIPLES.get(arch)
        if triple is None:
            raise UnsupportedTarget(os_tag, arch.value)
        flags = f"--sysroot={_FREEBSD_SYSROOT} --target={triple}"
        env["CC"] = f"clang {flags}"
        env["CXX"] = f"clang++ {flags}"
    return env


def needs_lld(host: Architecture, target: Architecture) -> bool:
    """Return ``True`` when cross-linking between amd64 and arm64 hosts."""
    host, target = Architecture(host), Architecture(target)
    if target == Architecture.ARM64:
        return host != Architecture.ARM64
    if target == Architecture.AMD64:
        return host == Architecture.ARM64
    return False


def apply_lld_linker(env: Dict[str, str]) -> Dict[str, str]:
    """Append :data:`LLD_FLAG` to ``CGO_LDFLAGS`` in place and return *env*.

    Existing flags are kept: ``"-existing"`` becomes
    ``"-existing -fuse-ld=lld"``. The flag is never added twice.
    """
    current = env.get(LDFLAGS_VAR, "").strip()
    if LLD_FLAG in current.split():
        return env
    env[LDFLAGS_VAR] = f"{current} {LLD_FLAG}" if current else LLD_FLAG
    return env


def qualify_ref(engine: Engine, ref: str) -> str:
    """Prefix short image names with ``docker.io`` for Podman."""
    if not engine.is_podman:
        return ref
    first = ref.split("/", 1)[0]
    if "/" in ref and ("." in first or ":" in first or first == "localhost"):
        return ref
    return f"{_DEFAULT_REGISTRY}/{ref}"


def create_image(
    engine: Engine,
    arch: Architecture,
    os_tag: str,
    override_ref: Optional[str] = None,
    *,
    base_env: Optional[Mapping[str, str]] = None,
    host_arch: Optional[Architecture] = None,
) -> ContainerImage:
    """Build the :class:`ContainerImage` for one target architecture.

    Args:
        engine: Resolved engine the image will run on.
        arch: Target architecture.
        os_tag: Target OS tag, e.g. ``"freebsd"``.
        override_ref: Image reference from configuration; used verbatim
            when given.
        base_env: Global environment overrides copied into the image before
            the toolchain variables are set.
        host_arch: Host architecture; detected when omitted.

    Returns:
        A new image whose environment is not shared with any other object.

    Raises:
        UnsupportedTarget: No default image or toolchain for the target.
    """
    arch = Architecture(arch)
    ref = override_ref or qualify_ref(engine, default_image(os_tag, arch))

    env: Dict[str, str] = dict(base_env or {})
    env.update(toolchain_env(os_tag, arch))
    if needs_lld(host_arch or host_architecture(default=Architecture.AMD64), arch):
        apply_lld_linker(env)

    return ContainerImage(os=os_tag, arch=arch, ref=ref, engine=engine, env=env)
