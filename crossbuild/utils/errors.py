"""Custom exceptions raised across the cross-build pipeline.

Engine errors are fatal to a whole run: without an engine nothing can build.
Build phase errors are fatal to one image only and carry the image identity
token plus the failing phase so a report can attribute them to a single
architecture.
"""

from __future__ import annotations

from typing import Sequence


class CrossBuildError(RuntimeError):
    """Base class for every error raised by *crossbuild*."""

    pass


class ConfigError(CrossBuildError):
    """Raised when ``crossbuild.yaml`` cannot be parsed or validated."""


# --------------------------------------------------------------------------- #
# Engine selection                                                            #
# --------------------------------------------------------------------------- #
class EngineError(CrossBuildError):
    """Raised when no usable container engine can be selected."""


class EngineNotFound(EngineError):
    """The requested engine binary is not on ``PATH``."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} binary not found in PATH")


class EngineDetectionFailed(EngineError):
    """Autodetection could not recognise the engine from its version output."""

    def __init__(self, output: str) -> None:
        self.output = output
        super().__init__(f"could not detect engine version: {output.strip()!r}")


class ClusterUnreachable(EngineError):
    """The Kubernetes cluster could not be contacted."""

    def __init__(self, cause: str) -> None:
        self.cause = cause
        super().__init__(f"could not connect to the Kubernetes cluster: {cause}")


class UnsupportedEngine(EngineError):
    """The requested engine token is not one of the known names."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unsupported container engine: {name!r}")


# --------------------------------------------------------------------------- #
# Targets                                                                     #
# --------------------------------------------------------------------------- #
class UnsupportedTarget(CrossBuildError):
    """No default image or toolchain exists for an ``(os, arch)`` pair."""

    def __init__(self, os_tag: str, arch: str) -> None:
        self.os_tag = os_tag
        self.arch = arch
        super().__init__(f"no build image available for {os_tag}/{arch}")


class UnsupportedArchitecture(CrossBuildError):
    """An architecture named on the command line is not supported."""

    def __init__(self, arch: str, supported: Sequence[str]) -> None:
        self.arch = arch
        self.supported = list(supported)
        super().__init__(
            f"arch {arch!r} is not supported. Supported: {', '.join(self.supported)}"
        )


class IconNotFound(CrossBuildError):
    """The application icon does not exist in the project directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"icon not found at {path!r}")


# --------------------------------------------------------------------------- #
# Process execution                                                           #
# --------------------------------------------------------------------------- #
class CommandFailed(CrossBuildError):
    """A subprocess exited with a non-zero status or could not be spawned."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: int | None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip() or stdout.strip()
        msg = f"{self.command[0] if self.command else '<empty>'} exited with status {returncode}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class Cancelled(CrossBuildError):
    """A subprocess was interrupted or exceeded its timeout."""


# --------------------------------------------------------------------------- #
# Build phases                                                                #
# --------------------------------------------------------------------------- #
class BuildPhaseError(CrossBuildError):
    """A build phase failed for one image."""

    phase: str = "build"

    def __init__(self, image_id: str, cause: BaseException) -> None:
        self.image_id = image_id
        self.cause = cause
        super().__init__(f"[{image_id}] {self.phase} failed: {cause}")


class PackagingFailed(BuildPhaseError):
    """``fyne package``/``fyne release`` failed inside the container."""

    phase = "package"


class RelocateFailed(BuildPhaseError):
    """Moving the package into the per-image temp directory failed."""

    phase = "relocate"


class ExtractFailed(BuildPhaseError):
    """Extracting the binary into the per-image output directory failed."""

    phase = "extract"
