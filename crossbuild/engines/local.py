"""Docker/Podman execution engine."""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Sequence

import structlog

from crossbuild.models import Architecture, ContainerImage, host_architecture
from crossbuild.utils import process

from .base import Engine, ExecutionEngine

if TYPE_CHECKING:  # pragma: no cover
    from crossbuild.context import BuildContext

log = structlog.get_logger()


class LocalContainerEngine(ExecutionEngine):
    """Run build commands in containers on the local Docker or Podman."""

    def __init__(self, engine: Engine, context: BuildContext) -> None:
        """Configure the engine.

        Args:
            engine: Resolved local engine; ``engine.binary`` is executed.
            context: Shared build context providing the volume layout.
        """
        if not (engine.is_docker or engine.is_podman):
            raise ValueError(f"{engine.name!r} is not a local container engine")
        self.engine = engine
        self.context = context

    def _platform_args(self) -> list[str]:
        # The build images are published for amd64 only; arm64 hosts run
        # them under emulation.
        if host_architecture(default=Architecture.AMD64) == Architecture.ARM64:
            return ["--platform", "linux/amd64"]
        return []

    def _user_args(self) -> list[str]:
        if self.engine.is_podman:
            return ["--userns", "keep-id", "-e", "use_podman=1"]
        if sys.platform.startswith("linux"):
            return ["-u", f"{os.getuid()}:{os.getgid()}"]
        return []

    def command(
        self,
        image: ContainerImage,
        args: Sequence[str],
        *,
        workdir: str | None = None,
    ) -> list[str]:
        """Return the ``docker run``/``podman run`` command line."""
        vol = self.context.volume
        cmd: list[str] = [self.engine.binary, "run", "--rm", "-t"]
        cmd += self._user_args()
        cmd += ["-w", workdir or vol.work_dir_container]
        cmd += ["-v", f"{vol.work_dir_host}:{vol.work_dir_container}"]
        cmd += ["-v", f"{vol.cache_dir_host}:{vol.cache_dir_container}"]
        cmd += self._platform_args()
        cmd += ["-e", "CGO_ENABLED=1", "-e", f"GOCACHE={vol.cache_dir_container}/go-build"]
        for key, value in image.env_snapshot().items():
            cmd += ["-e", f"{key}={value}"]
        cmd.append(image.ref)
        cmd.extend(args)
        return cmd

    def prepare(self, image: ContainerImage) -> None:
        """Pull *image* when the context asks for fresh images."""
        if not self.context.pull:
            return
        log.info("container.pull", engine=self.engine.name, image=image.ref)
        process.run_command([self.engine.binary, "pull", image.ref], capture=False)

    def run(
        self,
        image: ContainerImage,
        args: Sequence[str],
        *,
        workdir: str | None = None,
    ) -> int:
        """Execute *args* in a throw-away container for *image*.

        Raises:
            crossbuild.utils.errors.CommandFailed: The container exited with
                a non-zero status.
        """
        cmd = self.command(image, args, workdir=workdir)
        log.info("container.run", engine=self.engine.name, image=image.id, args=list(args))
        process.run_command(cmd, capture=False)
        return 0
