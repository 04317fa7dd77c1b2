"""Kubernetes execution engine.

Commands run in a one-shot pod created with ``kubectl run``. The pod cannot
mount the host project directory, so the image is expected to find the
sources at the container work directory (e.g. via a pre-populated persistent
volume configured in the cluster).
"""

from __future__ import annotations

import re
import shlex
import uuid
from typing import TYPE_CHECKING, Sequence

import structlog

from crossbuild.utils import process
from crossbuild.utils.errors import ClusterUnreachable

from .base import Engine, ExecutionEngine

if TYPE_CHECKING:  # pragma: no cover
    from crossbuild.context import BuildContext
    from crossbuild.models import ContainerImage

log = structlog.get_logger()

_POD_NAME_RE = re.compile(r"[^a-z0-9-]+")


def pod_name(image_id: str) -> str:
    """Return a unique, DNS-1123 compliant pod name for *image_id*."""
    base = _POD_NAME_RE.sub("-", f"crossbuild-{image_id}".lower()).strip("-")
    return f"{base[:50]}-{uuid.uuid4().hex[:8]}"


class KubernetesEngine(ExecutionEngine):
    """Run build commands in pods via ``kubectl run``."""

    def __init__(self, engine: Engine, context: BuildContext) -> None:
        if not engine.is_kubernetes:
            raise ValueError(f"{engine.name!r} is not the kubernetes engine")
        kubectl = process.lookup_executable("kubectl")
        if kubectl is None:
            raise ClusterUnreachable("kubectl binary not found in PATH")
        self.engine = engine
        self.context = context
        self.kubectl = kubectl

    def command(
        self,
        image: ContainerImage,
        args: Sequence[str],
        *,
        workdir: str | None = None,
    ) -> list[str]:
        """Return the ``kubectl run`` command line."""
        cmd: list[str] = [
            self.kubectl,
            "run",
            pod_name(image.id),
            "--rm",
            "-i",
            "--quiet",
            "--restart=Never",
            "--namespace",
            self.context.namespace,
            f"--image={image.ref}",
        ]
        for key, value in image.env_snapshot().items():
            cmd.append(f"--env={key}={value}")
        script = f"cd {shlex.quote(workdir or self.context.work_dir_container())} && {shlex.join(args)}"
        cmd += ["--command", "--", "sh", "-c", script]
        return cmd

    def prepare(self, image: ContainerImage) -> None:
        """Nothing to do: the cluster pulls images itself."""
        log.debug("kubernetes.prepare", image=image.ref, namespace=self.context.namespace)

    def run(
        self,
        image: ContainerImage,
        args: Sequence[str],
        *,
        workdir: str | None = None,
    ) -> int:
        """Execute *args* in a one-shot pod for *image*."""
        cmd = self.command(image, args, workdir=workdir)
        log.info(
            "kubernetes.run",
            image=image.id,
            namespace=self.context.namespace,
            args=list(args),
        )
        process.run_command(cmd, capture=False)
        return 0
