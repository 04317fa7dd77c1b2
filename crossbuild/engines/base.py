"""Engine value type and the execution back-end interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from crossbuild.models import ContainerImage

AUTODETECT_ENGINE = ""
DOCKER_ENGINE = "docker"
PODMAN_ENGINE = "podman"
KUBERNETES_ENGINE = "kubernetes"

#: Tokens accepted by :func:`crossbuild.engines.resolve_engine`.
ENGINE_TOKENS: tuple[str, ...] = (
    AUTODETECT_ENGINE,
    DOCKER_ENGINE,
    PODMAN_ENGINE,
    KUBERNETES_ENGINE,
)


@dataclass(frozen=True)
class Engine:
    """A resolved container engine.

    Attributes:
        name: One of the engine tokens; empty while unresolved.
        binary: Absolute path of the engine executable. Empty for the
            Kubernetes back-end, which is driven through ``kubectl``.
    """

    name: str = AUTODETECT_ENGINE
    binary: str = ""

    def __str__(self) -> str:
        return self.name

    @property
    def is_docker(self) -> bool:
        return self.name == DOCKER_ENGINE

    @property
    def is_podman(self) -> bool:
        return self.name == PODMAN_ENGINE

    @property
    def is_kubernetes(self) -> bool:
        return self.name == KUBERNETES_ENGINE


class ExecutionEngine(ABC):
    """Abstract execution engine.

    Concrete implementations launch the command inside the container
    described by a :class:`~crossbuild.models.ContainerImage`. The interface
    is intentionally small so that call sites never branch on the engine.
    """

    @abstractmethod
    def prepare(self, image: ContainerImage) -> None:
        """Make *image* ready to run (e.g. pull it)."""
        raise NotImplementedError

    @abstractmethod
    def run(
        self,
        image: ContainerImage,
        args: Sequence[str],
        *,
        workdir: str | None = None,
    ) -> int:
        """Run *args* inside *image*.

        Args:
            image: Per-architecture build descriptor.
            args: Command line executed in the container.
            workdir: Container-side working directory. Defaults to the
                project work directory.

        Returns:
            ``0`` on success.

        Raises:
            crossbuild.utils.errors.CommandFailed: Non-zero exit status.
            crossbuild.utils.errors.Cancelled: The command was interrupted.
        """
        raise NotImplementedError
