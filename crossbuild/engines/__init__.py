"""Container engines: selection and execution back-ends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import (
    AUTODETECT_ENGINE,
    DOCKER_ENGINE,
    ENGINE_TOKENS,
    KUBERNETES_ENGINE,
    PODMAN_ENGINE,
    Engine,
    ExecutionEngine,
)
from .resolver import check_cluster, resolve_engine

if TYPE_CHECKING:  # pragma: no cover
    from crossbuild.context import BuildContext


def new_execution_engine(engine: Engine, context: BuildContext) -> ExecutionEngine:
    """Return the execution back-end that runs commands for *engine*."""
    # Deferred imports: the back-ends depend on crossbuild.context/models,
    # which in turn import this package for the Engine type.
    if engine.is_kubernetes:
        from .kubernetes import KubernetesEngine

        return KubernetesEngine(engine, context)
    if engine.is_docker or engine.is_podman:
        from .local import LocalContainerEngine

        return LocalContainerEngine(engine, context)
    raise ValueError(f"engine {engine.name!r} has not been resolved")


__all__ = [
    "AUTODETECT_ENGINE",
    "DOCKER_ENGINE",
    "PODMAN_ENGINE",
    "KUBERNETES_ENGINE",
    "ENGINE_TOKENS",
    "Engine",
    "ExecutionEngine",
    "check_cluster",
    "new_execution_engine",
    "resolve_engine",
]
