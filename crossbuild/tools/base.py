"""Base classes for commands executed inside build containers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from crossbuild.engines import ExecutionEngine
from crossbuild.models import ContainerImage


@dataclass
class ToolSpec:
    """Specification returned by :meth:`Tool.build_spec`.

    Attributes mirror the arguments of :meth:`ExecutionEngine.run` for
    convenience.
    """

    args: Sequence[str]
    workdir: str | None = None


class Tool:
    """Base class for wrappers around in-container utilities."""

    def execute(self, engine: ExecutionEngine, image: ContainerImage) -> int:
        """Build a :class:`ToolSpec` and execute it with *engine*."""
        spec = self.build_spec(image)
        return engine.run(image, spec.args, workdir=spec.workdir)

    def build_spec(self, image: ContainerImage) -> ToolSpec:
        """Return a :class:`ToolSpec` describing how to run this tool."""
        raise NotImplementedError
