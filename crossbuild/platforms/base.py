"""Capability set every target OS command provides."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover
    from crossbuild.context import BuildContext
    from crossbuild.driver import BuildReport
    from crossbuild.engines import ExecutionEngine
    from crossbuild.models import ContainerImage


@runtime_checkable
class PlatformBuilder(Protocol):
    """A target OS able to parse its flags, build images and run them all.

    Implementations are plain classes; conformance is structural.
    """

    images: List[ContainerImage]
    context: BuildContext
    executor: ExecutionEngine
    parallel: int

    def name(self) -> str:
        """Command name, e.g. ``"freebsd"``."""
        ...

    def description(self) -> str:
        """One-line description shown in ``--help``."""
        ...

    def parse(self, args: Sequence[str]) -> None:
        """Parse *args* and construct the images to build."""
        ...

    def run(self) -> BuildReport:
        """Build every image and return the aggregated report."""
        ...

    def build(self, image: ContainerImage) -> str:
        """Build one image and return the artifact file name."""
        ...
