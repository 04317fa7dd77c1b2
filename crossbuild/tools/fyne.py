"""Wrappers for the ``fyne`` packaging CLI shipped in the build images."""

from __future__ import annotations

from dataclasses import dataclass

from crossbuild.context import BuildContext
from crossbuild.engines import ExecutionEngine
from crossbuild.models import ContainerImage
from crossbuild.utils.paths import join_container_path

from .base import Tool, ToolSpec
from .icon import ICON_FILENAME


@dataclass
class FynePackageTool(Tool):
    """Run ``fyne package`` (debug) or ``fyne release`` for one image."""

    context: BuildContext
    release: bool = False

    def build_spec(self, image: ContainerImage) -> ToolSpec:  # type: ignore[override]
        """Return the container specification for the packaging command."""
        ctx = self.context
        args = [
            "fyne",
            "release" if self.release else "package",
            "-os",
            image.os,
            "-name",
            ctx.name,
            "-icon",
            join_container_path(ctx.tmp_dir_container(), image.id, ICON_FILENAME),
            "-appBuild",
            str(ctx.app_build),
            "-appVersion",
            ctx.app_version,
        ]
        if ctx.app_id:
            args += ["-appID", ctx.app_id]
        if ctx.tags:
            args += ["-tags", ",".join(ctx.tags)]
        if ctx.package not in ("", "."):
            args += ["-src", ctx.volume.join_container(ctx.package)]
        return ToolSpec(args, workdir=ctx.work_dir_container())


def fyne_package(context: BuildContext, image: ContainerImage, engine: ExecutionEngine) -> int:
    """Package the application in debug mode inside *image*."""
    return FynePackageTool(context, release=False).execute(engine, image)


def fyne_release(context: BuildContext, image: ContainerImage, engine: ExecutionEngine) -> int:
    """Package the application in release mode inside *image*."""
    return FynePackageTool(context, release=True).execute(engine, image)
