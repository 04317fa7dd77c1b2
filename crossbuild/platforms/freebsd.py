"""Build and package a Fyne application for FreeBSD."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar

import structlog

from crossbuild.config import CrossBuildConfig
from crossbuild.context import BuildContext
from crossbuild.driver import BuildReport, run_builds
from crossbuild.engines import ExecutionEngine, new_execution_engine, resolve_engine
from crossbuild.images import FREEBSD_OS, create_image
from crossbuild.models import Architecture, ContainerImage, host_architecture
from crossbuild.tools import fyne_package, fyne_release, prepare_icon
from crossbuild.utils.errors import (
    BuildPhaseError,
    Cancelled,
    CrossBuildError,
    ExtractFailed,
    PackagingFailed,
    RelocateFailed,
)
from crossbuild.utils.paths import join_container_path

from .flags import CommonFlags, make_build_context, make_parser, parse_target_arch

log = structlog.get_logger()

#: Target architectures supported on FreeBSD.
FREEBSD_ARCH_SUPPORTED: tuple[Architecture, ...] = (Architecture.AMD64, Architecture.ARM64)

#: Leading components stripped from ``usr/local/bin/<app>`` in the package.
_STRIP_COMPONENTS = 3
_PACKAGE_BIN_DIR = "usr/local/bin"

T = TypeVar("T")


def _phase(
    error_cls: type[BuildPhaseError], image: ContainerImage, step: Callable[[], T]
) -> T:
    """Run *step*, wrapping failures as *error_cls* for *image*.

    :class:`Cancelled` is re-raised untouched so an interrupt is never
    reported as a build failure.
    """
    try:
        return step()
    except Cancelled:
        raise
    except CrossBuildError as exc:
        raise error_cls(image.id, exc) from exc


class FreeBSD:
    """Build and package the application for the FreeBSD OS."""

    def __init__(
        self,
        config: Optional[CrossBuildConfig] = None,
        project_root: Optional[Path] = None,
    ) -> None:
        self.config = config or CrossBuildConfig()
        self.project_root = project_root or Path.cwd()
        self.images: List[ContainerImage] = []
        self.context: Optional[BuildContext] = None
        self.executor: Optional[ExecutionEngine] = None
        self.parallel = self.config.parallel

    def name(self) -> str:
        return FREEBSD_OS

    def description(self) -> str:
        return "Build and package a fyne application for the freebsd OS"

    # ------------------------------------------------------------------ #
    # Flag parsing and image setup                                       #
    # ------------------------------------------------------------------ #
    def parse(self, args: Sequence[str]) -> None:
        """Parse *args* with a fresh parser and set up the container images.

        Raises:
            click.exceptions.ClickException: Invalid flags.
            click.exceptions.Exit: ``--help`` was requested.
            crossbuild.utils.errors.CrossBuildError: Engine resolution or
                image construction failed.
        """
        parser = make_parser(
            self.name(),
            self.description(),
            FREEBSD_ARCH_SUPPORTED,
            config=self.config,
            project_root=self.project_root,
        )
        with parser.make_context(self.name(), list(args)) as ctx:
            flags = CommonFlags.from_params(ctx.params)
        self.setup_container_images(flags)

    def setup_container_images(self, flags: CommonFlags) -> None:
        """Resolve the engine and create one image per target architecture."""
        targets = parse_target_arch(flags.arch, FREEBSD_ARCH_SUPPORTED)

        engine = resolve_engine(flags.engine)
        self.context = make_build_context(flags, engine, self.config)
        self.executor = new_execution_engine(engine, self.context)
        self.parallel = flags.parallel

        host = host_architecture(default=Architecture.AMD64)
        self.images = [
            create_image(
                engine,
                arch,
                FREEBSD_OS,
                flags.image or self.config.image_for(FREEBSD_OS, arch),
                base_env=self.context.env,
                host_arch=host,
            )
            for arch in targets
        ]
        log.info(
            "freebsd.images",
            engine=engine.name,
            images=[img.id for img in self.images],
        )

    # ------------------------------------------------------------------ #
    # Build                                                              #
    # ------------------------------------------------------------------ #
    def run(self) -> BuildReport:
        """Build every configured image."""
        if self.context is None:
            raise RuntimeError("parse() must be called before run()")
        return run_builds(self, self.images, parallel=self.parallel)

    def build(self, image: ContainerImage) -> str:
        """Package *image* and extract the executable into ``bin/<id>``.

        Returns:
            The package file name, ``<name>.tar.xz``.

        Raises:
            crossbuild.utils.errors.IconNotFound: Icon staging failed (other
                errors from that step also propagate unwrapped).
            PackagingFailed: ``fyne package``/``fyne release`` failed.
            RelocateFailed: Moving the package into ``tmp/<id>`` failed.
            ExtractFailed: Unpacking the executable failed.
            Cancelled: A command was interrupted.
        """
        if self.context is None or self.executor is None:
            raise RuntimeError("parse() must be called before build()")
        ctx, executor = self.context, self.executor

        log.info("freebsd.package", image=image.id, release=ctx.release)
        package_name = f"{ctx.name}.tar.xz"
        tmp_package = join_container_path(ctx.tmp_dir_container(), image.id, package_name)

        prepare_icon(ctx, image, executor)

        packager = fyne_release if ctx.release else fyne_package
        _phase(PackagingFailed, image, lambda: packager(ctx, image, executor))

        _phase(
            RelocateFailed,
            image,
            lambda: executor.run(
                image,
                ["mv", join_container_path(ctx.work_dir_container(), package_name), tmp_package],
            ),
        )

        _phase(
            ExtractFailed,
            image,
            lambda: executor.run(
                image,
                ["tar", "-xf", tmp_package, f"--strip-components={_STRIP_COMPONENTS}", _PACKAGE_BIN_DIR],
                workdir=join_container_path(ctx.bin_dir_container(), image.id),
            ),
        )

        log.info("freebsd.packaged", image=image.id, artifact=package_name)
        return package_name
