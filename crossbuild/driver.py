"""Drive a :class:`~crossbuild.platforms.base.PlatformBuilder` over its images.

Images are independent once constructed, so they may be built on a thread
pool. A failure is recorded against its own architecture and never aborts
the others.
"""

from __future__ import annotations

import shlex
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

import structlog

from crossbuild.context import BuildContext
from crossbuild.engines import ExecutionEngine
from crossbuild.models import ContainerImage
from crossbuild.utils.errors import CrossBuildError
from crossbuild.utils.paths import join_container_path, join_host_path

if TYPE_CHECKING:  # pragma: no cover
    from crossbuild.platforms.base import PlatformBuilder

log = structlog.get_logger()


@dataclass
class BuildResult:
    """Outcome of building one image."""

    image_id: str
    artifact: Optional[str] = None
    output_dir: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BuildReport:
    """Per-architecture results in the order the images were given."""

    results: List[BuildResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def failed(self) -> List[BuildResult]:
        return [r for r in self.results if not r.ok]

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def clean_target_dirs(
    context: BuildContext, executor: ExecutionEngine, image: ContainerImage
) -> None:
    """Recreate the per-image ``bin``, ``dist`` and ``tmp`` directories."""
    dirs = [
        join_container_path(root, image.id)
        for root in (
            context.bin_dir_container(),
            context.dist_dir_container(),
            context.tmp_dir_container(),
        )
    ]
    quoted = " ".join(shlex.quote(d) for d in dirs)
    log.debug("target_dirs.clean", image=image.id, dirs=dirs)
    executor.run(image, ["sh", "-c", f"rm -rf {quoted} && mkdir -p {quoted}"])


def build_one(builder: PlatformBuilder, image: ContainerImage) -> BuildResult:
    """Prepare, clean and build *image*; errors are captured in the result."""
    log.info("build.start", image=image.id, ref=image.ref)
    try:
        builder.executor.prepare(image)
        clean_target_dirs(builder.context, builder.executor, image)
        artifact = builder.build(image)
    except CrossBuildError as exc:
        log.error("build.failed", image=image.id, error=str(exc))
        return BuildResult(image_id=image.id, error=exc)
    except Exception as exc:  # noqa: BLE001
        log.exception("build.crashed", image=image.id, error=str(exc))
        return BuildResult(image_id=image.id, error=exc)

    output_dir = join_host_path(builder.context.volume.bin_dir_host, image.id)
    log.info("build.done", image=image.id, artifact=artifact, output_dir=str(output_dir))
    return BuildResult(image_id=image.id, artifact=artifact, output_dir=output_dir)


def run_builds(
    builder: PlatformBuilder,
    images: Sequence[ContainerImage],
    *,
    parallel: int = 1,
) -> BuildReport:
    """Build every image and aggregate the results.

    Args:
        builder: Target OS builder owning *images*.
        images: Images to build; identity tokens must be unique.
        parallel: Maximum number of images built at the same time.

    Returns:
        :class:`BuildReport` listing one result per image, in input order.

    Raises:
        ValueError: Two images share an identity token.
    """
    ids = [img.id for img in images]
    if len(set(ids)) != len(ids):
        raise ValueError(f"duplicate image identity tokens: {ids}")

    if parallel <= 1 or len(images) <= 1:
        return BuildReport([build_one(builder, img) for img in images])

    with ThreadPoolExecutor(max_workers=min(parallel, len(images))) as pool:
        futures = [pool.submit(build_one, builder, img) for img in images]
        return BuildReport([fut.result() for fut in futures])
