"""Stage the application icon where ``fyne package`` expects it."""

from __future__ import annotations

import structlog

from crossbuild.context import BuildContext
from crossbuild.engines import ExecutionEngine
from crossbuild.models import ContainerImage
from crossbuild.utils.errors import IconNotFound
from crossbuild.utils.paths import join_container_path

log = structlog.get_logger()

ICON_FILENAME = "Icon.png"


def prepare_icon(context: BuildContext, image: ContainerImage, engine: ExecutionEngine) -> None:
    """Copy the project icon to ``<tmp>/<image id>/Icon.png`` in the container.

    Raises:
        IconNotFound: The icon does not exist under the project directory.
        crossbuild.utils.errors.CommandFailed: The copy failed.
    """
    host_icon = context.volume.join_host(context.icon)
    if not host_icon.is_file():
        raise IconNotFound(str(host_icon))

    log.info("icon.stage", image=image.id, icon=context.icon)
    engine.run(
        image,
        [
            "cp",
            join_container_path(context.work_dir_container(), context.icon),
            join_container_path(context.tmp_dir_container(), image.id, ICON_FILENAME),
        ],
    )
