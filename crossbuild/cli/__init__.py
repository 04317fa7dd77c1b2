"""Expose the project-wide Click group for the ``crossbuild-cli`` script.

The module:

* declares a single Click *group* called :pyfunc:`main`;
* wires common global flags (project dir, config file, verbosity, etc.);
* sets up logging via :pyfunc:`crossbuild.utils.logging.setup_logging`;
* loads ``crossbuild.yaml``;
* registers every target OS sub-command lazily.
"""

from __future__ import annotations

import importlib
import os
from pathlib import Path
from typing import Any, Dict

import click

from crossbuild import __version__
from crossbuild.config import load_config
from crossbuild.utils.errors import ConfigError
from crossbuild.utils.logging import setup_logging


class LazyGroup(click.Group):
    """Click group that imports sub-commands lazily."""

    def __init__(self, *args, **kwargs):
        self._lazy: dict[str, str] = {}
        super().__init__(*args, **kwargs)

    def set_lazy_command(self, name: str, target: str) -> None:
        """Register *name* to be imported from ``target`` on first use."""
        self._lazy[name] = target

    def list_commands(self, ctx):  # noqa: D401 - Click signature
        return sorted({*super().list_commands(ctx), *self._lazy})

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        """Resolve *cmd_name* from the eager map or import table."""
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        target = self._lazy.get(cmd_name)
        if not target:
            return None
        module_name, attr = target.split(":", 1)
        module = importlib.import_module(module_name)
        cmd = getattr(module, attr)
        self.add_command(cmd, name=cmd_name)
        return cmd


_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)


@click.group(
    cls=LazyGroup,
    context_settings=_CTX,
    help="""\b
crossbuild-cli – cross-compile and package applications in containers.
""",
)
@click.version_option(__version__)
@click.option(
    "-C",
    "--project-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Project root. Falls back to $CROSSBUILD_PROJECT or the current directory.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Explicit crossbuild.yaml; defaults to <project>/crossbuild.yaml.",
)
@click.option("-v", "--verbose", is_flag=True, help="INFO-level console output.")
@click.option("--debug", is_flag=True, help="DEBUG console output.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console output into this plain-text file.",
)
@click.pass_context
def main(  # noqa: D401
    ctx: click.Context,
    project_dir: Path | None,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Root command executed by *crossbuild-cli*.

    Raises:
        click.ClickException: The configuration file is invalid.
    """
    root = (project_dir or Path(os.environ.get("CROSSBUILD_PROJECT", "."))).resolve()

    setup_logging(
        log_root=root if root.is_dir() else None,
        verbose=verbose,
        debug=debug,
        extra_text_log=save_logfile,
    )

    try:
        cfg = load_config(config_path=config_path, project_root=root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    ctx.obj = {
        "root": root,
        "cfg": cfg,
        "verbose": verbose,
        "debug": debug,
    }


main.set_lazy_command("freebsd", "crossbuild.cli.freebsd:cli")

cli = main
__all__: list[str] = ["main"]
