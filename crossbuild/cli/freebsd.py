"""Entry-point for ``crossbuild-cli freebsd``.

The Click command only forwards its raw arguments: flag parsing belongs to
:meth:`crossbuild.platforms.FreeBSD.parse`, which builds a fresh parser for
every invocation.
"""

from __future__ import annotations

import click
import structlog

from crossbuild.driver import BuildReport
from crossbuild.platforms import FreeBSD
from crossbuild.utils.errors import CrossBuildError

log = structlog.get_logger()


def echo_report(report: BuildReport) -> None:
    """Print one line per architecture."""
    for result in report.results:
        if result.ok:
            click.echo(f"[✓] {result.image_id}: {result.artifact} -> {result.output_dir}")
        else:
            click.echo(f"[✗] {result.image_id}: {result.error}", err=True)


@click.command(
    name="freebsd",
    context_settings={
        "ignore_unknown_options": True,  # Pass unrecognised flags downstream.
        "allow_extra_args": True,
        "help_option_names": [],  # Let '--help' reach the builder's parser.
    },
)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Build and package a fyne application for the freebsd OS."""
    builder = FreeBSD(config=ctx.obj["cfg"], project_root=ctx.obj["root"])
    try:
        builder.parse(ctx.args)
        report = builder.run()
    except CrossBuildError as exc:
        log.error("freebsd.aborted", error=str(exc))
        raise click.ClickException(str(exc)) from exc

    echo_report(report)
    if not report.ok:
        failed = ", ".join(r.image_id for r in report.failed)
        click.echo(f"{len(report.failed)} of {len(report.results)} build(s) failed: {failed}", err=True)
        ctx.exit(report.exit_code)
