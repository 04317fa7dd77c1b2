"""Command-line flags shared by every target OS command.

Each call to :func:`make_parser` returns a brand new :class:`click.Command`,
so parsing one invocation can never leak state into the next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import click

from crossbuild.config import CrossBuildConfig
from crossbuild.context import BuildContext, Volume
from crossbuild.engines.base import Engine
from crossbuild.models import Architecture, host_architecture
from crossbuild.utils.errors import UnsupportedArchitecture

#: ``--arch`` value selecting every supported architecture.
ALL_ARCH = "*"

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "crossbuild"


def split_commas(_ctx, _param, values: tuple[str, ...]) -> tuple[str, ...]:
    """Return a flat tuple from a *repeatable* / comma-separated Click option.

    Args:
        _ctx: Click context (ignored, required by Click callback signature).
        _param: Click parameter (ignored).
        values: Tuple emitted by Click for the option.

    Returns:
        Tuple with every comma-separated token stripped.
    """
    flat: list[str] = []
    for v in values:
        flat.extend(filter(None, (x.strip() for x in v.split(","))))
    return tuple(flat)


def parse_env(pairs: Iterable[str]) -> Dict[str, str]:
    """Turn ``KEY=VALUE`` strings into a dict.

    Raises:
        click.BadParameter: An entry has no ``=`` or an empty key.
    """
    env: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--env")
        env[key.strip()] = value
    return env


def parse_target_arch(
    values: Sequence[str], supported: Sequence[Architecture]
) -> list[Architecture]:
    """Validate the ``--arch`` tokens against *supported*.

    ``*`` selects every supported architecture. Duplicates are dropped while
    keeping the first-seen order.

    Raises:
        UnsupportedArchitecture: A token is not in *supported*.
    """
    if ALL_ARCH in values:
        return list(supported)
    names = [a.value for a in supported]
    selected: list[Architecture] = []
    for token in values:
        if token not in names:
            raise UnsupportedArchitecture(token, names)
        arch = Architecture(token)
        if arch not in selected:
            selected.append(arch)
    return selected


def _default_arch() -> str:
    return host_architecture(default=Architecture.AMD64).value


@dataclass
class CommonFlags:
    """Parsed flags common to every target OS command."""

    project_dir: Path
    package: str = "."
    arch: Tuple[str, ...] = ()
    engine: str = ""
    image: Optional[str] = None
    release: bool = False
    app_id: str = ""
    app_version: str = "1.0.0"
    app_build: int = 1
    icon: str = "Icon.png"
    name: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    tags: Tuple[str, ...] = ()
    pull: bool = False
    cache_dir: Path = DEFAULT_CACHE_DIR
    namespace: str = "default"
    parallel: int = 1

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "CommonFlags":
        """Build flags from the ``params`` of a parsed Click context."""
        return cls(
            project_dir=Path(params["project_dir"]).expanduser().resolve(),
            package=params["package"],
            arch=tuple(params["arch"]),
            engine=params["engine"],
            image=params["image"],
            release=params["release"],
            app_id=params["app_id"],
            app_version=params["app_version"],
            app_build=params["app_build"],
            icon=params["icon"],
            name=params["name"],
            env=parse_env(params["env"]),
            tags=tuple(params["tags"]),
            pull=params["pull"],
            cache_dir=Path(params["cache_dir"]).expanduser().resolve(),
            namespace=params["namespace"],
            parallel=params["parallel"],
        )


def make_parser(
    name: str,
    description: str,
    supported: Sequence[Architecture],
    *,
    config: CrossBuildConfig,
    project_root: Path,
) -> click.Command:
    """Return a fresh Click command parsing the flags of one target OS."""
    arch_help = (
        "Comma-separated target architectures, or '*' for all. "
        f"Supported: {', '.join(a.value for a in supported)}."
    )
    params: list[click.Parameter] = [
        click.Argument(["package"], default=".", required=False),
        click.Option(
            ["--arch"],
            multiple=True,
            default=(_default_arch(),),
            callback=split_commas,
            help=arch_help,
        ),
        click.Option(
            ["--engine"],
            default=config.engine,
            help="Container engine: docker, podman, kubernetes; empty to autodetect.",
        ),
        click.Option(["--image"], default=None, help="Override the build image for every arch."),
        click.Option(["--release"], is_flag=True, help="Package in release mode."),
        click.Option(["--app-id"], default="", help="Application ID used for distribution."),
        click.Option(["--app-version"], default="1.0.0", help="Application version."),
        click.Option(["--app-build"], type=click.IntRange(min=1), default=1, help="Build number."),
        click.Option(["--icon"], default="Icon.png", help="Icon path relative to the project dir."),
        click.Option(["--name"], default=None, help="Application name; defaults to the project dir name."),
        click.Option(["--env"], multiple=True, metavar="KEY=VALUE", help="Extra environment variable."),
        click.Option(["--tags"], multiple=True, callback=split_commas, help="Comma-separated Go build tags."),
        click.Option(["--pull"], is_flag=True, help="Pull the image before building."),
        click.Option(
            ["--dir", "project_dir"],
            type=click.Path(file_okay=False, path_type=Path),
            default=project_root,
            help="Project directory mounted into the container.",
        ),
        click.Option(
            ["--cache", "cache_dir"],
            type=click.Path(file_okay=False, path_type=Path),
            default=DEFAULT_CACHE_DIR,
            help="Host directory used as the Go build cache.",
        ),
        click.Option(["--namespace"], default=config.namespace, help="Kubernetes namespace."),
        click.Option(
            ["-j", "--parallel"],
            type=click.IntRange(min=1),
            default=config.parallel,
            help="Number of architectures built concurrently.",
        ),
    ]
    return click.Command(
        name,
        params=params,
        help=description,
        context_settings={"help_option_names": ["-h", "--help"], "show_default": True},
    )


def make_build_context(
    flags: CommonFlags, engine: Engine, config: CrossBuildConfig
) -> BuildContext:
    """Combine *flags*, *config* and the resolved *engine* into a context.

    Environment precedence: ``config.env`` first, ``--env`` on top.
    """
    env = {**config.env, **flags.env}
    return BuildContext(
        name=flags.name or flags.project_dir.name,
        volume=Volume(work_dir_host=flags.project_dir, cache_dir_host=flags.cache_dir),
        engine=engine,
        release=flags.release,
        app_id=flags.app_id,
        app_version=flags.app_version,
        app_build=flags.app_build,
        icon=flags.icon,
        package=flags.package,
        tags=flags.tags,
        env=env,
        pull=flags.pull,
        namespace=flags.namespace,
    )
