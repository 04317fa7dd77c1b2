from pathlib import Path

import click
import pytest

from crossbuild.config import CrossBuildConfig
from crossbuild.engines.base import Engine
from crossbuild.models import Architecture
from crossbuild.platforms import FREEBSD_ARCH_SUPPORTED, FreeBSD, PlatformBuilder
from crossbuild.platforms import flags as flags_mod
from crossbuild.platforms import freebsd as freebsd_mod
from crossbuild.platforms.flags import parse_env, parse_target_arch, split_commas
from crossbuild.utils.errors import EngineNotFound, UnsupportedArchitecture


@pytest.fixture
def patched(monkeypatch, recording_engine):
    """Replace engine resolution and execution with in-memory doubles."""
    requested = []

    def fake_resolve(token=""):
        requested.append(token)
        name = token or "docker"
        return Engine(name=name, binary=f"/usr/bin/{name}")

    monkeypatch.setattr(freebsd_mod, "resolve_engine", fake_resolve)
    monkeypatch.setattr(freebsd_mod, "new_execution_engine", lambda engine, ctx: recording_engine)
    monkeypatch.setattr(freebsd_mod, "host_architecture", lambda default=None: Architecture.AMD64)
    monkeypatch.setattr(flags_mod, "_default_arch", lambda: "amd64")
    return requested


def test_freebsd_is_a_platform_builder():
    """Verify FreeBSD satisfies the builder protocol."""
    builder = FreeBSD()
    assert builder.name() == "freebsd"
    assert "freebsd" in builder.description()
    assert isinstance(builder, PlatformBuilder)


def test_parse_all_arch(patched, project, tmp_path):
    """Verify '*' builds one image per supported architecture."""
    builder = FreeBSD(project_root=project)
    builder.parse(["--arch", "*", "--cache", str(tmp_path / "cache")])

    assert [img.id for img in builder.images] == ["freebsd-amd64", "freebsd-arm64"]
    assert builder.context.name == "myapp"
    assert builder.context.volume.work_dir_host == project.resolve()
    assert patched == [""]


def test_parse_comma_separated_arch(patched, project):
    """Verify comma-separated and repeated --arch values are merged."""
    builder = FreeBSD(project_root=project)
    builder.parse(["--arch", "arm64,amd64", "--arch", "arm64"])

    assert [img.arch for img in builder.images] == [Architecture.ARM64, Architecture.AMD64]


def test_parse_unsupported_arch(patched, project):
    """Verify an unsupported architecture is rejected."""
    builder = FreeBSD(project_root=project)
    with pytest.raises(UnsupportedArchitecture) as info:
        builder.parse(["--arch", "386"])
    assert info.value.arch == "386"


def test_parse_flags_reach_context(patched, project):
    """Verify application metadata lands on the build context."""
    builder = FreeBSD(project_root=project)
    builder.parse(
        [
            "--engine",
            "podman",
            "--release",
            "--app-id",
            "com.example.demo",
            "--app-version",
            "2.1.0",
            "--app-build",
            "7",
            "--name",
            "Demo",
            "--tags",
            "gles,hints",
            "--env",
            "FOO=bar",
            "-j",
            "2",
            "cmd/demo",
        ]
    )
    ctx = builder.context

    assert patched == ["podman"]
    assert ctx.engine.name == "podman"
    assert ctx.release is True
    assert ctx.app_id == "com.example.demo"
    assert ctx.app_version == "2.1.0"
    assert ctx.app_build == 7
    assert ctx.name == "Demo"
    assert ctx.tags == ("gles", "hints")
    assert ctx.package == "cmd/demo"
    assert ctx.env["FOO"] == "bar"
    assert builder.parallel == 2
    assert builder.images[0].env["FOO"] == "bar"
    assert builder.images[0].ref == "docker.io/fyneio/fyne-cross-images:freebsd-amd64"


def test_config_defaults_and_env_precedence(patched, project):
    """Verify config values apply and --env overrides config env."""
    cfg = CrossBuildConfig(engine="podman", env={"FOO": "cfg", "BAR": "1"}, parallel=3)
    builder = FreeBSD(config=cfg, project_root=project)
    builder.parse(["--env", "FOO=cli"])

    assert patched == ["podman"]
    assert dict(builder.context.env) == {"FOO": "cli", "BAR": "1"}
    assert builder.parallel == 3


def test_image_override_precedence(patched, project):
    """Verify --image beats the config file, which beats the default."""
    cfg = CrossBuildConfig(images={"freebsd": {"arm64": "registry.example.com/fb:arm64"}})

    builder = FreeBSD(config=cfg, project_root=project)
    builder.parse(["--arch", "*"])
    refs = {img.id: img.ref for img in builder.images}
    assert refs["freebsd-amd64"] == "fyneio/fyne-cross-images:freebsd-amd64"
    assert refs["freebsd-arm64"] == "registry.example.com/fb:arm64"

    builder.parse(["--arch", "*", "--image", "custom/img:1"])
    assert {img.ref for img in builder.images} == {"custom/img:1"}


def test_parse_uses_fresh_parser(patched, project):
    """Verify flags from one parse never leak into the next."""
    builder = FreeBSD(project_root=project)
    builder.parse(["--release", "--name", "First", "--arch", "arm64"])
    builder.parse([])

    assert builder.context.release is False
    assert builder.context.name == "myapp"
    assert [img.arch for img in builder.images] == [Architecture.AMD64]


def test_parse_invalid_env(patched, project):
    """Verify malformed --env values are usage errors."""
    builder = FreeBSD(project_root=project)
    with pytest.raises(click.BadParameter):
        builder.parse(["--env", "NOVALUE"])


def test_parse_engine_error_propagates(monkeypatch, project):
    """Verify engine resolution errors reach the caller unchanged."""

    def missing(token=""):
        raise EngineNotFound("docker")

    monkeypatch.setattr(freebsd_mod, "resolve_engine", missing)
    builder = FreeBSD(project_root=project)
    with pytest.raises(EngineNotFound):
        builder.parse(["--engine", "docker"])
    assert builder.images == []


def test_run_before_parse():
    """Verify run() without parse() is rejected."""
    with pytest.raises(RuntimeError):
        FreeBSD().run()


def test_parse_target_arch_dedupes():
    """Verify architecture tokens are validated and de-duplicated."""
    assert parse_target_arch(["amd64", "amd64"], FREEBSD_ARCH_SUPPORTED) == [Architecture.AMD64]
    assert parse_target_arch(["*"], FREEBSD_ARCH_SUPPORTED) == list(FREEBSD_ARCH_SUPPORTED)
    with pytest.raises(UnsupportedArchitecture):
        parse_target_arch(["arm"], FREEBSD_ARCH_SUPPORTED)


def test_split_commas_and_parse_env():
    """Verify the option helpers flatten and split their input."""
    assert split_commas(None, None, ("a, b", "c,,")) == ("a", "b", "c")
    assert parse_env(["A=1", "B=x=y", "C="]) == {"A": "1", "B": "x=y", "C": ""}


def test_project_dir_flag(patched, tmp_path):
    """Verify --dir selects the mounted project directory."""
    other = tmp_path / "other-app"
    other.mkdir()
    builder = FreeBSD(project_root=Path("/nonexistent"))
    builder.parse(["--dir", str(other)])

    assert builder.context.volume.work_dir_host == other.resolve()
    assert builder.context.name == "other-app"
