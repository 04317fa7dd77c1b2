import pytest
from click.testing import CliRunner

from crossbuild.cli import main
from crossbuild.engines.base import Engine
from crossbuild.models import Architecture
from crossbuild.platforms import flags as flags_mod
from crossbuild.platforms import freebsd as freebsd_mod
from crossbuild.utils.errors import CommandFailed, UnsupportedEngine


@pytest.fixture(autouse=True)
def _isolated_logs(monkeypatch, tmp_path):
    monkeypatch.setenv("CROSSBUILD_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("CROSSBUILD_PROJECT", raising=False)


@pytest.fixture
def fake_engine(monkeypatch, engine_factory):
    """Patch engine resolution; returns a setter for the executor double."""
    holder = {"executor": engine_factory()}
    monkeypatch.setattr(freebsd_mod, "resolve_engine", lambda token="": Engine("docker", "/usr/bin/docker"))
    monkeypatch.setattr(freebsd_mod, "new_execution_engine", lambda engine, ctx: holder["executor"])
    monkeypatch.setattr(freebsd_mod, "host_architecture", lambda default=None: Architecture.AMD64)
    monkeypatch.setattr(flags_mod, "_default_arch", lambda: "amd64")
    return holder


def test_freebsd_command_builds_all_arch(fake_engine, project, tmp_path):
    """Verify the freebsd sub-command builds and reports every architecture."""
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["-C", str(project), "freebsd", "--arch", "*", "--cache", str(tmp_path / "cache"), "--app-id", "com.example.myapp"],
    )

    assert result.exit_code == 0, result.output
    assert "[✓] freebsd-amd64: myapp.tar.xz" in result.output
    assert "[✓] freebsd-arm64: myapp.tar.xz" in result.output
    assert (tmp_path / "logs" / "crossbuild.log").exists()


def test_freebsd_command_reports_failure(fake_engine, engine_factory, project):
    """Verify a failed build prints the error and exits non-zero."""
    fake_engine["executor"] = engine_factory(fail_on={"fyne": CommandFailed(["fyne"], 1, "", "no go.mod")})
    runner = CliRunner()
    result = runner.invoke(main, ["-C", str(project), "freebsd"])

    assert result.exit_code == 1
    assert "freebsd-amd64" in result.output
    assert "package failed" in result.output
    assert "1 of 1 build(s) failed" in result.output


def test_freebsd_command_engine_error(monkeypatch, project):
    """Verify engine errors abort with a usage-style message."""

    def unsupported(token=""):
        raise UnsupportedEngine(token)

    monkeypatch.setattr(freebsd_mod, "resolve_engine", unsupported)
    runner = CliRunner()
    result = runner.invoke(main, ["-C", str(project), "freebsd", "--engine", "bogus"])

    assert result.exit_code == 1
    assert "unsupported container engine: 'bogus'" in result.output


def test_freebsd_help_is_forwarded(project):
    """Verify --help reaches the builder's own parser."""
    runner = CliRunner()
    result = runner.invoke(main, ["-C", str(project), "freebsd", "--help"])

    assert result.exit_code == 0
    assert "--arch" in result.output
    assert "--app-id" in result.output


def test_bad_config_is_reported(project):
    """Verify an invalid crossbuild.yaml aborts before any build."""
    (project / "crossbuild.yaml").write_text("parallel: 0\n")
    runner = CliRunner()
    result = runner.invoke(main, ["-C", str(project), "freebsd"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_lists_freebsd_command(project):
    """Verify the lazily registered sub-command shows up in --help."""
    runner = CliRunner()
    result = runner.invoke(main, ["-C", str(project), "--help"])

    assert result.exit_code == 0
    assert "freebsd" in result.output
