import subprocess
from types import SimpleNamespace

import pytest

from crossbuild.utils import process
from crossbuild.utils.errors import Cancelled, CommandFailed


def _fake_run(returncode=0, stdout="", stderr="", calls=None):
    def run(argv, **kwargs):
        if calls is not None:
            calls.append((argv, kwargs))
        return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)

    return run


def test_run_command_success(monkeypatch):
    """Verify a zero exit returns the captured output."""
    calls = []
    monkeypatch.setattr(subprocess, "run", _fake_run(stdout="Docker version 24\n", calls=calls))

    result = process.run_command(["/usr/bin/docker", "--version"], timeout=5)

    assert result.returncode == 0
    assert result.stdout == "Docker version 24\n"
    argv, kwargs = calls[0]
    assert argv == ["/usr/bin/docker", "--version"]
    assert kwargs["timeout"] == 5
    assert kwargs["capture_output"] is True
    assert kwargs["check"] is False
    assert kwargs["encoding"] == "utf-8"
    assert kwargs["errors"] == "replace"


def test_run_command_stringifies_args(monkeypatch, tmp_path):
    """Verify path arguments are converted to strings."""
    calls = []
    monkeypatch.setattr(subprocess, "run", _fake_run(calls=calls))

    process.run_command(["ls", tmp_path], capture=False)
    argv, kwargs = calls[0]
    assert argv == ["ls", str(tmp_path)]
    assert kwargs["capture_output"] is False


def test_run_command_non_zero(monkeypatch):
    """Verify a non-zero exit raises CommandFailed with the output."""
    monkeypatch.setattr(subprocess, "run", _fake_run(returncode=3, stderr="boom\n"))

    with pytest.raises(CommandFailed) as info:
        process.run_command(["tar", "-xf", "x.tar.xz"])

    err = info.value
    assert err.returncode == 3
    assert err.command == ["tar", "-xf", "x.tar.xz"]
    assert err.stderr == "boom\n"
    assert "tar exited with status 3: boom" in str(err)


def test_run_command_missing_program(monkeypatch):
    """Verify a program that cannot be spawned raises CommandFailed."""

    def run(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(subprocess, "run", run)

    with pytest.raises(CommandFailed) as info:
        process.run_command(["/usr/bin/docker", "--version"])
    assert info.value.returncode is None
    assert "No such file" in info.value.stderr


def test_run_command_timeout(monkeypatch):
    """Verify a timeout surfaces as Cancelled."""

    def run(argv, **kwargs):
        raise subprocess.TimeoutExpired(argv, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", run)

    with pytest.raises(Cancelled):
        process.run_command(["kubectl", "version"], timeout=1)


def test_run_command_interrupted(monkeypatch):
    """Verify Ctrl-C during a command surfaces as Cancelled."""

    def run(argv, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(subprocess, "run", run)

    with pytest.raises(Cancelled):
        process.run_command(["docker", "run"])


def test_lookup_executable(monkeypatch):
    """Verify PATH lookups go through shutil.which."""
    monkeypatch.setattr(process.shutil, "which", lambda name: f"/bin/{name}" if name == "sh" else None)
    assert process.lookup_executable("sh") == "/bin/sh"
    assert process.lookup_executable("definitely-missing") is None
