"""Shared fixtures for the crossbuild tests.

Nothing here touches a real container engine: every subprocess boundary is
replaced by monkeypatching :mod:`crossbuild.utils.process` or the execution
engine's ``run`` method.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from crossbuild.context import BuildContext, Volume
from crossbuild.engines.base import Engine


class RecordingEngine:
    """Execution engine double that records every command.

    ``fail_on`` maps the first argument of a command (``"fyne"``, ``"mv"``,
    ``"tar"`` ...) to the exception raised when that command runs.
    """

    def __init__(self, fail_on=None):
        self.calls = []
        self.prepared = []
        self.fail_on = dict(fail_on or {})

    def prepare(self, image):
        self.prepared.append(image.id)

    def run(self, image, args, *, workdir=None):
        self.calls.append({"image": image.id, "args": list(args), "workdir": workdir})
        exc = self.fail_on.get(args[0])
        if exc is not None:
            raise exc
        return 0

    def commands_for(self, image_id):
        return [c["args"] for c in self.calls if c["image"] == image_id]


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project directory containing an icon."""
    root = tmp_path / "myapp"
    root.mkdir()
    (root / "Icon.png").write_bytes(b"\x89PNG")
    return root


@pytest.fixture
def docker_engine() -> Engine:
    return Engine(name="docker", binary="/usr/bin/docker")


@pytest.fixture
def build_context(project: Path, tmp_path: Path, docker_engine: Engine) -> BuildContext:
    return BuildContext(
        name="MyApp",
        volume=Volume(work_dir_host=project, cache_dir_host=tmp_path / "cache"),
        engine=docker_engine,
        app_id="com.example.myapp",
    )


@pytest.fixture
def recording_engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def engine_factory():
    """Return the :class:`RecordingEngine` class for tests needing failures."""
    return RecordingEngine
