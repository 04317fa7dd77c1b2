"""Tests for the YAML configuration loader."""
from importlib.resources import files
from pathlib import Path

import pytest
import yaml

from crossbuild import load_config
from crossbuild.config import CONFIG_FILENAME, CrossBuildConfig
from crossbuild.models import Architecture
from crossbuild.utils.errors import ConfigError


def test_default_yaml_loads(tmp_path: Path):
    """Loading the built-in default YAML should succeed."""
    cfg = load_config(project_root=tmp_path)

    with files("crossbuild.resources").joinpath("default_config.yaml").open() as fh:
        expected = yaml.safe_load(fh)
    assert cfg.engine == expected["engine"] == ""
    assert cfg.parallel == expected["parallel"]
    assert cfg.images == {}


def test_project_local_config(tmp_path: Path):
    """Verify <project>/crossbuild.yaml is picked up."""
    (tmp_path / CONFIG_FILENAME).write_text(
        "engine: podman\n"
        "parallel: 2\n"
        "env:\n"
        "  CGO_LDFLAGS: -L/opt/lib\n"
        "  DEBUG: 1\n"
        "images:\n"
        "  freebsd:\n"
        "    arm64: registry.example.com/fb:arm64\n"
    )

    cfg = load_config(project_root=tmp_path)

    assert cfg.engine == "podman"
    assert cfg.parallel == 2
    assert cfg.env == {"CGO_LDFLAGS": "-L/opt/lib", "DEBUG": "1"}
    assert cfg.image_for("freebsd", Architecture.ARM64) == "registry.example.com/fb:arm64"
    assert cfg.image_for("freebsd", "amd64") is None


def test_explicit_config_wins(tmp_path: Path):
    """Verify an explicit path beats the project-local file."""
    (tmp_path / CONFIG_FILENAME).write_text("engine: podman\n")
    explicit = tmp_path / "other.yaml"
    explicit.write_text("engine: kubernetes\nnamespace: ci\n")

    cfg = load_config(config_path=explicit, project_root=tmp_path)
    assert cfg.engine == "kubernetes"
    assert cfg.namespace == "ci"


def test_explicit_config_missing(tmp_path: Path):
    """Verify a missing explicit file is an error, not a silent fallback."""
    with pytest.raises(ConfigError):
        load_config(config_path=tmp_path / "nope.yaml")


def test_empty_config_file(tmp_path: Path):
    """Verify an empty project file yields the defaults."""
    (tmp_path / CONFIG_FILENAME).write_text("")
    assert load_config(project_root=tmp_path) == CrossBuildConfig()


@pytest.mark.parametrize(
    "body",
    [
        "images:\n  freebsd:\n    sparc: some/image\n",
        "parallel: 0\n",
        "- just\n- a list\n",
        "engine: [unclosed\n",
    ],
)
def test_invalid_config(tmp_path: Path, body: str):
    """Verify invalid YAML or values raise ConfigError."""
    (tmp_path / CONFIG_FILENAME).write_text(body)
    with pytest.raises(ConfigError):
        load_config(project_root=tmp_path)
