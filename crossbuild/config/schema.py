"""
Pydantic model mirroring ``crossbuild.yaml``.

Example::

    engine: podman
    namespace: builds
    parallel: 2
    env:
      CGO_LDFLAGS: -L/opt/lib
    images:
      freebsd:
        amd64: registry.example.com/fyne-cross:freebsd-amd64
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from crossbuild.models import Architecture


class CrossBuildConfig(BaseModel):
    """Validated project configuration."""

    engine: str = ""
    namespace: str = "default"
    parallel: int = Field(1, ge=1)
    env: Dict[str, str] = Field(default_factory=dict)
    images: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    @field_validator("env", mode="before")
    @classmethod
    def _stringify_env(cls, value):
        """Accept YAML scalars (numbers, booleans) as env values."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("env must be a mapping of NAME: value")
        return {str(k): "" if v is None else str(v) for k, v in value.items()}

    @field_validator("images", mode="before")
    @classmethod
    def _check_images(cls, value):
        """Reject architectures that do not exist so typos surface early."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("images must be a mapping of os -> {arch: ref}")
        known = {a.value for a in Architecture}
        for os_tag, refs in value.items():
            if not isinstance(refs, dict):
                raise ValueError(f"images.{os_tag} must be a mapping of arch -> ref")
            unknown = set(map(str, refs)) - known
            if unknown:
                raise ValueError(
                    f"images.{os_tag}: unknown architecture(s) {sorted(unknown)}"
                )
        return {
            str(os_tag): {str(arch): str(ref) for arch, ref in refs.items()}
            for os_tag, refs in value.items()
        }

    def image_for(self, os_tag: str, arch: Architecture | str) -> Optional[str]:
        """Return the configured image override for *os_tag*/*arch*, if any."""
        return self.images.get(os_tag, {}).get(str(arch))
