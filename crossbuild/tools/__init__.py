"""Wrappers for commands run inside build containers."""

from .base import Tool, ToolSpec
from .fyne import FynePackageTool, fyne_package, fyne_release
from .icon import ICON_FILENAME, prepare_icon

__all__ = [
    "Tool",
    "ToolSpec",
    "FynePackageTool",
    "fyne_package",
    "fyne_release",
    "ICON_FILENAME",
    "prepare_icon",
]
