"""Target OS commands."""

from .base import PlatformBuilder
from .freebsd import FREEBSD_ARCH_SUPPORTED, FreeBSD

__all__ = ["PlatformBuilder", "FreeBSD", "FREEBSD_ARCH_SUPPORTED"]
