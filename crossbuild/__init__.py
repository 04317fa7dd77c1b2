"""
crossbuild package initialisation.

The module performs two small tasks:

1. **Expose the version string**
   ``crossbuild.__version__`` is resolved at import-time from the installed
   distribution metadata.

2. **Re-export the public entry points**
   :func:`resolve_engine`, :func:`create_image` and :func:`load_config` are
   available from the top level::

       from crossbuild import resolve_engine, create_image
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("crossbuild")
except PackageNotFoundError:
    # Source tree without an installed wheel.
    __version__ = "0.0.0"

from .config import load_config  # noqa: E402
from .engines import Engine, resolve_engine  # noqa: E402
from .images import create_image  # noqa: E402

__all__: list[str] = [
    "Engine",
    "create_image",
    "load_config",
    "resolve_engine",
    "__version__",
]
