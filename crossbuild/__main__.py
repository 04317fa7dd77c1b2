"""
Module entry-point that makes the package runnable with

    python -m crossbuild

The behaviour is identical to the *crossbuild-cli* console script.
"""

from crossbuild.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
