"""Module wrapper so running ``python -m crossbuild.cli`` matches the console script."""

from crossbuild.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
