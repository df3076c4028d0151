"""Module wrapper so running ``python -m bidseventinfo.cli`` matches the console script."""

from bidseventinfo.cli import main  # Re-exported Click command-group


if __name__ == "__main__":  # pragma: no cover
    main()
