"""
Module entry-point that makes the package runnable with

    python -m bidseventinfo
    python -m bidseventinfo.cli

The behaviour is identical to the *bidseventinfo-cli* console script because
the Click group imported below performs all dispatching.
"""

from bidseventinfo.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
