"""Expose the project-wide Click group for the ``bidseventinfo-cli`` script.

The module:

* declares a single Click *group* called :pyfunc:`main`;
* wires common global flags (dataset root, settings override, verbosity);
* sets up logging via :pyfunc:`bidseventinfo.utils.logging.setup_logging`;
* loads the event-info settings;
* registers every sub-command located in sibling modules.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Dict

import click

from bidseventinfo import __version__
from bidseventinfo.config import load_settings
from bidseventinfo.utils.logging import setup_logging


class LazyGroup(click.Group):
    """Click group that imports sub-commands lazily."""

    def __init__(self, *args, **kwargs):
        self._lazy: dict[str, str] = {}
        super().__init__(*args, **kwargs)

    def set_lazy_command(self, name: str, target: str) -> None:
        """Register *name* to be imported from ``target`` on first use."""
        self._lazy[name] = target

    def list_commands(self, ctx):  # noqa: D401 - Click signature
        return sorted(set(super().list_commands(ctx)) | set(self._lazy))

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        """Resolve *cmd_name* from the eager map or import table."""
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        target = self._lazy.get(cmd_name)
        if not target:
            return None
        module_name, attr = target.split(":", 1)
        cmd = getattr(importlib.import_module(module_name), attr)
        self.add_command(cmd, name=cmd_name)
        return cmd


_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)


@click.group(
    cls=LazyGroup,
    context_settings=_CTX,
    help="""\b
bidseventinfo-cli – annotate event-table columns with BIDS metadata.

""",
)
@click.version_option(__version__)
@click.option(
    "-r",
    "--bids-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Dataset root; enables <root>/code/config/eventinfo.yaml and <root>/code/logs.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    help="Settings YAML merged over the packaged defaults.",
)
@click.option("-v", "--verbose", is_flag=True, help="INFO-level console output.")
@click.option("--debug", is_flag=True, help="DEBUG-level console output.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console output into this plain-text file.",
)
@click.pass_context
def main(
    ctx: click.Context,
    bids_root: Path | None,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Root command executed by *bidseventinfo-cli*.

    Raises:
        click.ClickException: When the settings YAML is invalid.
    """
    root = bids_root.expanduser().resolve() if bids_root else None
    setup_logging(
        dataset_root=root if root is not None and root.exists() else None,
        verbose=verbose,
        debug=debug,
        extra_text_log=save_logfile,
    )

    try:
        settings = load_settings(config_path, dataset_root=root)
    except (RuntimeError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc

    ctx.obj = {
        "root": root,
        "settings": settings,
        "verbose": verbose,
        "debug": debug,
    }


main.set_lazy_command("edit", "bidseventinfo.cli.edit:cli")
main.set_lazy_command("levels", "bidseventinfo.cli.levels:cli")

cli = main
__all__: list[str] = ["main"]
