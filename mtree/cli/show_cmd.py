"""Show subcommand for the mtree CLI."""

from pathlib import Path

import click
from rich.markup import escape

from .common import (
    configure_logging,
    console,
    err_console,
    format_entry,
    format_error,
    open_tree,
    parse_options,
)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--errors/--no-errors",
    "show_errors",
    default=True,
    show_default=True,
    help="Print failed lines to stderr",
)
@parse_options
@click.pass_context
def show_cmd(
    ctx: click.Context,
    manifest: Path,
    show_errors: bool,
    cwd: Path | None,
    strict_dotdot: bool | None,
    strict_device_format: bool | None,
    verbose: int,
):
    """Print every entry of a manifest in human-readable form.

    Exits with status 1 if any line failed.

    \b
    Examples:
      mtree show .MTREE
      mtree show site.mtree --cwd /srv/site --no-errors
    """
    configure_logging(verbose)

    failed = False
    with open_tree(manifest, cwd, strict_dotdot, strict_device_format) as tree:
        for result in tree.results():
            if result.ok:
                console.print(escape(format_entry(result.entry)), highlight=False, soft_wrap=True)
                continue
            failed = True
            if show_errors:
                err_console.print(
                    f"[red]{escape(format_error(result.line_number, result.error))}[/red]",
                    soft_wrap=True,
                )

    if failed:
        ctx.exit(1)
