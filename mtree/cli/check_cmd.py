"""Check subcommand for the mtree CLI."""

from pathlib import Path

import click
from rich.markup import escape

from .common import configure_logging, console, format_error, open_tree, parse_options


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@parse_options
@click.pass_context
def check_cmd(
    ctx: click.Context,
    manifest: Path,
    cwd: Path | None,
    strict_dotdot: bool | None,
    strict_device_format: bool | None,
    verbose: int,
):
    """Parse a manifest and report every line that fails to decode.

    Exits with status 1 if any line failed.

    \b
    Examples:
      mtree check .MTREE                   # gzip-compressed manifests work too
      mtree check site.mtree --strict-dotdot
    """
    configure_logging(verbose)

    entries = 0
    errors = 0
    with open_tree(manifest, cwd, strict_dotdot, strict_device_format) as tree:
        for result in tree.results():
            if result.ok:
                entries += 1
                continue
            errors += 1
            console.print(
                f"[red]{escape(format_error(result.line_number, result.error))}[/red]",
                soft_wrap=True,
            )

    summary = f"{entries:,} entries, {errors:,} errors in {escape(str(manifest))}"
    if errors:
        console.print(f"[red]{summary}[/red]", soft_wrap=True)
        ctx.exit(1)
    console.print(f"[green]{summary}[/green]", soft_wrap=True)
