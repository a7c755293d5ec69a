"""Unified CLI entry point for the mtree command."""

import click

from .check_cmd import check_cmd
from .show_cmd import show_cmd


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="mtree-parser")
def mtree_cli():
    """Read mtree(5) filesystem manifests.

    \b
    Examples:
      mtree check .MTREE            # Report malformed lines
      mtree show .MTREE             # Print resolved entries

    \b
    For help on a specific command:
      mtree check --help
      mtree show --help
    """
    pass


# Register subcommands
mtree_cli.add_command(check_cmd, name="check")
mtree_cli.add_command(show_cmd, name="show")


if __name__ == "__main__":
    mtree_cli()
