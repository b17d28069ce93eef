# ABOUTME: CLI package for Shelfkeeper, built on Click.
# ABOUTME: Defines the root command group, verbosity handling, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from shelfkeeper.cli.commands import (
    add_cmd,
    backup_cmd,
    category_cmd,
    loan_cmd,
    ls_cmd,
    stats_cmd,
)


@click.group()
@click.version_option(package_name="shelfkeeper")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Shelfkeeper - an offline library catalogue and loan tracker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


cli.add_command(ls_cmd.ls)
cli.add_command(add_cmd.add)
cli.add_command(category_cmd.category)
cli.add_command(loan_cmd.borrow)
cli.add_command(loan_cmd.return_book)
cli.add_command(loan_cmd.loans)
cli.add_command(stats_cmd.stats)
cli.add_command(backup_cmd.export)
cli.add_command(backup_cmd.restore)
cli.add_command(backup_cmd.reset)
