# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys

import click
from click_help_colors import HelpColorsGroup

from sjob_lib.acct.cli import acct
from sjob_lib.cancel.cli import cancel
from sjob_lib.jobs.cli import jobs
from sjob_lib.out.cli import out
from sjob_lib.script.cli import script
from sjob_lib.stat.cli import stat
from sjob_lib.status.cli import status
from sjob_lib.submit.cli import submit
from sjob_lib.wait.cli import wait

__version__ = "0.1.0"

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    cls=HelpColorsGroup,
    help_options_color="bright_blue",
    invoke_without_command=True,
    context_settings=_CONTEXT_SETTINGS,
)
@click.option(
    "--version",
    is_flag=True,
    help="Print the current version of sjob and exit.",
)
@click.pass_context
def cli(ctx: click.Context, version: bool):
    """
    Run any sjob command.

    sjob is a client for the Slurm workload manager, simplifying job submission,
    monitoring, and cancellation, either on the login node or from another machine over ssh.
    """
    if version:
        print(__version__)
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(0)


cli.add_command(submit)
cli.add_command(script)
cli.add_command(status)
cli.add_command(wait)
cli.add_command(out)
cli.add_command(jobs)
cli.add_command(stat)
cli.add_command(acct)
cli.add_command(cancel)
