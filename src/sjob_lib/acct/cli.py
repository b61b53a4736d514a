# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from rich.console import Console

from sjob_lib.acct.presenter import AcctPresenter
from sjob_lib.batch import get_batch_system
from sjob_lib.batch.slurm.common import parse_format_fields
from sjob_lib.core.click_format import GNUHelpColorsCommand
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)


@click.command(
    short_help="Display accounting information about jobs.",
    help=f"""Display accounting information about the specified jobs as recorded by `sacct`.

{click.style("JOB_ID", fg="green")}   The identifier of the job. Multiple jobs may be specified.

The reported fields are selected using `--format` which accepts the same
comma-separated list as `sacct --format`, including width specifications
(e.g., `JobName%30`). Defaults to '{CFG.accounting.default_format}'.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "jobs",
    type=str,
    metavar=click.style("JOB_ID", fg="green"),
    nargs=-1,
    required=True,
)
@click.option(
    "--format",
    "fields",
    type=str,
    default=None,
    help="Comma-separated list of sacct fields to display.",
)
@click.option(
    "-X",
    "--allocations",
    is_flag=True,
    help="Show only the job allocations, not the individual job steps.",
)
@click.option("--yaml", is_flag=True, help="Output the records in YAML format.")
@click.option("--host", type=str, default=None, help="Login host running Slurm.")
def acct(
    jobs: tuple[str, ...],
    fields: str | None,
    allocations: bool,
    yaml: bool,
    host: str | None,
) -> NoReturn:
    """
    Display accounting information about the specified jobs.
    """
    try:
        fields = fields or CFG.accounting.default_format
        batch_system = get_batch_system(host)

        records = batch_system.account(list(jobs), fields, allocations)
        if not records:
            logger.info("No accounting records found.")
            sys.exit(0)

        presenter = AcctPresenter(records, parse_format_fields(fields))
        if yaml:
            presenter.dumpYaml()
        else:
            console = Console(record=False, markup=False)
            console.print(presenter.createAcctPanel(console))

        sys.exit(0)
    except SJError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
