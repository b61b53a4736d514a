# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click

from sjob_lib.batch import get_batch_system
from sjob_lib.core.click_format import GNUHelpColorsCommand
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)


@click.command(
    short_help="Print the output of a job.",
    help=f"""Print the standard output (or standard error output) of the specified job.

{click.style("JOB_ID", fg="green")}   The identifier of the job.

The file is read on the machine running Slurm, so the job's output
is available even when submitting from another machine using `--host`.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("job", type=str, metavar=click.style("JOB_ID", fg="green"))
@click.option(
    "-e", "--error", is_flag=True, help="Print the standard error output instead."
)
@click.option(
    "-n",
    "--lines",
    type=click.IntRange(min=1),
    default=None,
    help="Print only the last N lines.",
)
@click.option("--host", type=str, default=None, help="Login host running Slurm.")
def out(job: str, error: bool, lines: int | None, host: str | None) -> NoReturn:
    """
    Print the output file of the specified job.
    """
    try:
        batch_system = get_batch_system(host)
        batch_job = batch_system.getJob(job)
        if batch_job.isEmpty():
            raise SJError(f"Job '{job}' does not exist.")

        file = batch_job.getErrorFile() if error else batch_job.getOutputFile()
        if not file:
            raise SJError(
                f"The {'error' if error else 'output'} file of job '{job}' is not known to Slurm."
            )

        logger.debug(f"Reading '{file}'.")
        content = batch_system.getTransport().readFile(file, lines)
        print(content, end="")
        sys.exit(0)
    except SJError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
