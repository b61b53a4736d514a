# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from rich.console import Console

from sjob_lib.batch import get_batch_system
from sjob_lib.batch.interface import BatchInterface
from sjob_lib.core.click_format import GNUHelpColorsCommand
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.error_handlers import handle_general_error
from sjob_lib.core.logger import get_logger
from sjob_lib.core.repeater import Repeater
from sjob_lib.status.presenter import StatusPresenter

logger = get_logger(__name__)


@click.command(
    short_help="Display the status of jobs.",
    help=f"""Display the state and properties of the specified jobs.

{click.style("JOB_ID", fg="green")}   The identifier of the job to display. Multiple jobs may be specified.

Jobs which have already left the queue are looked up in the Slurm accounting database.""",
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
    "-s", "--short", is_flag=True, help="Display only the job ID and current state."
)
@click.option(
    "--yaml", is_flag=True, help="Output the raw job information in YAML format."
)
@click.option("--host", type=str, default=None, help="Login host running Slurm.")
def status(jobs: tuple[str, ...], short: bool, yaml: bool, host: str | None) -> NoReturn:
    """
    Display the status of the specified Slurm jobs.
    """
    try:
        batch_system = get_batch_system(host)

        repeater = Repeater(list(jobs), _status_for_job, batch_system, short, yaml)
        repeater.onException(SJError, handle_general_error)
        repeater.run()
        sys.exit(0)
    # SJErrors should be caught by Repeater
    except SJError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def _status_for_job(
    job_id: str, batch_system: BatchInterface, short: bool, yaml: bool
) -> None:
    """
    Display the status of a single job.

    Args:
        job_id (str): Identifier of the job.
        batch_system (BatchInterface): The batch system to query.
        short (bool): If True, print only the job ID and the current job state.
        yaml (bool): If True, print the raw job information in YAML format.

    Raises:
        SJError: If the job does not exist.
    """
    job = batch_system.getJob(job_id)
    if job.isEmpty():
        raise SJError(f"Job '{job_id}' does not exist.")

    if yaml:
        print(job.toYaml())
        return

    presenter = StatusPresenter(job)
    console = Console()
    if short:
        console.print(presenter.getShortInfo())
    else:
        console.print(presenter.createJobStatusPanel(console))
