# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from typing import NoReturn

import click
from rich.console import Console

from sjob_lib.batch import get_batch_system
from sjob_lib.batch.interface import BatchInterface, BatchJobInterface
from sjob_lib.core.click_format import GNUHelpColorsCommand
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger
from sjob_lib.jobs.presenter import JobsPresenter

logger = get_logger(__name__)


@click.command(
    short_help="Display a summary of a user's jobs.",
    help="Display a summary of your jobs or those of a specified user. By default, only unfinished jobs are shown.",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.option(
    "-u",
    "--user",
    type=str,
    default=None,
    help="Username whose jobs should be displayed. Defaults to your own username.",
)
@click.option(
    "-e",
    "--extra",
    is_flag=True,
    help="Show additional information about the jobs.",
)
@click.option(
    "-a",
    "--all",
    is_flag=True,
    help="Include both unfinished and finished jobs in the summary.",
)
@click.option("--yaml", is_flag=True, help="Output job metadata in YAML format.")
@click.option("--host", type=str, default=None, help="Login host running Slurm.")
def jobs(
    user: str | None, extra: bool, all: bool, yaml: bool, host: str | None
) -> NoReturn:
    try:
        batch_system = get_batch_system(host)
        if not user:
            # the user on the machine running Slurm may differ from the local one
            user = batch_system.getTransport().getUser()

        jobs = batch_system.getJobs(user) if all else batch_system.getUnfinishedJobs(user)
        show_jobs(batch_system, jobs, extra, all, yaml)
        sys.exit(0)
    except SJError as e:
        logger.error(e)
        print()
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        print()
        sys.exit(CFG.exit_codes.unexpected_error)


def show_jobs(
    batch_system: BatchInterface,
    jobs: list[BatchJobInterface],
    extra: bool,
    all: bool,
    yaml: bool,
) -> None:
    """
    Print the jobs, sorted in the order of the batch system, as a table or as YAML.

    Args:
        batch_system (BatchInterface): The batch system the jobs were collected from.
        jobs (list[BatchJobInterface]): Jobs to show.
        extra (bool): Show the working directory and the comment of each job.
        all (bool): The jobs include completed jobs.
        yaml (bool): Print the raw job information as YAML instead of the table.
    """
    if not jobs:
        logger.info("No jobs found.")
        return

    batch_system.sortJobs(jobs)
    presenter = JobsPresenter(jobs, extra, all)
    if yaml:
        presenter.dumpYaml()
    else:
        console = Console(record=False, markup=False)
        console.print(presenter.createJobsInfoPanel(console))
