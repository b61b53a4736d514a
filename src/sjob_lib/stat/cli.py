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
from sjob_lib.jobs.cli import show_jobs

logger = get_logger(__name__)


@click.command(
    short_help="Display a summary of all users' jobs.",
    help="Display a summary of jobs from all users. By default, only unfinished jobs are shown.",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
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
def stat(extra: bool, all: bool, yaml: bool, host: str | None) -> NoReturn:
    try:
        batch_system = get_batch_system(host)

        jobs = (
            batch_system.getAllJobs() if all else batch_system.getAllUnfinishedJobs()
        )
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
