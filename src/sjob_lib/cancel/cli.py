# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from rich.console import Console

from sjob_lib.batch import get_batch_system
from sjob_lib.batch.interface import BatchInterface
from sjob_lib.cancel.canceller import Canceller
from sjob_lib.core.click_format import GNUHelpColorsCommand
from sjob_lib.core.common import yes_or_no_prompt
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError, SJNotSuitableError
from sjob_lib.core.error_handlers import (
    handle_general_error,
    handle_not_suitable_error,
)
from sjob_lib.core.logger import get_logger
from sjob_lib.core.repeater import Repeater

logger = get_logger(__name__)
console = Console()


@click.command(
    short_help="Cancel jobs.",
    help=f"""Cancel the specified jobs, or all jobs of a user.

{click.style("JOB_ID", fg="green")}   The identifier of the job to cancel. Multiple jobs may be specified.

Either job identifiers or `--user` must be provided, but not both.

By default, `{CFG.binary_name} cancel` prompts for confirmation before cancelling a job.

Without the `--force` flag, `{CFG.binary_name} cancel` will only attempt to cancel jobs that
are queued, held, suspended, or running. When the `--force` flag is used,
the job is passed to `scancel` regardless of its state and without confirmation.

With `--signal`, the signal is sent to the job instead of cancelling it.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "jobs",
    type=str,
    metavar=click.style("JOB_ID", fg="green"),
    nargs=-1,
)
@click.option(
    "-u",
    "--user",
    type=str,
    default=None,
    help="Cancel all jobs of this user using a single `scancel -u`.",
)
@click.option(
    "-s",
    "--signal",
    type=str,
    default=None,
    help="Send this signal (e.g., 'USR1' or '10') to the job instead of cancelling it.",
)
@click.option("-y", "--yes", is_flag=True, help="Cancel the jobs without confirmation.")
@click.option(
    "--force",
    is_flag=True,
    help="Cancel the jobs ignoring their current state and without confirmation.",
)
@click.option("--host", type=str, default=None, help="Login host running Slurm.")
def cancel(
    jobs: tuple[str, ...],
    user: str | None,
    signal: str | None,
    yes: bool = False,
    force: bool = False,
    host: str | None = None,
) -> NoReturn:
    """
    Cancel the specified Slurm jobs or all jobs of a user.
    """
    try:
        if jobs and user:
            raise SJError("Job identifiers and '--user' cannot be used together.")
        if not jobs and not user:
            raise SJError("No job specified. Provide job identifiers or '--user'.")

        batch_system = get_batch_system(host)

        if user:
            cancel_user_jobs(batch_system, user, signal, yes or force)
            sys.exit(0)

        repeater = Repeater(list(jobs), cancel_job, batch_system, signal, force, yes)
        repeater.onException(SJNotSuitableError, handle_not_suitable_error)
        repeater.onException(SJError, handle_general_error)
        repeater.run()
        print()
        sys.exit(0)
    # SJErrors from individual jobs should be caught by Repeater
    except SJError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def cancel_job(
    job_id: str,
    batch_system: BatchInterface,
    signal: str | None,
    force: bool,
    yes: bool,
) -> None:
    """
    Attempt to cancel a single job.

    Args:
        job_id (str): Identifier of the job.
        batch_system (BatchInterface): The batch system managing the job.
        signal (str | None): Signal to send instead of cancelling the job.
        force (bool): Whether to cancel the job regardless of its state.
        yes (bool): Whether to skip confirmation.

    Raises:
        SJNotSuitableError: If the job is not suitable for cancellation.
        SJError: If the job does not exist or cannot be cancelled.
    """
    canceller = Canceller(batch_system, job_id)
    canceller.printInfo(console)

    if not force:
        canceller.ensureSuitable()

    action = f"send signal {signal} to" if signal else "cancel"
    if force or yes or yes_or_no_prompt(f"Do you want to {action} the job?"):
        cancelled = canceller.cancel(signal)
        if signal:
            logger.info(f"Sent signal {signal} to the job '{cancelled}'.")
        else:
            logger.info(f"Cancelled the job '{cancelled}'.")
    else:
        logger.info("Operation aborted.")


def cancel_user_jobs(
    batch_system: BatchInterface, user: str, signal: str | None, yes: bool
) -> None:
    """
    Cancel all active jobs of a user with a single `scancel -u` call.

    Args:
        batch_system (BatchInterface): The batch system managing the jobs.
        user (str): Name of the user.
        signal (str | None): Signal to send instead of cancelling the jobs.
        yes (bool): Whether to skip confirmation.

    Raises:
        SJError: If the jobs cannot be listed or cancelled.
    """
    if not (jobs := batch_system.getUnfinishedJobs(user)):
        logger.info(f"User '{user}' has no active jobs. Nothing to cancel.")
        return

    action = f"send signal {signal} to" if signal else "cancel"
    if yes or yes_or_no_prompt(f"Do you want to {action} {len(jobs)} job(s) of user '{user}'?"):
        batch_system.cancelUser(user, signal)
        if signal:
            logger.info(f"Sent signal {signal} to {len(jobs)} job(s) of user '{user}'.")
        else:
            logger.info(f"Cancelled {len(jobs)} job(s) of user '{user}'.")
    else:
        logger.info("Operation aborted.")
