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
from sjob_lib.wait.poller import Poller, exit_code_for_state

logger = get_logger(__name__)


@click.command(
    short_help="Wait for a job to complete.",
    help=f"""Wait until the specified job completes, reporting every change of its state.

{click.style("JOB_ID", fg="green")}   The identifier of the job to wait for.

`{CFG.binary_name} wait` exits with 0 if the job finished successfully and with {CFG.exit_codes.job_failed}
if the job failed or was cancelled.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("job", type=str, metavar=click.style("JOB_ID", fg="green"))
@click.option(
    "--interval",
    "-i",
    type=float,
    default=None,
    help=f"Time between two queries of the job state in seconds. Defaults to {CFG.poller.interval}.",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=None,
    help="Maximal time to wait for the job in seconds. Waits indefinitely by default.",
)
@click.option("--host", type=str, default=None, help="Login host running Slurm.")
def wait(
    job: str, interval: float | None, timeout: float | None, host: str | None
) -> NoReturn:
    """
    Wait for the specified job to complete.
    """
    try:
        poller = Poller(get_batch_system(host), job, interval, timeout)
        completed = poller.wait()
        sys.exit(exit_code_for_state(completed.getState()))
    except SJError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
