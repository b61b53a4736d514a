# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from pathlib import Path
from typing import NoReturn

import click
from click_option_group import optgroup

from sjob_lib.core.click_format import GNUHelpColorsCommand
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger
from sjob_lib.submit.factory import SubmitterFactory
from sjob_lib.submit.options import descriptor_options
from sjob_lib.wait.poller import Poller, exit_code_for_state

logger = get_logger(__name__)


@click.command(
    short_help="Submit a job to Slurm.",
    help=f"""
Submit a batch script (or a YAML job file) to Slurm.

{click.style("SCRIPT", fg="green")}   Path to the script or job file to submit.
{click.style("ARGS", fg="green")}     Arguments passed to the script. Optional.

All the options can also be specified inside the submitted script itself
using `#SBATCH` directives, e.g., `#SBATCH --time=2:00:00`.
Options specified on the command line take precedence over the directives.

A job file with the suffix `.yaml` or `.yml` contains the options of the job
and the `command` to execute; it is converted into a batch script before submission.
All options of `{CFG.binary_name} submit` must be specified before SCRIPT.
""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
    context_settings={"allow_interspersed_args": False},
)
@click.argument("script", type=str, metavar=click.style("SCRIPT", fg="green"))
@click.argument(
    "script_args",
    nargs=-1,
    type=click.UNPROCESSED,
    metavar=click.style("ARGS", fg="green"),
)
@descriptor_options
@optgroup.group(f"{click.style('Submission', fg='yellow')}")
@optgroup.option(
    "--host",
    type=str,
    default=None,
    help=f"Login host on which the job is submitted using ssh. Overrides the environment variable '{CFG.env_vars.host}'.",
)
@optgroup.option(
    "--dry-run",
    is_flag=True,
    help="Print the submission command instead of submitting the job.",
)
@optgroup.option(
    "--wait",
    "wait_for_job",
    is_flag=True,
    help=f"Wait for the submitted job to complete. Exits with {CFG.exit_codes.job_failed} if the job does not finish successfully.",
)
def submit(
    script: str,
    script_args: tuple[str, ...],
    host: str | None,
    dry_run: bool,
    wait_for_job: bool,
    **kwargs,
) -> NoReturn:
    """
    Submit a batch script to Slurm from the command line.
    """
    try:
        if not (script_path := Path(script)).is_file():
            raise SJError(f"Script '{script}' does not exist or is not a file.")

        # parse options from the command line and from the script itself
        factory = SubmitterFactory(script_path, list(script_args), host, **kwargs)
        submitter = factory.makeSubmitter()

        if dry_run:
            if rendered := submitter.render():
                print(rendered)
            print(submitter.dryRun())
            sys.exit(0)

        job_id = submitter.submit()
        logger.info(f"Job '{job_id}' submitted successfully.")
        print(job_id)

        if wait_for_job:
            poller = Poller(submitter.getBatchSystem(), job_id)
            sys.exit(exit_code_for_state(poller.wait().getState()))

        sys.exit(0)
    except SJError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
