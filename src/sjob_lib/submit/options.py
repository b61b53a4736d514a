# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Command-line options describing a job, shared by `sjob submit` and `sjob script`.

The names of the options correspond to the fields of `JobDescriptor`.
"""

from collections.abc import Callable

import click
from click_option_group import optgroup

# applied in reverse order, so that the options are shown in this order in the help
_GENERAL_OPTIONS: list[tuple[tuple[str, ...], dict]] = [
    (("--job-name", "-J"), {"help": "Name of the job."}),
    (("--partition", "-p"), {"help": "Partition to submit the job to."}),
    (("--account", "-A"), {"help": "Account charged for the resources used by the job."}),
    (("--qos", "-q"), {"help": "Quality of service of the job."}),
    (
        ("--dependency", "-d"),
        {
            "help": """Job dependencies. One or more expressions separated by commas or spaces,
each in the format `<type>:<job_id>[:<job_id>...]`, e.g., `afterok:1234`, `afterany:456:789`, `singleton`."""
        },
    ),
    (
        ("--array", "-a"),
        {"help": "Submit a job array, e.g., `0-15`, `1,3,5-7`, `0-15:4`, or `1-100%10`."},
    ),
    (
        ("--export",),
        {
            "help": "Environment variables propagated to the job, e.g., `ALL,INPUT=data.txt` or `NONE`."
        },
    ),
    (
        ("--output", "-o"),
        {"help": "File for the standard output of the job, e.g., `slurm-%j.out`."},
    ),
    (("--error", "-e"), {"help": "File for the standard error output of the job."}),
    (("--chdir", "-D"), {"help": "Working directory of the job."}),
    (("--mail-type",), {"help": "Events to be notified about by email, e.g., `END,FAIL`."}),
    (("--mail-user",), {"help": "Address to send the notifications to."}),
]

_RESOURCE_OPTIONS: list[tuple[tuple[str, ...], dict]] = [
    (
        ("--time", "-t"),
        {
            "help": "Time limit of the job. Examples: '1d', '12h', '90m', '30', '2:00:00', '1-12:00:00'."
        },
    ),
    (("--nodes", "-N"), {"help": "Number of computing nodes, e.g., '2' or a range '2-4'."}),
    (("--ntasks", "-n"), {"type": int, "help": "Number of tasks."}),
    (("--ntasks-per-node",), {"type": int, "help": "Number of tasks per node."}),
    (("--cpus-per-task", "-c"), {"type": int, "help": "Number of CPU cores per task."}),
    (
        ("--mem",),
        {
            "help": "Memory per node, e.g., '4G' or '500M'. A number without unit is in megabytes. Overrides `--mem-per-cpu`."
        },
    ),
    (("--mem-per-cpu",), {"help": "Memory per CPU core, e.g., '2G'."}),
    (("--gpus", "-G"), {"help": "Total number of GPUs, optionally with their type, e.g., '2' or 'a100:2'."}),
    (("--constraint", "-C"), {"help": "Features the nodes must have, e.g., `avx512`."}),
]


def descriptor_options(func: Callable) -> Callable:
    """
    Decorate a click command with grouped options describing a job.

    Args:
        func (Callable): The command function.

    Returns:
        Callable: The decorated function.
    """
    groups = [
        (click.style("General settings", fg="yellow"), _GENERAL_OPTIONS),
        (click.style("Requested resources", fg="yellow"), _RESOURCE_OPTIONS),
    ]

    for title, options in reversed(groups):
        for names, attrs in reversed(options):
            func = optgroup.option(
                *names, type=attrs.get("type", str), default=None, help=attrs["help"]
            )(func)
        func = optgroup.group(title)(func)

    return func
