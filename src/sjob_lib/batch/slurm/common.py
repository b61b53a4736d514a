# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re

from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)

# fields requested in sacct and the keys under which they are stored
# keys follow the naming used by `scontrol show job`
SACCT_FIELDS: list[tuple[str, str]] = [
    ("JobID", "JobId"),
    ("JobIDRaw", "JobIdRaw"),
    ("JobName", "JobName"),
    ("User", "UserId"),
    ("Account", "Account"),
    ("Partition", "Partition"),
    ("State", "JobState"),
    ("Reason", "Reason"),
    ("AllocCPUS", "AllocCPUs"),
    ("ReqCPUS", "ReqCPUs"),
    ("AllocTRES", "AllocTRES"),
    ("ReqTRES", "ReqTRES"),
    ("AllocNodes", "AllocNodes"),
    ("ReqNodes", "ReqNodes"),
    ("Submit", "SubmitTime"),
    ("Start", "StartTime"),
    ("End", "EndTime"),
    ("Elapsed", "RunTime"),
    ("Timelimit", "TimeLimit"),
    ("NodeList", "NodeList"),
    ("WorkDir", "WorkDir"),
    ("ExitCode", "ExitCode"),
]

# fields requested in squeue (format code, key)
# job name must be the last field since it can contain the separator
SQUEUE_FIELDS: list[tuple[str, str]] = [
    ("%i", "JobId"),
    ("%A", "JobIdRaw"),
    ("%F", "ArrayJobId"),
    ("%K", "ArrayTaskId"),
    ("%u", "UserId"),
    ("%a", "Account"),
    ("%P", "Partition"),
    ("%T", "JobState"),
    ("%r", "Reason"),
    ("%N", "NodeList"),
    ("%D", "NumNodes"),
    ("%C", "NumCPUs"),
    ("%l", "TimeLimit"),
    ("%V", "SubmitTime"),
    ("%S", "StartTime"),
    ("%e", "EndTime"),
    ("%M", "RunTime"),
    ("%Z", "WorkDir"),
    ("%b", "TresPerNode"),
    ("%m", "MinMemory"),
    ("%j", "JobName"),
]

SQUEUE_SEPARATOR = "|"


def sacct_format() -> str:
    """Return the value of the `--format` option of sacct requesting `SACCT_FIELDS`."""
    return ",".join(name for name, _ in SACCT_FIELDS)


def squeue_format() -> str:
    """Return the value of the `-o` option of squeue requesting `SQUEUE_FIELDS`."""
    return SQUEUE_SEPARATOR.join(code for code, _ in SQUEUE_FIELDS)


def parse_slurm_dump_to_dictionary(
    text: str, separator: str | None = None
) -> dict[str, str]:
    """
    Parse a Slurm info dump into a dictionary.

    Returns:
        dict[str, str]: Dictionary mapping keys to values.
    """
    result: dict[str, str] = {}

    for pair in text.split(separator):
        if "=" not in pair:
            continue

        key, value = pair.split("=", 1)
        result[key.strip()] = value.strip()

    logger.debug(f"Parsed slurm dump: {result}.")
    return result


def parse_sbatch_output(output: str) -> str:
    """
    Extract the job ID from the output of sbatch.

    Supports both the `--parsable` output (`id` or `id;cluster`)
    and the standard output (`Submitted batch job id`).

    Args:
        output (str): Standard output of sbatch.

    Returns:
        str: ID of the submitted job.

    Raises:
        SJError: If the output does not contain a job ID.
    """
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if not lines:
        raise SJError("sbatch did not report the ID of the submitted job.")

    last = lines[-1]
    if match := re.search(r"Submitted batch job (\d+)", last):
        return match.group(1)

    job_id = last.split(";")[0].strip()
    if not re.fullmatch(r"\d+", job_id):
        raise SJError(f"Could not get the ID of the submitted job from '{last}'.")

    return job_id


def parse_format_fields(fields: str) -> list[str]:
    """
    Get names of the fields from a sacct format string.

    Width specifications (e.g., `JobName%30`) are removed.

    Args:
        fields (str): Comma-separated list of fields.

    Returns:
        list[str]: Names of the fields.
    """
    return [
        field.split("%")[0].strip() for field in fields.split(",") if field.strip()
    ]


def expand_filename_pattern(pattern: str, values: dict[str, str]) -> str:
    """
    Expand Slurm filename patterns (e.g., `slurm-%j.out`).

    Supported patterns are `%%`, `%A`, `%a`, `%j`, `%J`, `%u`, `%x`, `%N`,
    `%n`, `%s`, and `%t`. A number between `%` and the letter pads the value
    with zeros (e.g., `%4a`). Patterns with unknown values are kept unchanged.
    If the pattern contains a backslash, no expansion is performed, as in Slurm.

    Args:
        pattern (str): The filename pattern.
        values (dict[str, str]): Values of the pattern letters (e.g., `{"j": "1234"}`).

    Returns:
        str: The expanded filename.
    """
    if "\\" in pattern:
        return pattern.replace("\\", "")

    def replace(match: re.Match[str]) -> str:
        width, letter = match.groups()
        if letter == "%":
            return "%"

        if (value := values.get(letter)) is None:
            return match.group(0)

        return value.zfill(int(width)) if width else value

    return re.sub(r"%(\d*)([%AajJuxNnst])", replace, pattern)
