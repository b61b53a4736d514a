# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for sjob.

This module defines dataclasses representing all configurable aspects of sjob,
including environment variables, timeouts, transport settings, submission defaults,
presentation settings, and exit codes.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class EnvironmentVariables:
    """Environment variable names used by sjob."""

    # Enables sjob debug mode.
    debug_mode: str = "SJOB_DEBUG"
    # Path to the sjob config file.
    config: str = "SJOB_CONFIG"
    # Login host on which the Slurm commands should be executed.
    host: str = "SJOB_HOST"


@dataclass
class TimeoutSettings:
    """Timeout settings in seconds."""

    # Timeout for establishing an SSH connection.
    ssh: int = 60
    # Timeout for copying a file using scp.
    scp: int = 600
    # Timeout for a single Slurm command.
    command: int = 120


@dataclass
class TransportSettings:
    """Settings for executing Slurm commands on the local or a remote machine."""

    # Login host to use when neither `--host` nor the environment variable is set.
    # If not set, the Slurm commands are executed on the local machine.
    host: str | None = None
    # Additional options passed to every ssh and scp invocation.
    ssh_options: list[str] = field(default_factory=list)
    # Directory on the remote host to which submitted scripts are uploaded.
    remote_script_dir: str = ".sjob/scripts"
    # Working directory of remotely submitted jobs if not set explicitly.
    remote_work_dir: str | None = None


@dataclass
class PollerSettings:
    """Settings for Poller operations."""

    # Interval (in seconds) between successive checks of the job's state.
    interval: int = 10
    # Number of consecutive polls for which the job may be unknown to Slurm.
    max_unknown: int = 3
    # Maximum number of attempts when the job information cannot be obtained.
    retry_tries: int = 3
    # Wait time (in seconds) between retry attempts.
    retry_wait: int = 5


@dataclass
class SubmissionDefaults:
    """Default values of submission options. Used when not set on the command line or in the script."""

    partition: str | None = None
    account: str | None = None
    qos: str | None = None
    time: str | None = None
    # a count or a range `MIN-MAX`
    nodes: int | str | None = None
    cpus_per_task: int | None = None
    mem: str | None = None
    mem_per_cpu: str | None = None
    output: str | None = None
    error: str | None = None


@dataclass
class ScriptSettings:
    """Settings used when generating batch scripts."""

    # Shebang of generated scripts.
    shebang: str = "#!/bin/bash"
    # Suffix of scripts generated from YAML job descriptors.
    suffix: str = ".sbatch"


@dataclass
class JobStatusPanelSettings:
    """Settings for creating a job status panel."""

    # Maximal width of the job status panel.
    max_width: int | None = None
    # Minimal width of the job status panel.
    min_width: int | None = 70
    # Style of the border lines.
    border_style: str = "white"
    # Style of the title.
    title_style: str = "white bold"
    # Style of the separators between individual sections of the panel.
    rule_style: str = "white"


@dataclass
class PresenterSettings:
    """Settings for StatusPresenter."""

    # Settings for the job status panel.
    job_status_panel: JobStatusPanelSettings = field(
        default_factory=JobStatusPanelSettings
    )

    # Style used for the keys in job status panel.
    key_style: str = "default bold"
    # Style used for values in job status panel.
    value_style: str = "white"
    # Style used for notes in job status panel.
    notes_style: str = "grey50"


@dataclass
class JobsPresenterSettings:
    """Settings for JobsPresenter."""

    # Maximal width of the jobs panel.
    max_width: int | None = None
    # Minimal width of the jobs panel.
    min_width: int | None = 80
    # Maximum displayed length of a job name before truncation.
    max_job_name_length: int = 20
    # Maximum displayed length of working nodes before truncation.
    max_nodes_length: int = 40
    # Style used for border lines.
    border_style: str = "white"
    # Style used for the title.
    title_style: str = "white bold"
    # Style used for table headers.
    headers_style: str = "default"
    # Style used for table values.
    main_style: str = "white"
    # Style used for job statistics.
    secondary_style: str = "grey70"
    # Style used for extra notes.
    extra_info_style: str = "grey50"
    # Style used for strong warning messages.
    strong_warning_style: str = "bright_red"

    # Code used to signify "total jobs".
    sum_jobs_code: str = "Σ"


@dataclass
class AcctPresenterSettings:
    """Settings for AcctPresenter."""

    # Style used for border lines.
    border_style: str = "white"
    # Style used for the title.
    title_style: str = "white bold"
    # Style used for table headers.
    headers_style: str = "default bold"
    # Style used for table values.
    main_style: str = "white"


@dataclass
class AccountingSettings:
    """Settings for querying the Slurm accounting database."""

    # Fields requested by `sjob acct` if `--format` is not provided.
    default_format: str = (
        "JobID,JobName%20,Partition,Account,AllocCPUS,State,Elapsed,ExitCode"
    )


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by sjob.
    standard: str = "%Y-%m-%d %H:%M:%S"
    # Date format used by Slurm.
    slurm: str = "%Y-%m-%dT%H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Default error code for failures of sjob commands.
    default: int = 91
    # Returned by `sjob wait` when the job did not finish successfully.
    job_failed: int = 92
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class StateColors:
    """Color scheme for BatchState display."""

    # Style used for queued jobs.
    queued: str = "bright_magenta"
    # Style used for held jobs.
    held: str = "bright_magenta"
    # Style used for suspended jobs.
    suspended: str = "bright_black"
    # Style used for running jobs.
    running: str = "bright_blue"
    # Style used for exiting jobs.
    exiting: str = "bright_yellow"
    # Style used for finished jobs.
    finished: str = "bright_green"
    # Style used for failed jobs.
    failed: str = "bright_red"
    # Style used for cancelled jobs.
    cancelled: str = "bright_red"
    # Style used for jobs in an unknown state.
    unknown: str = "grey70"
    # Style used whenever a summary of jobs is provided.
    sum: str = "white"


@dataclass
class SizeOptions:
    """Options associated with the Size dataclass."""

    # Maximal error acceptable when rounding Size values for display.
    max_rounding_error: float = 0.1


@dataclass
class Config:
    """Main configuration for sjob."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)
    transport: TransportSettings = field(default_factory=TransportSettings)
    poller: PollerSettings = field(default_factory=PollerSettings)
    defaults: SubmissionDefaults = field(default_factory=SubmissionDefaults)
    script: ScriptSettings = field(default_factory=ScriptSettings)
    presenter: PresenterSettings = field(default_factory=PresenterSettings)
    jobs_presenter: JobsPresenterSettings = field(default_factory=JobsPresenterSettings)
    acct_presenter: AcctPresenterSettings = field(default_factory=AcctPresenterSettings)
    accounting: AccountingSettings = field(default_factory=AccountingSettings)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)
    state_colors: StateColors = field(default_factory=StateColors)
    size: SizeOptions = field(default_factory=SizeOptions)

    # Name of the sjob binary.
    binary_name: str = "sjob"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load the configuration from a TOML file.

        Tables of the file correspond to the sections of `Config`, e.g.,
        `[transport]` to `Config.transport`. Values missing in the file keep
        their defaults and unknown keys are ignored.

        Args:
            config_path (Path | None): File to load. If None, the first existing
                file of `Config.searchPaths` is used.

        Returns:
            Config: The loaded configuration or the defaults if there is no file.

        Raises:
            ValueError: If the file exists but cannot be read or does not match
                the structure of the configuration.
        """
        config_path = config_path or cls._get_config_path()
        if config_path is None or not config_path.exists():
            return cls()

        try:
            with config_path.open("rb") as f:
                return _from_dict(cls, tomllib.load(f))
        except (OSError, tomllib.TOMLDecodeError, TypeError) as e:
            raise ValueError(f"Could not read sjob config '{config_path}': {e}.") from e

    @staticmethod
    def searchPaths() -> list[Path]:
        """
        Candidate configuration files from the highest priority:
        `$SJOB_CONFIG`, `./sjob_config.toml` and `$XDG_CONFIG_HOME/sjob/config.toml`.
        """
        paths = []
        if explicit := os.getenv(EnvironmentVariables.config):
            paths.append(Path(explicit))

        paths.append(Path.cwd() / "sjob_config.toml")

        xdg_home = os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config"
        paths.append(Path(xdg_home) / "sjob" / "config.toml")

        return paths

    @staticmethod
    def _get_config_path() -> Path | None:
        return next((path for path in Config.searchPaths() if path.is_file()), None)


def _from_dict(cls, data: dict[str, Any]):
    """
    Build a (possibly nested) settings dataclass from a parsed TOML table.

    Raises:
        TypeError: If a table is provided for a plain value or vice versa.
    """
    values = {}
    for field_info in fields(cls):
        if field_info.name not in data:
            continue

        value = data[field_info.name]
        if is_dataclass(field_info.type):
            if not isinstance(value, dict):
                raise TypeError(f"'{field_info.name}' must be a table")
            value = _from_dict(field_info.type, value)
        elif isinstance(value, dict):
            raise TypeError(f"'{field_info.name}' must not be a table")

        values[field_info.name] = value

    return cls(**values)


# Global configuration for sjob.
CFG = Config.load()
