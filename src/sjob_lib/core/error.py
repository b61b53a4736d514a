# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout sjob.

Each exception carries an associated exit code used by sjob
commands to report failures consistently.
"""

from sjob_lib.core.config import CFG


class SJError(Exception):
    """Common exception type for all recoverable sjob errors."""

    exit_code = CFG.exit_codes.default


class SJNotSuitableError(SJError):
    """Raised when a job is unsuitable for an operation."""

    pass


class SJTransportError(SJError):
    """
    Raised when a command could not be delivered to the machine running Slurm,
    e.g., when the SSH connection fails or the command times out.
    """

    pass
