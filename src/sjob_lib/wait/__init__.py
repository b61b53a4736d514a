# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Waiting for Slurm jobs.

`Poller` periodically refreshes a job through the batch system,
retrying transient transport failures, logs every change of the job
state, and returns once the job completes (or raises on timeout).
"""

from .poller import Poller, exit_code_for_state

__all__ = ["Poller", "exit_code_for_state"]
