# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Cancellation of Slurm jobs.

`Canceller` checks whether a job can still be cancelled and invokes `scancel`
for it. The `cancel` command additionally supports cancelling all jobs of a user
with a single `scancel -u` call.
"""

from .canceller import Canceller

__all__ = [
    "Canceller",
]
