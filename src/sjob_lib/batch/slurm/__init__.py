# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Slurm backend for sjob: job submission, cancellation, monitoring, and accounting.

It provides:

- The `Slurm` batch-system backend, implementing job submission (`sbatch`),
  cancellation (`scancel`), job listings (`squeue`, `sacct`), and accounting
  queries (`sacct -j`).

- `SlurmJob`, the concrete implementation of the job interface, responsible
  for parsing the output of `scontrol`, `sacct`, and `squeue` and exposing
  normalized metadata to the rest of sjob.
"""

from .job import SlurmJob
from .slurm import Slurm

__all__ = [
    "Slurm",
    "SlurmJob",
]
