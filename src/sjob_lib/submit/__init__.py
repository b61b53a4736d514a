# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Utilities for submitting Slurm jobs.

`Submitter` validates the submitted file, renders YAML job files into
batch scripts, uploads the script to the login node when Slurm runs on
another machine, and invokes `sbatch`.

`SubmitterFactory` combines command-line options with the `#SBATCH`
directives of the script (or the options of a YAML job file) and the
configured defaults, selects the transport, and produces a fully
configured `Submitter`.
"""

from .factory import SubmitterFactory
from .submitter import Submitter

__all__ = ["Submitter", "SubmitterFactory"]
