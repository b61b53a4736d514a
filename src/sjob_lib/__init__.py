# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the sjob command-line tool.

This package provides a client for the Slurm workload manager. It parses and
builds job descriptions (`#SBATCH` directives and YAML job files), executes
the Slurm commands either locally or on a login node over ssh, and implements
submission, status polling, queue summaries, accounting, and cancellation of jobs.
All sjob CLI commands delegate to the functionality implemented here.
"""

from .sjob import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "acct",
    "batch",
    "cancel",
    "core",
    "descriptor",
    "jobs",
    "out",
    "properties",
    "script",
    "stat",
    "status",
    "submit",
    "transport",
    "wait",
]
