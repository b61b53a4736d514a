# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Properties of Slurm jobs.

This module provides the data representations shared by the submission,
status, and cancellation components of sjob: memory sizes, job states,
dependencies, job arrays, and environment propagation.
"""
