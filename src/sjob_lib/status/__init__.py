# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Presentation of the status of individual Slurm jobs.

`StatusPresenter` renders the information reported by Slurm for a job
(basic properties, resources, history, and current state) as a Rich panel.
"""

from .presenter import StatusPresenter

__all__ = ["StatusPresenter"]
