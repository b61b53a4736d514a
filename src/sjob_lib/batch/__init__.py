# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Batch-system support for sjob.

This module groups the components that allow sjob to interact with
the Slurm scheduler: the abstract job and batch-system interfaces and
the concrete Slurm backend.
"""

from sjob_lib.transport import Transport, get_transport

from .interface import BatchInterface, BatchJobInterface
from .slurm import Slurm, SlurmJob


def get_batch_system(host: str | None = None) -> Slurm:
    """
    Return the Slurm backend bound to the transport selected for `host`.

    Args:
        host (str | None): Explicitly requested login host.

    Returns:
        Slurm: The batch system.
    """
    transport: Transport = get_transport(host)
    return Slurm(transport)


__all__ = [
    "BatchInterface",
    "BatchJobInterface",
    "Slurm",
    "SlurmJob",
    "get_batch_system",
]
