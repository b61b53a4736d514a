# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Abstractions for integrating sjob with the batch scheduling system.

- `BatchInterface`: the abstract interface that a batch-system backend
  implements. It defines job submission, cancellation, job querying,
  and accounting. Each instance is bound to a `Transport`.

- `BatchJobInterface`: a lightweight abstraction representing a job as
  reported by the scheduler, exposing normalized metadata.
"""

from .interface import BatchInterface
from .job import BatchJobInterface

__all__ = [
    "BatchInterface",
    "BatchJobInterface",
]
