# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Transports delivering Slurm commands to the scheduler.

`Transport` defines how commands are executed and files copied:
`LocalTransport` runs the commands on the current machine using `subprocess`,
while `SSHTransport` runs them on a cluster login node using `ssh` and copies
submitted scripts there using `scp`. `get_transport` selects the transport
based on the command line, the environment, and the configuration.
"""

from .factory import get_transport
from .interface import CommandResult, Transport
from .local import LocalTransport
from .ssh import SSHTransport

__all__ = [
    "CommandResult",
    "LocalTransport",
    "SSHTransport",
    "Transport",
    "get_transport",
]
