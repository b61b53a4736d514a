# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import os

from sjob_lib.core.config import CFG
from sjob_lib.core.logger import get_logger

from .interface import Transport
from .local import LocalTransport
from .ssh import SSHTransport

logger = get_logger(__name__)


def get_transport(host: str | None = None) -> Transport:
    """
    Select the transport used to execute Slurm commands.

    The host is taken from (in order of priority) the `host` argument,
    the environment variable, and the configuration file. If no host is
    specified, the commands are executed on the local machine.

    Args:
        host (str | None): Explicitly requested login host.

    Returns:
        Transport: SSHTransport for the selected host or LocalTransport.
    """
    host = host or os.environ.get(CFG.env_vars.host) or CFG.transport.host

    if host:
        logger.debug(f"Using ssh transport to '{host}'.")
        return SSHTransport(host)

    logger.debug("Using local transport.")
    return LocalTransport()
