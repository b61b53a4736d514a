# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import shlex
import subprocess
from pathlib import Path

from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJTransportError
from sjob_lib.core.logger import get_logger

from .interface import CommandResult, Transport

logger = get_logger(__name__)


class SSHTransport(Transport):
    """
    Executes Slurm commands on a login node of a cluster using ssh.
    Files are copied to the login node using scp.

    Password authentication is never attempted: a key (or an agent) must be set up.
    """

    # exit code of ssh if connection fails
    SSH_FAIL = 255

    def __init__(self, host: str):
        """
        Initialize the transport.

        Args:
            host (str): Name of the login node, optionally including a user (`user@host`).
        """
        self._host = host

    def run(
        self, command: list[str], input: str | None = None, cwd: Path | None = None
    ) -> CommandResult:
        remote_command = shlex.join(command)
        if cwd is not None:
            remote_command = f"cd {shlex.quote(str(cwd))} && {remote_command}"

        ssh_command = [
            "ssh",
            *self._commonOptions(),
            "-q",  # suppress some SSH messages
            self._host,
            remote_command,
        ]
        logger.debug(f"Using ssh: '{' '.join(ssh_command)}'")

        result = self._execute(
            ssh_command, input, CFG.timeouts.ssh + CFG.timeouts.command
        )

        if result.returncode == SSHTransport.SSH_FAIL:
            raise SJTransportError(
                f"Could not connect to '{self._host}': {result.stderr.strip() or 'ssh failed'}."
            )

        return result

    def upload(self, local: Path, remote: Path) -> Path:
        self.makeDir(remote.parent)

        scp_command = [
            "scp",
            *self._commonOptions(),
            "-q",
            str(local),
            f"{self._host}:{remote}",
        ]
        logger.debug(f"Using scp: '{' '.join(scp_command)}'")

        result = self._execute(scp_command, None, CFG.timeouts.scp)
        if not result.ok():
            raise SJTransportError(
                f"Could not copy '{local}' to '{self._host}:{remote}': {result.stderr.strip()}."
            )

        return remote

    def isRemote(self) -> bool:
        return True

    def getHost(self) -> str:
        return self._host

    @staticmethod
    def _commonOptions() -> list[str]:
        """Return the options shared by all ssh and scp invocations."""
        return [
            "-o",
            "PasswordAuthentication=no",  # never ask for password
            "-o",
            f"ConnectTimeout={CFG.timeouts.ssh}",
            *CFG.transport.ssh_options,
        ]

    def _execute(
        self, command: list[str], input: str | None, timeout: int
    ) -> CommandResult:
        """
        Run ssh or scp locally.

        Raises:
            SJTransportError: If the executable is missing or the command times out.
        """
        try:
            result = subprocess.run(
                command,
                input=input,
                text=True,
                check=False,
                capture_output=True,
                errors="replace",
                timeout=timeout,
            )
        except FileNotFoundError:
            raise SJTransportError(f"Command '{command[0]}' is not available.") from None
        except subprocess.TimeoutExpired:
            raise SJTransportError(
                f"Connection to '{self._host}' timed out after {timeout} seconds."
            ) from None

        return CommandResult(result.returncode, result.stdout, result.stderr)
