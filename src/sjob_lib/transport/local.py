# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import shutil
import socket
import subprocess
from collections import deque
from pathlib import Path

from sjob_lib.core.common import get_current_user
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError, SJTransportError
from sjob_lib.core.logger import get_logger

from .interface import CommandResult, Transport

logger = get_logger(__name__)


class LocalTransport(Transport):
    """
    Executes Slurm commands on the current machine.
    """

    def run(
        self, command: list[str], input: str | None = None, cwd: Path | None = None
    ) -> CommandResult:
        logger.debug(" ".join(command))

        try:
            result = subprocess.run(
                command,
                input=input,
                text=True,
                check=False,
                capture_output=True,
                errors="replace",
                cwd=cwd,
                timeout=CFG.timeouts.command,
            )
        except FileNotFoundError:
            raise SJTransportError(
                f"Command '{command[0]}' is not available on '{self.getHost()}'."
            ) from None
        except subprocess.TimeoutExpired:
            raise SJTransportError(
                f"Command '{command[0]}' timed out after {CFG.timeouts.command} seconds."
            ) from None

        return CommandResult(result.returncode, result.stdout, result.stderr)

    def upload(self, local: Path, remote: Path) -> Path:
        # nothing to copy if the file is already in place
        if local.resolve() == remote.resolve():
            return local

        try:
            remote.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(local, remote)
        except OSError as e:
            raise SJTransportError(f"Could not copy '{local}' to '{remote}': {e}.") from e

        return remote

    def isRemote(self) -> bool:
        return False

    def getHost(self) -> str:
        return socket.gethostname()

    def getUser(self) -> str:
        return get_current_user()

    def readFile(self, file: Path, tail: int | None = None) -> str:
        try:
            with file.open(errors="replace") as f:
                if tail is None:
                    return f.read()
                return "".join(deque(f, maxlen=tail))
        except OSError as e:
            raise SJError(f"Could not read file '{file}': {e}.") from e

    def makeDir(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SJError(f"Could not make directory '{directory}': {e}.") from e
