# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """
    Outcome of a command executed through a transport.
    """

    # Exit code of the command.
    returncode: int
    # Captured standard output.
    stdout: str
    # Captured standard error output.
    stderr: str

    def ok(self) -> bool:
        """Return True if the command succeeded."""
        return self.returncode == 0


class Transport(ABC):
    """
    Abstract base class for executing commands on the machine where Slurm is available.

    All methods should raise SJTransportError if the machine cannot be reached
    and SJError if the requested operation fails.
    """

    @abstractmethod
    def run(
        self, command: list[str], input: str | None = None, cwd: Path | None = None
    ) -> CommandResult:
        """
        Execute a command and capture its output.

        A non-zero exit code of the command itself is not considered an error
        of the transport and is reported in the returned `CommandResult`.

        Args:
            command (list[str]): The command and its arguments.
            input (str | None): Optional text passed to the standard input of the command.
            cwd (Path | None): Optional directory in which the command should be executed.

        Returns:
            CommandResult: Exit code and captured output of the command.

        Raises:
            SJTransportError: If the command could not be executed at all.
        """
        pass

    @abstractmethod
    def upload(self, local: Path, remote: Path) -> Path:
        """
        Copy a local file to the machine where Slurm is available.

        Args:
            local (Path): Path to the local file.
            remote (Path): Destination path.

        Returns:
            Path: Path to the copied file.

        Raises:
            SJTransportError: If the file could not be copied.
        """
        pass

    @abstractmethod
    def isRemote(self) -> bool:
        """Return True if the commands are executed on another machine."""
        pass

    @abstractmethod
    def getHost(self) -> str:
        """Return the name of the machine on which the commands are executed."""
        pass

    def readFile(self, file: Path, tail: int | None = None) -> str:
        """
        Read the contents of a file.

        The default implementation uses `cat` (or `tail`) executed through `run`.
        Subclasses should override this method to provide a more efficient
        implementation if possible.

        Args:
            file (Path): Path to the file.
            tail (int | None): If set, only the last `tail` lines are returned.

        Returns:
            str: The contents of the file.

        Raises:
            SJError: If the file cannot be read.
        """
        command = ["cat", str(file)] if tail is None else ["tail", "-n", str(tail), str(file)]
        result = self.run(command)

        if not result.ok():
            raise SJError(
                f"Could not read file '{file}' on '{self.getHost()}': {result.stderr.strip()}."
            )
        return result.stdout

    def makeDir(self, directory: Path) -> None:
        """
        Create a directory including its parents. Existing directories are accepted.

        Args:
            directory (Path): The directory to create.

        Raises:
            SJError: If the directory cannot be created.
        """
        result = self.run(["mkdir", "-p", str(directory)])

        if not result.ok():
            raise SJError(
                f"Could not make directory '{directory}' on '{self.getHost()}': {result.stderr.strip()}."
            )

    def getUser(self) -> str:
        """
        Return the name of the user executing the commands.

        Raises:
            SJError: If the user cannot be determined.
        """
        result = self.run(["whoami"])

        if not result.ok() or not (user := result.stdout.strip()):
            raise SJError(
                f"Could not determine the user on '{self.getHost()}': {result.stderr.strip()}."
            )
        return user

    def __str__(self) -> str:
        return self.getHost()
