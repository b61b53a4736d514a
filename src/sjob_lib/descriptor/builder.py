# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
import shlex
import stat
from pathlib import Path
from typing import Self

import yaml

from sjob_lib.core.common import load_yaml_dumper, load_yaml_loader, to_snake_case
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

from .descriptor import JobDescriptor

logger = get_logger(__name__)

SafeLoader: type[yaml.SafeLoader] = load_yaml_loader()
Dumper: type[yaml.Dumper] = load_yaml_dumper()

# colon-separated numbers such as `2:00:00` or `30:00`
_COLON_SEPARATED = re.compile(r"^[-+]?[0-9][0-9_]*(?::[0-9_]+)+(?:\.[0-9_]*)?$")


class JobFileLoader(SafeLoader):
    """
    Safe YAML loader for job files.

    YAML 1.1 reads unquoted `2:00:00` as a base-60 number (7200).
    In job files such values are time limits and are loaded as strings.
    """


JobFileLoader.yaml_implicit_resolvers = {
    first: list(resolvers) for first, resolvers in SafeLoader.yaml_implicit_resolvers.items()
}
for first in "-+0123456789":
    JobFileLoader.yaml_implicit_resolvers.setdefault(first, []).insert(
        0, ("tag:yaml.org,2002:str", _COLON_SEPARATED)
    )


class ScriptBuilder:
    """
    Renders a complete Slurm batch script from a job descriptor and a command.
    """

    # keys of a YAML job file which are not fields of JobDescriptor
    SCRIPT_KEYS = ("command", "setup", "shebang")

    def __init__(
        self,
        descriptor: JobDescriptor,
        command: str,
        setup: str | None = None,
        shebang: str | None = None,
    ):
        """
        Initialize the builder.

        Args:
            descriptor (JobDescriptor): Options of the job written as `#SBATCH` directives.
            command (str): Body of the script executed by the job.
            setup (str | None): Optional block preparing the environment
                (e.g., loading modules), placed before the command.
            shebang (str | None): First line of the script. Defaults to `CFG.script.shebang`.
        """
        self._descriptor = descriptor
        self._command = command
        self._setup = setup
        self._shebang = shebang or CFG.script.shebang

    def render(self) -> str:
        """
        Render the batch script.

        Returns:
            str: The shebang, one `#SBATCH` line per option, an empty line,
                the optional setup block, and the command.
        """
        lines = [self._shebang]
        lines.extend(
            f"#SBATCH {shlex.quote(arg)}" for arg in self._descriptor.toSbatchArgs()
        )
        lines.append("")

        if self._setup:
            lines.append(self._setup.rstrip("\n"))
            lines.append("")

        lines.append(self._command.rstrip("\n"))
        return "\n".join(lines) + "\n"

    def write(self, path: Path) -> Path:
        """
        Write the rendered script into a file and make it executable.

        Args:
            path (Path): Path of the file to write.

        Returns:
            Path: Path of the written file.

        Raises:
            SJError: If the file cannot be written.
        """
        try:
            path.write_text(self.render())
            path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            raise SJError(f"Could not write script '{path}': {e}.") from e

        logger.debug(f"Written batch script '{path}'.")
        return path

    def getDescriptor(self) -> JobDescriptor:
        return self._descriptor

    def getCommand(self) -> str:
        return self._command

    def getSetup(self) -> str | None:
        return self._setup

    def getShebang(self) -> str:
        return self._shebang

    def withDescriptor(self, descriptor: JobDescriptor) -> "ScriptBuilder":
        """Return a copy of the builder using a different descriptor."""
        return ScriptBuilder(descriptor, self._command, self._setup, self._shebang)

    def toYaml(self) -> str:
        """
        Return the YAML representation of the job, loadable by `fromYaml`.
        """
        data = self._descriptor.toDict()
        if self._setup:
            data["setup"] = self._setup
        data["command"] = self._command
        if self._shebang != CFG.script.shebang:
            data["shebang"] = self._shebang

        return yaml.dump(data, default_flow_style=False, sort_keys=False, Dumper=Dumper)

    @classmethod
    def fromYaml(cls, file: Path) -> Self:
        """
        Load a job from a YAML file.

        The file contains the options of the job (field names of `JobDescriptor`
        in snake_case or kebab-case) and the `command` to execute. Optionally,
        it may contain `setup` and `shebang`.

        Args:
            file (Path): Path to the YAML file.

        Returns:
            ScriptBuilder: Builder for the described job.

        Raises:
            SJError: If the file cannot be read or parsed, the command is missing,
                or the file contains an unknown option.
        """
        try:
            with open(file) as f:
                data: dict[str, object] = yaml.load(f, Loader=JobFileLoader)
        except FileNotFoundError:
            raise SJError(f"Job file '{file}' does not exist.") from None
        except yaml.YAMLError as e:
            raise SJError(f"Could not parse job file '{file}': {e}.") from e

        if not isinstance(data, dict):
            raise SJError(f"Job file '{file}' does not contain a mapping of options.")

        script_data = {}
        for key in list(data.keys()):
            if to_snake_case(str(key)) in cls.SCRIPT_KEYS:
                script_data[to_snake_case(str(key))] = data.pop(key)

        if not (command := script_data.get("command")):
            raise SJError(f"Job file '{file}' does not specify a command.")

        return cls(
            JobDescriptor.fromDict(data),
            str(command),
            str(setup) if (setup := script_data.get("setup")) else None,
            str(shebang) if (shebang := script_data.get("shebang")) else None,
        )
