# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from pathlib import Path
from typing import NoReturn

import click
from click_option_group import optgroup

from sjob_lib.core.click_format import GNUHelpColorsCommand
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger
from sjob_lib.descriptor import DescriptorFactory, JobDescriptor, ScriptBuilder
from sjob_lib.submit.options import descriptor_options

logger = get_logger(__name__)


@click.command(
    short_help="Create a batch script.",
    help=f"""
Create a ready-to-submit Slurm batch script with `#SBATCH` directives.

The options of the job are taken from the command line, from a YAML job file
(`--from-yaml`), and from the defaults in the configuration file, in this order of priority.

The script is printed to standard output unless `--file` is specified.
The created script can be submitted using `{CFG.binary_name} submit` or `sbatch`.
""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@descriptor_options
@optgroup.group(f"{click.style('Script', fg='yellow')}")
@optgroup.option(
    "--command",
    type=str,
    default=None,
    help="Command executed by the job. Overrides the command of the YAML job file.",
)
@optgroup.option(
    "--setup",
    type=str,
    default=None,
    help="Commands preparing the environment of the job (e.g., `module load gromacs`), placed before the command.",
)
@optgroup.option(
    "--shebang",
    type=str,
    default=None,
    help=f"First line of the script. Defaults to '{CFG.script.shebang}'.",
)
@optgroup.option(
    "--from-yaml",
    "from_yaml",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Load the options and the command of the job from a YAML job file.",
)
@optgroup.option(
    "-f",
    "--file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the script into this file instead of printing it.",
)
@optgroup.option(
    "--yaml",
    is_flag=True,
    help="Output the job as a YAML job file instead of a batch script.",
)
def script(
    command: str | None,
    setup: str | None,
    shebang: str | None,
    from_yaml: Path | None,
    file: Path | None,
    yaml: bool,
    **kwargs,
) -> NoReturn:
    """
    Create a Slurm batch script from the command line.
    """
    try:
        builder = _make_builder(command, setup, shebang, from_yaml, **kwargs)
        output = builder.toYaml() if yaml else builder.render()

        if file:
            if yaml:
                try:
                    file.write_text(output)
                except OSError as e:
                    raise SJError(f"Could not write job file '{file}': {e}.") from e
            else:
                builder.write(file)
            logger.info(f"Written '{file}'.")
        else:
            print(output, end="")

        sys.exit(0)
    except SJError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def _make_builder(
    command: str | None,
    setup: str | None,
    shebang: str | None,
    from_yaml: Path | None,
    **kwargs,
) -> ScriptBuilder:
    """
    Combine the command-line options with the YAML job file (if provided).

    Raises:
        SJError: If no command is available or the job file is invalid.
    """
    factory = DescriptorFactory(**kwargs)

    if from_yaml:
        loaded = ScriptBuilder.fromYaml(from_yaml)
        return ScriptBuilder(
            factory.fromDescriptor(loaded.getDescriptor()),
            command or loaded.getCommand(),
            setup or loaded.getSetup(),
            shebang or loaded.getShebang(),
        )

    if not command:
        raise SJError("No command specified. Use '--command' or '--from-yaml'.")

    return ScriptBuilder(
        factory.fromDescriptor(JobDescriptor()), command, setup, shebang
    )
