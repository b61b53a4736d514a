# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
import shlex
from pathlib import Path

from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

from .descriptor import JobDescriptor
from .directives import find_long, find_short

logger = get_logger(__name__)


class DirectiveParser:
    """
    Parser for `#SBATCH` directives specified in a batch script.
    """

    def __init__(self, script: Path):
        """
        Initialize the parser.

        Args:
            script (Path): Path to the batch script to parse.
        """
        self._script = script
        self._options: dict[str, str] = {}
        self._extra: list[str] = []

    def parse(self) -> JobDescriptor:
        """
        Extract `#SBATCH` directives from the script and convert them into a descriptor.

        The method processes the script line by line, skipping the first line (shebang).
        It continues reading until it encounters a line that is not an `#SBATCH` directive,
        is non-empty, and is not a comment. Empty or commented lines are ignored.
        This matches the way `sbatch` itself reads the directives.

        Options known to sjob fill the fields of the descriptor. Other options
        are stored verbatim in `JobDescriptor.extra`.

        Returns:
            JobDescriptor: Descriptor holding the options specified in the script.

        Raises:
            SJError: If the script cannot be read, or if a directive is malformed or
                    lacks a required value.
        """
        if not self._script.is_file():
            raise SJError(f"Could not open '{self._script}' as a file.")

        self._options = {}
        self._extra = []

        with self._script.open() as f:
            # skip the first line (shebang)
            next(f, None)

            for line in f:
                stripped = line.strip()
                if stripped == "":
                    logger.debug("DirectiveParser: skipping empty line.")
                    continue  # skip empty lines

                # check whether this is an sbatch directive
                if not (match := re.match(r"#SBATCH\s+(.*)", stripped)):
                    if stripped.startswith("#"):
                        logger.debug(f"DirectiveParser: skipping commented line '{line}'.")
                        continue  # skip commented lines
                    logger.debug(f"DirectiveParser: ending parsing at line '{line}'.")
                    break  # stop parsing at other lines

                try:
                    tokens = shlex.split(match.group(1), comments=True)
                except ValueError as e:
                    raise SJError(
                        f"Invalid directive in '{self._script}': {stripped} ({e})."
                    ) from e

                self._parseTokens(tokens, stripped)

        logger.debug(
            f"Parsed directives from '{self._script}': {self._options}, extra: {self._extra}."
        )

        try:
            return JobDescriptor(**self._options, extra=self._extra or None)  # ty: ignore[invalid-argument-type]
        except SJError as e:
            raise SJError(f"Invalid directive in '{self._script}': {e}") from e

    def _parseTokens(self, tokens: list[str], line: str) -> None:
        """
        Parse the tokens of a single directive line.

        Args:
            tokens (list[str]): Shell-like tokens following `#SBATCH`.
            line (str): The complete line, used in error messages.

        Raises:
            SJError: If an option lacks its value or the line contains a stray argument.
        """
        i = 0
        while i < len(tokens):
            token = tokens[i]
            next_token = tokens[i + 1] if i + 1 < len(tokens) else None

            if token.startswith("--"):
                name, sep, value = token[2:].partition("=")
                directive = find_long(name)
                if directive is None:
                    i += self._storeExtra(token, None if sep else next_token)
                    continue

                if not sep:
                    value = DirectiveParser._requireValue(next_token, token, line)
                    i += 1

            elif token.startswith("-") and len(token) > 1:
                letter, value = token[1], token[2:]
                directive = find_short(letter)
                if directive is None:
                    i += self._storeExtra(token, None if value else next_token)
                    continue

                if not value:
                    value = DirectiveParser._requireValue(next_token, token, line)
                    i += 1

            else:
                raise SJError(
                    f"Unexpected argument '{token}' in directive of '{self._script}': {line}."
                )

            self._options[directive.field] = value
            i += 1

    def _storeExtra(self, token: str, candidate: str | None) -> int:
        """
        Store an option unknown to sjob.

        The following token is treated as the value of the option
        if it does not look like an option itself. The option and its value
        are joined into a single argument (`--name=value` or `-Xvalue`).

        Returns:
            int: The number of tokens consumed.
        """
        logger.debug(f"DirectiveParser: passing through unknown option '{token}'.")
        if candidate is not None and not candidate.startswith("-"):
            separator = "=" if token.startswith("--") else ""
            self._extra.append(f"{token}{separator}{candidate}")
            return 2

        self._extra.append(token)
        return 1

    @staticmethod
    def _requireValue(value: str | None, option: str, line: str) -> str:
        if value is None or value.startswith("-"):
            raise SJError(f"Option '{option}' requires a value: {line}.")
        return value
