# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Table of the `sbatch` options understood by sjob.

Each `Directive` links a field of `JobDescriptor` with the long option name
(used as `--name=value`) and the optional one-letter short option (used as `-X value`).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Directive:
    """An sbatch option mapped to a field of JobDescriptor."""

    # Name of the JobDescriptor field.
    field: str
    # Long option name without the leading dashes.
    long: str
    # Short option letter or None if the option has no short form.
    short: str | None = None
    # Alternative long option names accepted when parsing.
    aliases: tuple[str, ...] = ()

    def matchesLong(self, name: str) -> bool:
        """Return True if the given long option name refers to this directive."""
        return name == self.long or name in self.aliases


# Order of this list determines the order of options in generated commands and scripts.
DIRECTIVES: list[Directive] = [
    Directive("job_name", "job-name", "J"),
    Directive("partition", "partition", "p"),
    Directive("account", "account", "A"),
    Directive("qos", "qos", "q"),
    Directive("time", "time", "t"),
    Directive("nodes", "nodes", "N"),
    Directive("ntasks", "ntasks", "n"),
    Directive("ntasks_per_node", "ntasks-per-node"),
    Directive("cpus_per_task", "cpus-per-task", "c"),
    Directive("mem", "mem"),
    Directive("mem_per_cpu", "mem-per-cpu"),
    Directive("gpus", "gpus", "G"),
    Directive("constraint", "constraint", "C"),
    Directive("array", "array", "a"),
    Directive("dependency", "dependency", "d"),
    Directive("export", "export"),
    Directive("output", "output", "o"),
    Directive("error", "error", "e"),
    Directive("chdir", "chdir", "D", aliases=("workdir",)),
    Directive("mail_type", "mail-type"),
    Directive("mail_user", "mail-user"),
]


def find_long(name: str) -> Directive | None:
    """Return the directive with the given long option name or None if it is not known."""
    return next((d for d in DIRECTIVES if d.matchesLong(name)), None)


def find_short(letter: str) -> Directive | None:
    """Return the directive with the given short option letter or None if it is not known."""
    return next((d for d in DIRECTIVES if d.short == letter), None)
