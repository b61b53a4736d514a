# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Submission descriptors of Slurm jobs.

`JobDescriptor` holds the options of a job. `DirectiveParser` reads them from
the `#SBATCH` directives of a batch script, `ScriptBuilder` writes them back
into a complete script (or loads a job from a YAML file), and `DescriptorFactory`
combines options from the command line, the script, and the configuration.
"""

from .builder import ScriptBuilder
from .descriptor import JobDescriptor
from .directives import DIRECTIVES, Directive
from .factory import DescriptorFactory
from .parser import DirectiveParser

__all__ = [
    "DIRECTIVES",
    "DescriptorFactory",
    "Directive",
    "DirectiveParser",
    "JobDescriptor",
    "ScriptBuilder",
]
