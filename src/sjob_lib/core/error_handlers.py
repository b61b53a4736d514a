# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Handlers of errors raised while an operation is applied to several jobs by a `Repeater`.

A command fails (exits with `CFG.exit_codes.default`) only once the operation
failed for every job. Until then, the errors are just reported.
"""

import sys

from .config import CFG
from .error import SJNotSuitableError
from .logger import get_logger
from .repeater import Repeater

logger = get_logger(__name__)


def handle_not_suitable_error(exception: BaseException, repeater: Repeater) -> None:
    """
    Report a job that is in a state unsuitable for the operation.

    With a single job this is an error. With more jobs, the unsuitable job
    is only mentioned, unless the operation failed for every job.
    """
    if repeater.isSingle():
        logger.error(exception)
        print()
        sys.exit(CFG.exit_codes.default)
    elif repeater.allFailed(SJNotSuitableError):
        logger.info(exception)
        logger.error("No suitable job.\n")
        sys.exit(CFG.exit_codes.default)
    else:
        logger.info(exception)
        _exit_if_all_failed(repeater)


def handle_general_error(exception: BaseException, repeater: Repeater) -> None:
    """Report a failure of the operation for one job."""
    logger.error(exception)
    _exit_if_all_failed(repeater)


def _exit_if_all_failed(repeater: Repeater) -> None:
    """Exit with an error once the operation failed for every job, whatever the errors."""
    if repeater.allFailed():
        print()
        sys.exit(CFG.exit_codes.default)
