# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable
from time import sleep
from typing import Any

from .error import SJError
from .logger import get_logger

logger = get_logger(__name__, show_time=True)


class Retryer:
    """
    Call a function again after a pause whenever it fails with a retriable error.

    Used for scheduler queries that can fail transiently, e.g., when the ssh
    connection to a login node drops or `slurmctld` is briefly unresponsive.

    Attributes:
        max_tries (int): Maximum number of calls.
        wait_seconds (float): Pause between two calls.
        retry_on (tuple[type[BaseException], ...]): Exception types worth another attempt.
            Any other exception propagates immediately.
    """

    def __init__(
        self,
        func: Callable,
        *args: Any,
        max_tries: int,
        wait_seconds: float,
        retry_on: tuple[type[BaseException], ...] = (SJError,),
        **kwargs: Any,
    ):
        if max_tries < 1:
            raise SJError(f"Number of tries must be at least 1, not {max_tries}.")

        self._func = func
        self._args = args
        self._kwargs = kwargs
        self.max_tries = max_tries
        self.wait_seconds = wait_seconds
        self.retry_on = retry_on

    def run(self) -> Any:
        """
        Call the function until it returns or the attempts are exhausted.

        Returns:
            Any: Whatever the function returned.

        Raises:
            Exception: The error of the last attempt, of the same type and with the
                attempt count appended to its message.
        """
        attempt = 1
        while True:
            try:
                return self._func(*self._args, **self._kwargs)
            except self.retry_on as e:
                if attempt >= self.max_tries:
                    raise type(e)(
                        f"{e}\nThis was attempt {attempt} of {self.max_tries}. Attempts exhausted."
                    ) from e

                logger.warning(
                    f"{e}\nThis was attempt {attempt} of {self.max_tries}. "
                    f"Attempting again in {self.wait_seconds} seconds."
                )
                sleep(self.wait_seconds)
                attempt += 1
