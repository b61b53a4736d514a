# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable
from typing import Any


class Repeater:
    """
    Apply an operation to several jobs, so that a failure for one job
    does not prevent the operation for the others.

    Exceptions of registered types are passed to their handler and recorded
    in `encountered_errors`. Any other exception interrupts the iteration.

    Attributes:
        items (list[Any]): Items to process, typically job IDs.
        encountered_errors (dict[int, BaseException]): Handled exceptions by the index of the item.
        current_iteration (int): Index of the item being processed.
    """

    def __init__(self, items: list[Any], func: Callable, *args: Any, **kwargs: Any):
        """
        Args:
            items (list[Any]): Items to process.
            func (Callable): Called as `func(item, *args, **kwargs)` for every item.
        """
        self.items = items
        self.encountered_errors: dict[int, BaseException] = {}
        self.current_iteration = 0

        self._call = lambda item: func(item, *args, **kwargs)
        self._handlers: list[tuple[type[BaseException], Callable]] = []

    def onException(self, exc_type: type[BaseException], handler: Callable) -> None:
        """
        Register `handler(exception, repeater)` for exceptions of `exc_type`.

        The first registered matching handler is used, so register subclasses
        before their base classes.
        """
        self._handlers.append((exc_type, handler))

    def run(self) -> None:
        handled = tuple(exc_type for exc_type, _ in self._handlers)

        for i, item in enumerate(self.items):
            self.current_iteration = i
            try:
                self._call(item)
            except handled as e:
                self.encountered_errors[i] = e
                handler = next(h for exc_type, h in self._handlers if isinstance(e, exc_type))
                handler(e, self)

    def isSingle(self) -> bool:
        """True if there is only one item to process."""
        return len(self.items) == 1

    def countErrors(self, exc_type: type[BaseException] = BaseException) -> int:
        """Number of items for which an exception of the given type was handled."""
        return sum(isinstance(e, exc_type) for e in self.encountered_errors.values())

    def allFailed(self, exc_type: type[BaseException] = BaseException) -> bool:
        """True if an exception of the given type was handled for every item."""
        return self.countErrors(exc_type) == len(self.items)
