# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from unittest.mock import patch

import pytest

from sjob_lib.core.error import SJError, SJNotSuitableError
from sjob_lib.core.error_handlers import (
    CFG,
    handle_general_error,
    handle_not_suitable_error,
)
from sjob_lib.core.repeater import Repeater


def _metadata(items: list[str], errors: dict[int, BaseException]) -> Repeater:
    metadata = Repeater.__new__(Repeater)
    metadata.items = items
    metadata.encountered_errors = errors
    return metadata


def test_not_suitable_single_item_logs_error_and_exits():
    exc = SJNotSuitableError("not suitable")

    with (
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
        patch("sjob_lib.core.error_handlers.sys.exit") as mock_exit,
    ):
        handle_not_suitable_error(exc, _metadata(["1"], {0: exc}))

    mock_logger.error.assert_called_once_with(exc)
    mock_exit.assert_called_once_with(CFG.exit_codes.default)


def test_not_suitable_one_of_many_logs_info():
    exc = SJNotSuitableError("not suitable")

    with (
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
        patch("sjob_lib.core.error_handlers.sys.exit") as mock_exit,
    ):
        handle_not_suitable_error(exc, _metadata(["1", "2"], {0: exc}))

    mock_logger.info.assert_called_once_with(exc)
    mock_exit.assert_not_called()


def test_not_suitable_all_items_logs_and_exits():
    exc = SJNotSuitableError("not suitable")
    errors = {0: SJNotSuitableError("not suitable"), 1: exc}

    with (
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
        patch("sjob_lib.core.error_handlers.sys.exit") as mock_exit,
    ):
        handle_not_suitable_error(exc, _metadata(["1", "2"], errors))

    mock_logger.info.assert_called_once_with(exc)
    mock_logger.error.assert_called_once_with("No suitable job.\n")
    mock_exit.assert_called_once_with(CFG.exit_codes.default)


def test_not_suitable_last_after_general_error_exits():
    exc = SJNotSuitableError("not suitable")
    errors = {0: SJError("general error"), 1: exc}

    with (
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
        patch("sjob_lib.core.error_handlers.sys.exit") as mock_exit,
    ):
        handle_not_suitable_error(exc, _metadata(["1", "2"], errors))

    mock_logger.info.assert_called_once_with(exc)
    mock_logger.error.assert_not_called()
    mock_exit.assert_called_once_with(CFG.exit_codes.default)


@pytest.mark.parametrize("n_items", [1, 2, 3])
def test_general_error_for_every_item_exits(n_items):
    exc = SJError("general error")
    items = [str(i) for i in range(n_items)]
    errors = {i: SJError("general error") for i in range(n_items)}

    with (
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
        patch("sjob_lib.core.error_handlers.sys.exit") as mock_exit,
    ):
        handle_general_error(exc, _metadata(items, errors))

    mock_logger.error.assert_called_once_with(exc)
    mock_exit.assert_called_once_with(CFG.exit_codes.default)


def test_general_error_one_of_many_only_logs():
    exc = SJError("general error")

    with (
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
        patch("sjob_lib.core.error_handlers.sys.exit") as mock_exit,
    ):
        handle_general_error(exc, _metadata(["1", "2"], {0: exc}))

    mock_logger.error.assert_called_once_with(exc)
    mock_exit.assert_not_called()


def test_general_error_mixed_errors_exits():
    exc = SJError("general error")
    errors = {0: SJNotSuitableError("not suitable"), 1: exc}

    with (
        patch("sjob_lib.core.error_handlers.logger"),
        patch("sjob_lib.core.error_handlers.sys.exit") as mock_exit,
    ):
        handle_general_error(exc, _metadata(["1", "2"], errors))

    mock_exit.assert_called_once_with(CFG.exit_codes.default)
