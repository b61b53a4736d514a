# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from sjob_lib.core.error import SJError
from sjob_lib.properties.export import Export


def test_export_from_str_with_mode_and_variables():
    export = Export.fromStr("ALL,OMP_NUM_THREADS=4,HOME")

    assert export.mode == "ALL"
    assert export.variables == {"OMP_NUM_THREADS": "4", "HOME": None}
    assert export.toStr() == "ALL,OMP_NUM_THREADS=4,HOME"


def test_export_from_str_mode_only():
    export = Export.fromStr("none")

    assert export.mode == "NONE"
    assert export.variables == {}
    assert str(export) == "NONE"


def test_export_from_str_mode_is_variable_when_not_first():
    assert Export.fromStr("A=1,ALL").variables == {"A": "1", "ALL": None}


@pytest.mark.parametrize("raw", ["1VAR=2", "MY-VAR=3"])
def test_export_invalid_variable_name_raises(raw):
    with pytest.raises(SJError, match="Invalid name"):
        Export.fromStr(raw)


def test_export_unknown_mode_raises():
    with pytest.raises(SJError, match="Unknown export mode"):
        Export("SOME")


def test_export_value_with_comma_raises():
    with pytest.raises(SJError, match="cannot contain a comma"):
        Export(None, {"A": "1,2"})


def test_export_from_dict_defaults_to_all():
    export = Export.fromDict({"INPUT": "data.txt", "N": 4, "HOME": None})

    assert export.toStr() == "ALL,INPUT=data.txt,N=4,HOME"


def test_export_is_empty():
    assert Export().isEmpty()
    assert not Export("ALL").isEmpty()


def test_export_merge_earlier_takes_precedence():
    merged = Export.merge(
        Export.fromStr("A=1"),
        None,
        Export.fromStr("NONE,A=2,B=3"),
    )

    assert merged.mode == "NONE"
    assert merged.variables == {"A": "1", "B": "3"}


def test_export_merge_of_nothing_is_none():
    assert Export.merge(None, Export()) is None
