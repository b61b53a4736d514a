# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass

import pytest

from sjob_lib.core.field_coupling import CouplingRules, FieldCoupling

MEMORY = FieldCoupling("mem", "mem_per_cpu")


@dataclass
class Resources:
    mem: str | None = None
    mem_per_cpu: str | None = None
    nodes: int | None = None


def test_field_coupling_requires_two_fields():
    with pytest.raises(ValueError):
        FieldCoupling("mem")


def test_field_coupling_contains():
    assert "mem_per_cpu" in MEMORY
    assert "nodes" not in MEMORY


def test_field_coupling_dominant_field():
    assert MEMORY.getDominantField(Resources()) is None
    assert MEMORY.getDominantField(Resources(mem_per_cpu="2G")) == "mem_per_cpu"
    assert MEMORY.getDominantField(Resources(mem="4G", mem_per_cpu="2G")) == "mem"
    assert not MEMORY.hasValue(Resources(nodes=3))


def test_field_coupling_enforce_keeps_dominant_field():
    resources = Resources(mem="4G", mem_per_cpu="1G")

    MEMORY.enforce(resources)

    assert resources.mem == "4G"
    assert resources.mem_per_cpu is None


def test_field_coupling_enforce_keeps_recessive_field_alone():
    resources = Resources(mem_per_cpu="1G", nodes=2)

    MEMORY.enforce(resources)

    assert resources.mem_per_cpu == "1G"
    assert resources.nodes == 2


def test_field_coupling_take_from_first_instance_with_value():
    values = MEMORY.takeFrom(
        Resources(nodes=1), Resources(mem_per_cpu="1G"), Resources(mem="8G")
    )

    # the dominant field of a less important instance does not win
    assert values == {"mem": None, "mem_per_cpu": "1G"}


def test_field_coupling_take_from_without_values():
    assert MEMORY.takeFrom(Resources(), Resources(nodes=2)) == {
        "mem": None,
        "mem_per_cpu": None,
    }


def test_coupling_rules_for_field_and_enforce():
    other = FieldCoupling("ntasks", "ntasks_per_node")
    rules = CouplingRules(MEMORY, other)

    assert rules.forField("mem_per_cpu") is MEMORY
    assert rules.forField("ntasks_per_node") is other
    assert rules.forField("nodes") is None
    assert list(rules) == [MEMORY, other]

    resources = Resources(mem="4G", mem_per_cpu="1G")
    CouplingRules(MEMORY).enforce(resources)
    assert resources.mem_per_cpu is None
