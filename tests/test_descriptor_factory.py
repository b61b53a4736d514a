# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import patch

from sjob_lib.core.config import CFG, SubmissionDefaults
from sjob_lib.descriptor.descriptor import JobDescriptor
from sjob_lib.descriptor.factory import DescriptorFactory
from sjob_lib.properties.size import Size


def test_descriptor_factory_ignores_unset_and_unknown_kwargs():
    factory = DescriptorFactory(partition=None, host="login", dry_run=True, nodes=2)

    assert factory.fromDescriptor(JobDescriptor()).nodes == "2"


def test_descriptor_factory_priority(tmp_path):
    script = tmp_path / "job.sh"
    script.write_text(
        "#!/bin/bash\n#SBATCH --time=2:00:00\n#SBATCH --partition=short\necho\n"
    )

    defaults = SubmissionDefaults(partition="long", time="1d", account="proj")
    with patch.object(CFG, "defaults", defaults):
        descriptor = DescriptorFactory(time="30m").fromScript(script)

    assert descriptor.time == "00:30:00"
    assert descriptor.partition == "short"
    assert descriptor.account == "proj"


def test_descriptor_factory_mem_per_cpu_not_overridden_by_default_mem():
    defaults = SubmissionDefaults(mem="4G")
    with patch.object(CFG, "defaults", defaults):
        descriptor = DescriptorFactory(mem_per_cpu="1G").fromDescriptor(
            JobDescriptor()
        )

    assert descriptor.mem is None
    assert descriptor.mem_per_cpu == Size(1, "gb")
