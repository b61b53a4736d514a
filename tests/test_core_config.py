# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass, field

import pytest

from sjob_lib.core.config import Config, _from_dict


def test_from_dict_nested_conversion():
    @dataclass
    class Inner:
        value: int = 0

    @dataclass
    class Outer:
        inner: Inner = field(default_factory=Inner)
        name: str = "default"

    result = _from_dict(Outer, {"inner": {"value": 99}, "unknown": 1})

    assert isinstance(result.inner, Inner)
    assert result.inner.value == 99
    assert result.name == "default"


def test_config_load_missing_file_uses_defaults(tmp_path):
    config = Config.load(tmp_path / "missing.toml")

    assert config == Config()
    assert config.exit_codes.default == 91
    assert config.script.shebang == "#!/bin/bash"


def test_config_load_overrides_values(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        """
[transport]
host = "login.cluster.org"
ssh_options = ["-p", "2222"]

[defaults]
partition = "short"
time = "1h"

[poller]
interval = 30
"""
    )

    config = Config.load(config_file)

    assert config.transport.host == "login.cluster.org"
    assert config.transport.ssh_options == ["-p", "2222"]
    assert config.transport.remote_script_dir == ".sjob/scripts"
    assert config.defaults.partition == "short"
    assert config.defaults.time == "1h"
    assert config.poller.interval == 30
    assert config.poller.max_unknown == 3


def test_config_load_invalid_file_raises(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[transport\nhost = ")

    with pytest.raises(ValueError, match="Could not read sjob config"):
        Config.load(config_file)


def test_config_get_config_path_prefers_env_variable(tmp_path, monkeypatch):
    config_file = tmp_path / "custom.toml"
    config_file.write_text("")
    monkeypatch.setenv("SJOB_CONFIG", str(config_file))

    assert Config._get_config_path() == config_file


def test_config_get_config_path_none_if_nothing_exists(tmp_path, monkeypatch):
    monkeypatch.delenv("SJOB_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

    assert Config._get_config_path() is None


def test_from_dict_rejects_value_for_section():
    with pytest.raises(TypeError, match="must be a table"):
        _from_dict(Config, {"transport": "login.cluster.org"})


def test_config_load_value_for_section_raises(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text('poller = 5\n')

    with pytest.raises(ValueError, match="must be a table"):
        Config.load(config_file)


def test_config_search_paths_order(tmp_path, monkeypatch):
    monkeypatch.setenv("SJOB_CONFIG", str(tmp_path / "explicit.toml"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

    assert Config.searchPaths() == [
        tmp_path / "explicit.toml",
        tmp_path / "sjob_config.toml",
        tmp_path / "xdg" / "sjob" / "config.toml",
    ]


def test_config_get_config_path_falls_back_to_working_directory(tmp_path, monkeypatch):
    monkeypatch.delenv("SJOB_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    (tmp_path / "sjob_config.toml").write_text("")

    assert Config._get_config_path() == tmp_path / "sjob_config.toml"
