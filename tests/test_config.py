from __future__ import annotations

import pytest

from osc_display.config import DEFAULT_PORT, config_from_dict, load_config
from osc_display.core.addressing import AddressingPolicy
from osc_display.flush import FlushMode


def test_defaults_give_one_direct_target() -> None:
    config = load_config(None)

    assert config.port == DEFAULT_PORT
    assert config.addressing == AddressingPolicy.SINGLE
    assert config.display.flush == FlushMode.IMMEDIATE
    assert len(config.targets) == 1
    assert config.targets[0].channel is None
    assert config.mux is None


def test_load_yaml_file(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n"
        "  port: 9000\n"
        "display:\n"
        "  flush: polled\n"
        "  width: 96\n"
        "addressing: per-message\n"
        "mux:\n"
        "  bus: 2\n"
        "  address: 0x71\n"
        "targets:\n"
        "  - channel: 0\n"
        "  - channel: 3\n"
    )

    config = load_config(str(path))

    assert config.port == 9000
    assert config.display.flush == FlushMode.POLLED
    assert config.display.width == 96
    assert config.addressing == AddressingPolicy.PER_MESSAGE
    assert config.mux.bus == 2 and config.mux.address == 0x71
    assert [t.channel for t in config.targets] == [0, 3]


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_non_mapping_file_raises(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError):
        load_config(str(path))


@pytest.mark.parametrize("data", [
    {"targets": []},
    {"addressing": "sticky"},
    {"display": {"backend": "framebuffer"}},
    {"display": {"flush": "sometimes"}},
    {"server": {"port": 0}},
    {"mux": {}, "targets": [{"channel": 1}, {"channel": 1}]},
    {"mux": {}, "targets": [{}]},
    {"mux": {}, "targets": [{"channel": 8}]},
])
def test_invalid_configs_are_rejected(data) -> None:
    with pytest.raises(ValueError):
        config_from_dict(data)


def test_several_direct_targets_are_allowed() -> None:
    config = config_from_dict({"targets": [{}, {}, {}]})

    assert len(config.targets) == 3
