"""
Server configuration.

Loaded from YAML:

    server:
      host: 0.0.0.0
      port: 7562
    display:
      backend: headless        # or "pygame" for a preview window
      width: 128
      height: 64
      font_size: 12
      flush: immediate         # or "polled"
      update_rate: 30          # Hz, main loop / polled flush rate
      preview_scale: 4
      snapshot_dir: null
      splash: "OSC display"
    addressing: single         # single | per-message | stateful
    mux:                       # optional TCA9548A multiplexer
      bus: 1
      address: 0x70
    targets:
      - channel: 0
      - channel: 1
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from osc_display.core.addressing import AddressingPolicy, parse_policy
from osc_display.flush import FlushMode
from osc_display.rendering.mux import TCA9548A_DEFAULT_ADDRESS

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7562
DEFAULT_UPDATE_RATE = 30  # Hz
BACKENDS = ("headless", "pygame")


@dataclass
class TargetConfig:
    """One display: its multiplexer channel (None = directly on the bus)."""
    channel: Optional[int] = None


@dataclass
class MuxConfig:
    bus: int = 1
    address: int = TCA9548A_DEFAULT_ADDRESS


@dataclass
class DisplayConfig:
    backend: str = "headless"
    width: int = 128
    height: int = 64
    font_size: int = 12
    flush: FlushMode = FlushMode.IMMEDIATE
    update_rate: int = DEFAULT_UPDATE_RATE
    preview_scale: int = 4
    snapshot_dir: Optional[str] = None
    splash: str = "OSC display"


@dataclass
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    display: DisplayConfig = field(default_factory=DisplayConfig)
    addressing: AddressingPolicy = AddressingPolicy.SINGLE
    mux: Optional[MuxConfig] = None
    targets: List[TargetConfig] = field(default_factory=lambda: [TargetConfig()])

    def validate(self) -> "ServerConfig":
        """
        Check cross-field constraints.

        Raises:
            ValueError: On an unusable configuration
        """
        if not self.targets:
            raise ValueError("At least one target must be configured")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")
        if self.display.backend not in BACKENDS:
            raise ValueError(f"Unknown display backend '{self.display.backend}' "
                             f"(expected one of {', '.join(BACKENDS)})")
        if self.display.width < 1 or self.display.height < 1:
            raise ValueError(f"Invalid display size "
                             f"{self.display.width}x{self.display.height}")
        if self.display.update_rate < 1:
            raise ValueError(f"Invalid update_rate: {self.display.update_rate}")

        channels = [t.channel for t in self.targets]
        if self.mux is not None:
            for channel in channels:
                if channel is None or not 0 <= channel < 8:
                    raise ValueError(f"Multiplexed target needs a channel in 0..7, "
                                     f"got {channel}")
            if len(set(channels)) != len(channels):
                raise ValueError(f"Duplicate multiplexer channels: {channels}")
        return self


def _parse_policy(value: Any) -> AddressingPolicy:
    policy = parse_policy(value)
    if policy is None:
        raise ValueError(f"Unknown addressing policy: {value!r}")
    return policy


def config_from_dict(data: Dict[str, Any]) -> ServerConfig:
    """
    Build a ServerConfig from a parsed YAML mapping.

    Raises:
        ValueError: On unknown values or a failed validate()
    """
    data = data or {}
    server = data.get('server', {}) or {}
    display = data.get('display', {}) or {}

    display_config = DisplayConfig(
        backend=str(display.get('backend', 'headless')),
        width=int(display.get('width', 128)),
        height=int(display.get('height', 64)),
        font_size=int(display.get('font_size', 12)),
        flush=FlushMode(display.get('flush', FlushMode.IMMEDIATE.value)),
        update_rate=int(display.get('update_rate', DEFAULT_UPDATE_RATE)),
        preview_scale=max(1, int(display.get('preview_scale', 4))),
        snapshot_dir=display.get('snapshot_dir'),
        splash=str(display.get('splash', "OSC display")),
    )

    mux_data = data.get('mux')
    mux = None
    if mux_data is not None:
        mux = MuxConfig(
            bus=int(mux_data.get('bus', 1)),
            address=int(mux_data.get('address', TCA9548A_DEFAULT_ADDRESS)),
        )

    targets_data = data.get('targets')
    if targets_data is None:
        targets = [TargetConfig()]
    else:
        targets = []
        for entry in targets_data:
            entry = entry or {}
            channel = entry.get('channel')
            targets.append(TargetConfig(channel=None if channel is None else int(channel)))

    config = ServerConfig(
        host=str(server.get('host', DEFAULT_HOST)),
        port=int(server.get('port', DEFAULT_PORT)),
        display=display_config,
        addressing=_parse_policy(data.get('addressing', 'single')),
        mux=mux,
        targets=targets,
    )
    return config.validate()


def load_config(path: Optional[str] = None) -> ServerConfig:
    """
    Load configuration from a YAML file (defaults when path is None).

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On invalid content
    """
    if not path:
        return ServerConfig().validate()

    config_file = Path(path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_file, 'r') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)
