"""
Bus channel selection for multiplexed displays.

Several identical displays share one I2C address behind a TCA9548A
multiplexer; the channel of a target is selected before its frame is sent.
Without a multiplexer the NullChannelSelector is used.
"""

import logging
from typing import Optional, Protocol

import smbus2

logger = logging.getLogger(__name__)

TCA9548A_DEFAULT_ADDRESS = 0x70
TCA9548A_CHANNELS = 8


class ChannelSelector(Protocol):
    """Selects the bus channel a target's display sits on."""

    def select(self, channel: Optional[int]) -> None:
        ...

    def close(self) -> None:
        ...


class NullChannelSelector:
    """No multiplexer: every display is directly on the bus."""

    def select(self, channel: Optional[int]) -> None:
        pass

    def close(self) -> None:
        pass


class TCA9548A:
    """
    TCA9548A 8-channel I2C multiplexer on a Linux i2c-dev bus.

    Writing a single byte sets the enabled-channel mask. Channels outside
    0..7 (or None) disable all channels.
    """

    def __init__(self, bus: int = 1, address: int = TCA9548A_DEFAULT_ADDRESS):
        self.bus = bus
        self.address = address
        self._i2c: Optional[smbus2.SMBus] = None
        self._current: Optional[int] = None

        try:
            self._i2c = smbus2.SMBus(bus)
            # Disable all channels, which also verifies the address answers
            self._i2c.write_byte(address, 0)
        except OSError as e:
            self.close()
            raise RuntimeError(
                f"Unable to open TCA9548A on /dev/i2c-{bus} address 0x{address:02x}. "
                f"Ensure the multiplexer is connected and the bus and address "
                f"are correct: {e}"
            ) from e
        logger.info(f"TCA9548A ready on /dev/i2c-{bus} at 0x{address:02x}")

    @staticmethod
    def channel_mask(channel: Optional[int]) -> int:
        if channel is None or not 0 <= channel < TCA9548A_CHANNELS:
            return 0
        return 1 << channel

    def select(self, channel: Optional[int]) -> None:
        if channel == self._current:
            return
        self._i2c.write_byte(self.address, self.channel_mask(channel))
        self._current = channel

    def close(self) -> None:
        if self._i2c is not None:
            try:
                self._i2c.close()
            except OSError as e:
                logger.warning(f"Error closing multiplexer: {e}")
            self._i2c = None
