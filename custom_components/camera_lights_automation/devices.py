"""Device handle interfaces for camera lights automation.

The automation engine never creates or destroys lights. It only reads the
cached fields of a LightDevice and issues asynchronous requests against it.
These interfaces are shared by the Home Assistant integration and by the
in-memory fakes used in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .const import MAX_BRIGHTNESS


class DeviceError(Exception):
    """A single device operation failed (offline, timeout, rejected)."""


def clamp_brightness(value: int) -> int:
    """Clamp a brightness percentage to 0-100."""
    return max(0, min(int(value), MAX_BRIGHTNESS))


class LightDevice(ABC):
    """Abstract handle for one controllable light.

    Implement this interface to drive a new kind of light. Cached fields
    reflect the last known state; async_refresh_state() updates them from
    the live device.
    """

    @property
    @abstractmethod
    def identity(self) -> str:
        """Stable identity key of the light."""

    @property
    def name(self) -> str:
        """Human readable name, used in log messages."""
        return self.identity

    @property
    @abstractmethod
    def is_online(self) -> bool:
        """Return True if the last contact with the light succeeded."""

    @property
    @abstractmethod
    def is_managed(self) -> bool:
        """Return True if the light participates in automation."""

    @property
    @abstractmethod
    def brightness(self) -> int:
        """Last known brightness percentage (0-100)."""

    @property
    @abstractmethod
    def is_on(self) -> bool:
        """Last known power state."""

    @abstractmethod
    async def async_refresh_state(self) -> None:
        """Read the live power/brightness state into the cached fields.

        Raises:
            DeviceError: if the light cannot be reached
        """

    @abstractmethod
    async def async_turn_on(self) -> None:
        """Power the light on."""

    @abstractmethod
    async def async_turn_off(self) -> None:
        """Power the light off."""

    @abstractmethod
    async def async_set_brightness(self, percent: int) -> None:
        """Set brightness to the given percentage (clamped to 0-100)."""


class DeviceManager(ABC):
    """Abstract owner of the known lights."""

    @property
    @abstractmethod
    def devices(self) -> list[LightDevice]:
        """All lights currently known to the manager."""

    def get(self, identity: str) -> LightDevice | None:
        """Return the light with the given identity, or None if it is gone."""
        for device in self.devices:
            if device.identity == identity:
                return device
        return None

    def managed_online_devices(self) -> list[LightDevice]:
        """Lights that are both managed and online."""
        return [
            device for device in self.devices if device.is_managed and device.is_online
        ]

    def get_info(self) -> dict[str, Any]:
        """Get diagnostic information."""
        return {
            device.identity: {
                "online": device.is_online,
                "managed": device.is_managed,
                "is_on": device.is_on,
                "brightness": device.brightness,
            }
            for device in self.devices
        }
