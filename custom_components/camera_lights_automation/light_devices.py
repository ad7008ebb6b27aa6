"""Home Assistant light entities as automation device handles."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from homeassistant.const import STATE_ON, STATE_UNAVAILABLE, STATE_UNKNOWN
from homeassistant.core import Event, HomeAssistant, State, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_state_change_event

from .const import DEFAULT_DEVICE_TIMEOUT
from .devices import DeviceError, DeviceManager, LightDevice, clamp_brightness

_LOGGER = logging.getLogger(__name__)

LIGHT_DOMAIN = "light"


@dataclass
class LightState:
    """Represents the state of a light."""

    entity_id: str
    available: bool
    is_on: bool
    brightness_pct: int = 0
    name: str | None = None

    @staticmethod
    def from_ha_state(entity_id: str, state: State | None) -> LightState:
        """Create LightState from a HomeAssistant state object."""
        if state is None:
            return LightState(entity_id=entity_id, available=False, is_on=False)

        brightness = state.attributes.get("brightness", 0) or 0
        brightness_pct = round(brightness * 100 / 255) if brightness else 0

        return LightState(
            entity_id=entity_id,
            available=state.state not in (STATE_UNAVAILABLE, STATE_UNKNOWN),
            is_on=state.state == STATE_ON,
            brightness_pct=brightness_pct,
            name=state.name,
        )


class HassLightDevice(LightDevice):
    """A Home Assistant light entity."""

    def __init__(
        self,
        hass: HomeAssistant,
        entity_id: str,
        managed: bool = True,
        timeout: float = DEFAULT_DEVICE_TIMEOUT,
    ) -> None:
        """Initialize the light handle.

        Args:
            hass: HomeAssistant instance
            entity_id: Light entity ID
            managed: Whether the light participates in automation
            timeout: Seconds allowed per service call
        """
        self.hass = hass
        self.entity_id = entity_id
        self._managed = managed
        self._timeout = timeout
        self._state = LightState.from_ha_state(entity_id, hass.states.get(entity_id))

    @property
    def identity(self) -> str:
        return self.entity_id

    @property
    def name(self) -> str:
        return self._state.name or self.entity_id

    @property
    def is_online(self) -> bool:
        return self._state.available

    @property
    def is_managed(self) -> bool:
        return self._managed

    @property
    def brightness(self) -> int:
        return self._state.brightness_pct

    @property
    def is_on(self) -> bool:
        return self._state.is_on

    @callback
    def update_from_state(self, state: State | None) -> None:
        """Update cached fields from a state object."""
        self._state = LightState.from_ha_state(self.entity_id, state)

    async def async_refresh_state(self) -> None:
        """Read the live state from the state machine."""
        state = self.hass.states.get(self.entity_id)
        self.update_from_state(state)
        if state is None:
            raise DeviceError(f"{self.entity_id} not found")
        if not self._state.available:
            raise DeviceError(f"{self.entity_id} is {state.state}")

    async def async_turn_on(self) -> None:
        await self._async_call("turn_on", {})

    async def async_turn_off(self) -> None:
        await self._async_call("turn_off", {})

    async def async_set_brightness(self, percent: int) -> None:
        """Set brightness; does nothing while the light is off.

        light.turn_on with a brightness would power the light up, and a
        brightness change must never switch on a light that is off.
        """
        self.update_from_state(self.hass.states.get(self.entity_id))
        if not self._state.is_on:
            _LOGGER.debug(
                "Not setting brightness of %s to %d: light is off", self.name, percent
            )
            return
        await self._async_call("turn_on", {"brightness_pct": clamp_brightness(percent)})

    async def _async_call(self, service: str, data: dict[str, Any]) -> None:
        """Call a light service, converting failures into DeviceError."""
        service_data = {"entity_id": self.entity_id, **data}
        try:
            await asyncio.wait_for(
                self.hass.services.async_call(
                    LIGHT_DOMAIN, service, service_data, blocking=True
                ),
                timeout=self._timeout,
            )
        except TimeoutError as err:
            raise DeviceError(
                f"light.{service} timed out after {self._timeout}s"
            ) from err
        except HomeAssistantError as err:
            raise DeviceError(str(err) or type(err).__name__) from err

        self.update_from_state(self.hass.states.get(self.entity_id))
        _LOGGER.debug("Called light.%s for %s with %s", service, self.entity_id, data)


class HassLightManager(DeviceManager):
    """Owns the configured light entities and keeps their cached state current."""

    def __init__(
        self,
        hass: HomeAssistant,
        entity_ids: list[str],
        timeout: float = DEFAULT_DEVICE_TIMEOUT,
    ) -> None:
        """Initialize the manager with the configured lights."""
        self.hass = hass
        self._devices: dict[str, HassLightDevice] = {}
        for entity_id in entity_ids:
            if entity_id in self._devices:
                continue
            self._devices[entity_id] = HassLightDevice(hass, entity_id, timeout=timeout)
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def devices(self) -> list[LightDevice]:
        return list(self._devices.values())

    def get(self, identity: str) -> LightDevice | None:
        return self._devices.get(identity)

    @property
    def entity_ids(self) -> list[str]:
        return list(self._devices)

    @callback
    def async_setup(self) -> None:
        """Start tracking state changes of the lights."""
        missing = [eid for eid in self._devices if not self.hass.states.get(eid)]
        if missing:
            _LOGGER.warning(
                "Lights not yet available: %s (will track once they appear)", missing
            )

        if self._devices:
            self._unsubscribers.append(
                async_track_state_change_event(
                    self.hass, list(self._devices), self._async_light_changed
                )
            )
        self.refresh_all_states()

    @callback
    def _async_light_changed(self, event: Event) -> None:
        """Handle light state change."""
        entity_id = event.data.get("entity_id")
        device = self._devices.get(entity_id)
        if device is not None:
            device.update_from_state(event.data.get("new_state"))

    def refresh_all_states(self) -> None:
        """Refresh cached state of all lights from the state machine."""
        for device in self._devices.values():
            device.update_from_state(self.hass.states.get(device.entity_id))

    def cleanup(self) -> None:
        """Stop tracking state changes."""
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers.clear()
