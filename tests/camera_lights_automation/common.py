"""Shared helpers for Camera Lights Automation tests."""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any

from homeassistant.const import STATE_OFF, STATE_ON
from homeassistant.core import HomeAssistant, ServiceCall

from custom_components.camera_lights_automation.devices import (
    DeviceError,
    DeviceManager,
    LightDevice,
    clamp_brightness,
)
from custom_components.camera_lights_automation.executor import DeviceActionExecutor
from custom_components.camera_lights_automation.reconciler import (
    CameraLightsReconciler,
)
from custom_components.camera_lights_automation.settings import AutomationSettings

CAMERA = "binary_sensor.webcam_in_use"
DESK_LIGHT = "light.desk"
KEY_LIGHT = "light.key"


class FakeLight(LightDevice):
    """In-memory light that records every request it receives."""

    def __init__(
        self,
        identity: str,
        *,
        on: bool = False,
        brightness: int = 50,
        online: bool = True,
        managed: bool = True,
    ) -> None:
        self._identity = identity
        self.on = on
        self.level = brightness
        self.online = online
        self.managed = managed
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: set[str] = set()
        # When set, async_refresh_state waits for it before reading
        self.refresh_gate: asyncio.Event | None = None

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def is_online(self) -> bool:
        return self.online

    @property
    def is_managed(self) -> bool:
        return self.managed

    @property
    def brightness(self) -> int:
        return self.level

    @property
    def is_on(self) -> bool:
        return self.on

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise DeviceError(f"{self._identity} unreachable")

    async def async_refresh_state(self) -> None:
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        self.calls.append(("refresh", None))
        self._check("refresh")

    async def async_turn_on(self) -> None:
        self.calls.append(("turn_on", None))
        self._check("turn_on")
        self.on = True

    async def async_turn_off(self) -> None:
        self.calls.append(("turn_off", None))
        self._check("turn_off")
        self.on = False

    async def async_set_brightness(self, percent: int) -> None:
        self.calls.append(("set_brightness", percent))
        self._check("set_brightness")
        self.level = clamp_brightness(percent)

    def operations(self, *names: str) -> list[tuple[str, Any]]:
        """Recorded calls except refreshes, or only the named operations."""
        if not names:
            return [call for call in self.calls if call[0] != "refresh"]
        return [call for call in self.calls if call[0] in names]


class FakeDeviceManager(DeviceManager):
    """Device manager over a mutable list of fake lights."""

    def __init__(self, lights: list[FakeLight]) -> None:
        self.lights = list(lights)

    @property
    def devices(self) -> list[LightDevice]:
        return list(self.lights)

    def remove(self, identity: str) -> None:
        self.lights = [light for light in self.lights if light.identity != identity]


class EngineHarness:
    """Reconciler wired to fake lights and a real executor."""

    def __init__(
        self, lights: list[FakeLight], settings: AutomationSettings | None = None
    ) -> None:
        self.settings = settings or AutomationSettings()
        self.manager = FakeDeviceManager(lights)
        self.executor = DeviceActionExecutor()
        self.reconciler = CameraLightsReconciler(
            self.manager, lambda: self.settings, self.executor
        )

    def change_settings(self, **changes: Any) -> None:
        """Apply a settings edit and deliver the change notification."""
        self.settings = dataclasses.replace(self.settings, **changes)
        self.reconciler.handle_settings_changed()

    def camera(self, active: bool) -> None:
        self.reconciler.handle_camera_activity(active)

    async def settle(self) -> None:
        await self.executor.async_drain()


def pct_to_brightness(percent: int) -> int:
    return round(percent * 255 / 100)


def async_mock_light_services(hass: HomeAssistant) -> list[ServiceCall]:
    """Mock light.turn_on/turn_off, keeping entity states in step with the calls."""
    calls: list[ServiceCall] = []

    async def mock_service_handler(call: ServiceCall) -> None:
        """Handle light service calls."""
        calls.append(call)
        entity_ids = call.data["entity_id"]
        if isinstance(entity_ids, str):
            entity_ids = [entity_ids]
        for entity_id in entity_ids:
            current = hass.states.get(entity_id)
            attributes = dict(current.attributes) if current else {}
            if call.service == "turn_off":
                attributes.pop("brightness", None)
                hass.states.async_set(entity_id, STATE_OFF, attributes)
                continue
            if "brightness_pct" in call.data:
                attributes["brightness"] = pct_to_brightness(call.data["brightness_pct"])
            else:
                attributes.setdefault("brightness", 255)
            hass.states.async_set(entity_id, STATE_ON, attributes)

    hass.services.async_register("light", "turn_on", mock_service_handler)
    hass.services.async_register("light", "turn_off", mock_service_handler)
    return calls


def calls_for(calls: list[ServiceCall], entity_id: str) -> list[ServiceCall]:
    """Service calls targeting one entity."""
    return [call for call in calls if call.data["entity_id"] == entity_id]


def brightness_pct(hass: HomeAssistant, entity_id: str) -> int:
    """Current brightness percentage of a light entity."""
    state = hass.states.get(entity_id)
    brightness = state.attributes.get("brightness") or 0
    return round(brightness * 100 / 255)
