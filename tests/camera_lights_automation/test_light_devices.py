"""Tests for Home Assistant light device handles."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from homeassistant.const import STATE_OFF, STATE_ON, STATE_UNAVAILABLE
from homeassistant.core import HomeAssistant, ServiceCall

from custom_components.camera_lights_automation.devices import DeviceError
from custom_components.camera_lights_automation.light_devices import (
    HassLightDevice,
    HassLightManager,
    LightState,
)

from .common import async_mock_light_services, pct_to_brightness


class TestLightState:
    """Test LightState class."""

    def test_from_ha_state_on(self):
        """Brightness is converted to a percentage."""
        ha_state = MagicMock()
        ha_state.state = "on"
        ha_state.attributes = {"brightness": 128}
        ha_state.name = "Desk"

        light_state = LightState.from_ha_state("light.desk", ha_state)
        assert light_state.available is True
        assert light_state.is_on is True
        assert light_state.brightness_pct == 50
        assert light_state.name == "Desk"

    def test_from_ha_state_off(self):
        """An off light reports zero brightness."""
        ha_state = MagicMock()
        ha_state.state = "off"
        ha_state.attributes = {"brightness": None}

        light_state = LightState.from_ha_state("light.desk", ha_state)
        assert light_state.is_on is False
        assert light_state.brightness_pct == 0

    def test_from_ha_state_unavailable(self):
        """Unavailable and missing lights are offline."""
        ha_state = MagicMock()
        ha_state.state = STATE_UNAVAILABLE
        ha_state.attributes = {}

        assert LightState.from_ha_state("light.desk", ha_state).available is False
        assert LightState.from_ha_state("light.desk", None).available is False


class TestHassLightDevice:
    """Test HassLightDevice."""

    async def test_cached_fields_from_state(self, hass: HomeAssistant):
        """Cached fields come from the state machine."""
        hass.states.async_set(
            "light.desk", STATE_ON, {"brightness": pct_to_brightness(40)}
        )
        device = HassLightDevice(hass, "light.desk")

        assert device.identity == "light.desk"
        assert device.is_online is True
        assert device.is_managed is True
        assert device.is_on is True
        assert device.brightness == 40

    async def test_refresh_picks_up_changes(self, hass: HomeAssistant):
        """async_refresh_state re-reads the live state."""
        hass.states.async_set("light.desk", STATE_OFF)
        device = HassLightDevice(hass, "light.desk")

        hass.states.async_set(
            "light.desk", STATE_ON, {"brightness": pct_to_brightness(75)}
        )
        await device.async_refresh_state()

        assert device.is_on is True
        assert device.brightness == 75

    async def test_refresh_of_missing_light_raises(self, hass: HomeAssistant):
        """A light that does not exist cannot be read."""
        device = HassLightDevice(hass, "light.missing")

        with pytest.raises(DeviceError):
            await device.async_refresh_state()

    async def test_refresh_of_unavailable_light_raises(self, hass: HomeAssistant):
        """An unavailable light cannot be read."""
        hass.states.async_set("light.desk", STATE_UNAVAILABLE)
        device = HassLightDevice(hass, "light.desk")

        with pytest.raises(DeviceError):
            await device.async_refresh_state()
        assert device.is_online is False

    async def test_turn_on_and_off(self, hass: HomeAssistant):
        """Power requests call the light services."""
        hass.states.async_set("light.desk", STATE_OFF)
        calls = async_mock_light_services(hass)
        device = HassLightDevice(hass, "light.desk")

        await device.async_turn_on()
        assert device.is_on is True
        await device.async_turn_off()
        assert device.is_on is False

        assert [call.service for call in calls] == ["turn_on", "turn_off"]
        assert calls[0].data == {"entity_id": "light.desk"}

    async def test_set_brightness_sends_percentage(self, hass: HomeAssistant):
        """Brightness is sent as brightness_pct and clamped."""
        hass.states.async_set("light.desk", STATE_ON, {"brightness": 100})
        calls = async_mock_light_services(hass)
        device = HassLightDevice(hass, "light.desk")

        await device.async_set_brightness(120)

        assert calls[0].data == {"entity_id": "light.desk", "brightness_pct": 100}
        assert device.brightness == 100

    async def test_set_brightness_never_powers_on(self, hass: HomeAssistant):
        """A brightness change on an off light is not sent."""
        hass.states.async_set("light.desk", STATE_OFF)
        calls = async_mock_light_services(hass)
        device = HassLightDevice(hass, "light.desk")

        await device.async_set_brightness(60)

        assert calls == []
        assert hass.states.get("light.desk").state == STATE_OFF

    async def test_service_error_becomes_device_error(self, hass: HomeAssistant):
        """Service failures surface as DeviceError."""
        hass.states.async_set("light.desk", STATE_OFF)
        device = HassLightDevice(hass, "light.desk")

        # No light services registered
        with pytest.raises(DeviceError):
            await device.async_turn_on()

    async def test_timeout_becomes_device_error(self, hass: HomeAssistant):
        """A call that exceeds the timeout surfaces as DeviceError."""
        hass.states.async_set("light.desk", STATE_OFF)

        async def hanging_handler(call: ServiceCall) -> None:
            await hass.loop.create_future()

        hass.services.async_register("light", "turn_on", hanging_handler)
        device = HassLightDevice(hass, "light.desk", timeout=0.01)

        with pytest.raises(DeviceError, match="timed out"):
            await device.async_turn_on()


class TestHassLightManager:
    """Test HassLightManager."""

    async def test_tracks_state_changes(self, hass: HomeAssistant):
        """Cached state follows the state machine after setup."""
        hass.states.async_set("light.desk", STATE_OFF)
        manager = HassLightManager(hass, ["light.desk", "light.desk", "light.key"])
        manager.async_setup()

        assert manager.entity_ids == ["light.desk", "light.key"]
        assert manager.get("light.key").is_online is False

        hass.states.async_set(
            "light.key", STATE_ON, {"brightness": pct_to_brightness(30)}
        )
        await hass.async_block_till_done()

        key = manager.get("light.key")
        assert key.is_online is True
        assert key.brightness == 30
        assert [d.identity for d in manager.managed_online_devices()] == [
            "light.desk",
            "light.key",
        ]

        manager.cleanup()

    async def test_cleanup_stops_tracking(self, hass: HomeAssistant):
        """After cleanup, cached state is no longer updated."""
        hass.states.async_set("light.desk", STATE_OFF)
        manager = HassLightManager(hass, ["light.desk"])
        manager.async_setup()
        manager.cleanup()

        hass.states.async_set("light.desk", STATE_ON)
        await hass.async_block_till_done()

        assert manager.get("light.desk").is_on is False
        assert manager.get("light.unknown") is None
