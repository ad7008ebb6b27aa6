"""Fixtures for Camera Lights Automation tests."""

from __future__ import annotations

from typing import Any

import pytest
from homeassistant.const import CONF_NAME, STATE_OFF, STATE_ON
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.camera_lights_automation.const import (
    CONF_BOOST_BRIGHTNESS,
    CONF_BOOST_PERCENT,
    CONF_CAMERA_ENTITY,
    CONF_DEVICE_TIMEOUT,
    CONF_LIGHTS,
    CONF_LIGHTS_ON_WITH_CAMERA,
    DOMAIN,
)
from custom_components.camera_lights_automation.settings import AutomationSettings

from .common import (
    CAMERA,
    DESK_LIGHT,
    KEY_LIGHT,
    EngineHarness,
    FakeLight,
    async_mock_light_services,
    pct_to_brightness,
)


@pytest.fixture
def make_engine():
    """Return a factory building an EngineHarness."""

    def _make(lights: list[FakeLight], **settings: Any) -> EngineHarness:
        return EngineHarness(lights, AutomationSettings(**settings))

    return _make


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Return structural configuration data."""
    return {
        CONF_NAME: "Office",
        CONF_CAMERA_ENTITY: [CAMERA],
        CONF_LIGHTS: [DESK_LIGHT, KEY_LIGHT],
        CONF_DEVICE_TIMEOUT: 5,
    }


@pytest.fixture
def config_options() -> dict[str, Any]:
    """Return automation settings stored in the entry options."""
    return {
        CONF_LIGHTS_ON_WITH_CAMERA: True,
        CONF_BOOST_BRIGHTNESS: True,
        CONF_BOOST_PERCENT: 20,
    }


@pytest.fixture
def config_entry(
    config_data: dict[str, Any], config_options: dict[str, Any]
) -> MockConfigEntry:
    """Return a mock config entry for the Office automation."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="Office",
        data=config_data,
        options=config_options,
        entry_id="office_entry",
    )


@pytest.fixture
def office_states(hass: HomeAssistant) -> None:
    """Camera idle, desk light off, key light on at 40%."""
    hass.states.async_set(CAMERA, STATE_OFF)
    hass.states.async_set(DESK_LIGHT, STATE_OFF, {"friendly_name": "Desk"})
    hass.states.async_set(
        KEY_LIGHT,
        STATE_ON,
        {"friendly_name": "Key", "brightness": pct_to_brightness(40)},
    )


@pytest.fixture
async def setup_entry(hass: HomeAssistant, office_states, config_entry):
    """Set up the integration and mock the light services."""
    config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(config_entry.entry_id)
    await hass.async_block_till_done()
    coordinator = config_entry.runtime_data
    calls = async_mock_light_services(hass)
    yield config_entry, calls
    coordinator.async_cleanup_listeners()
