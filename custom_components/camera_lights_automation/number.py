"""Number platform for Camera Lights Automation settings."""

from __future__ import annotations

import logging

from homeassistant.components.number import (
    NumberEntity,
    NumberEntityDescription,
    NumberMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import CONF_BOOST_PERCENT, MAX_BRIGHTNESS
from .entity import CameraLightsEntity

_LOGGER = logging.getLogger(__name__)

NUMBER_DESCRIPTION = NumberEntityDescription(
    key="camera_brightness_boost",
    name="Camera brightness boost",
    icon="mdi:brightness-percent",
    entity_category=EntityCategory.CONFIG,
    native_min_value=0,
    native_max_value=MAX_BRIGHTNESS,
    native_step=1,
    native_unit_of_measurement=PERCENTAGE,
    mode=NumberMode.SLIDER,
)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the number entities from a config entry."""
    coordinator = config_entry.runtime_data

    async_add_entities(
        [
            BoostPercentNumber(
                coordinator=coordinator,
                config_entry=config_entry,
                entity_description=NUMBER_DESCRIPTION,
            )
        ]
    )


class BoostPercentNumber(CameraLightsEntity, NumberEntity):
    """Number entity controlling the brightness boost percentage."""

    @property
    def native_value(self) -> float:
        """Return the current boost percentage."""
        return self._coordinator.boost_percent

    async def async_set_native_value(self, value: float) -> None:
        """Set the boost percentage."""
        _LOGGER.debug("Boost percent set to: %s", value)
        await self._coordinator.async_set_setting(CONF_BOOST_PERCENT, int(value))
