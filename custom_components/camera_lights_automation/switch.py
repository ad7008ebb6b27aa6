"""Switch platform for Camera Lights Automation settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from homeassistant.components.switch import SwitchEntity, SwitchEntityDescription
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import CONF_BOOST_BRIGHTNESS, CONF_LIGHTS_ON_WITH_CAMERA
from .entity import CameraLightsEntity

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CameraLightsSwitchDescription(SwitchEntityDescription):
    """Describes a settings switch."""

    setting: str
    attribute: str


SWITCH_DESCRIPTIONS = (
    CameraLightsSwitchDescription(
        key="lights_on_with_camera",
        name="Lights on with camera",
        icon="mdi:lightbulb-auto",
        entity_category=EntityCategory.CONFIG,
        setting=CONF_LIGHTS_ON_WITH_CAMERA,
        attribute="lights_on_with_camera",
    ),
    CameraLightsSwitchDescription(
        key="boost_brightness_on_camera",
        name="Boost brightness on camera",
        icon="mdi:brightness-7",
        entity_category=EntityCategory.CONFIG,
        setting=CONF_BOOST_BRIGHTNESS,
        attribute="boost_brightness_on_camera",
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the settings switches from a config entry."""
    coordinator = config_entry.runtime_data

    async_add_entities(
        CameraLightsSettingSwitch(
            coordinator=coordinator,
            config_entry=config_entry,
            entity_description=description,
        )
        for description in SWITCH_DESCRIPTIONS
    )


class CameraLightsSettingSwitch(CameraLightsEntity, SwitchEntity):
    """Switch that toggles one boolean automation setting."""

    entity_description: CameraLightsSwitchDescription

    @property
    def is_on(self) -> bool:
        """Return True if the setting is enabled."""
        return bool(getattr(self._coordinator, self.entity_description.attribute))

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Enable the setting."""
        _LOGGER.debug("%s turned on", self.entity_description.key)
        await self._coordinator.async_set_setting(self.entity_description.setting, True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Disable the setting."""
        _LOGGER.debug("%s turned off", self.entity_description.key)
        await self._coordinator.async_set_setting(self.entity_description.setting, False)
