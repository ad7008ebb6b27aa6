"""The Camera lights automation integration."""

from __future__ import annotations

import logging

import voluptuous as vol
from homeassistant.config_entries import ConfigEntry, ConfigEntryState, SOURCE_IMPORT
from homeassistant.const import Platform, CONF_NAME
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.helpers import config_validation as cv

from .const import (
    DOMAIN,
    CONF_BOOST_BRIGHTNESS,
    CONF_BOOST_PERCENT,
    CONF_CAMERA_ENTITY,
    CONF_DEVICE_TIMEOUT,
    CONF_LIGHTS,
    CONF_LIGHTS_ON_WITH_CAMERA,
    DEFAULT_BOOST_BRIGHTNESS,
    DEFAULT_BOOST_PERCENT,
    DEFAULT_DEVICE_TIMEOUT,
    DEFAULT_LIGHTS_ON_WITH_CAMERA,
    SERVICE_RESTORE_LIGHTS,
)
from .camera_coordinator import CameraLightsCoordinator

_LOGGER = logging.getLogger(__name__)

_PLATFORMS: list[Platform] = [Platform.NUMBER, Platform.SENSOR, Platform.SWITCH]

# YAML configuration schema
AUTOMATION_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME): cv.string,
        vol.Required(CONF_CAMERA_ENTITY): cv.entity_ids,
        vol.Required(CONF_LIGHTS): cv.entity_ids,
        vol.Optional(
            CONF_LIGHTS_ON_WITH_CAMERA, default=DEFAULT_LIGHTS_ON_WITH_CAMERA
        ): cv.boolean,
        vol.Optional(
            CONF_BOOST_BRIGHTNESS, default=DEFAULT_BOOST_BRIGHTNESS
        ): cv.boolean,
        vol.Optional(CONF_BOOST_PERCENT, default=DEFAULT_BOOST_PERCENT): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=100)
        ),
        vol.Optional(CONF_DEVICE_TIMEOUT, default=DEFAULT_DEVICE_TIMEOUT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=60)
        ),
    }
)

CONFIG_SCHEMA = vol.Schema(
    {DOMAIN: vol.All(cv.ensure_list, [AUTOMATION_SCHEMA])},
    extra=vol.ALLOW_EXTRA,
)

SERVICE_RESTORE_SCHEMA = vol.Schema(
    {
        vol.Required("config_entry_id"): cv.string,
    }
)


async def async_setup(hass: HomeAssistant, config: dict) -> bool:
    """Set up the Camera Lights Automation component from YAML."""
    if DOMAIN not in config:
        return True

    for automation_config in config[DOMAIN]:
        name = automation_config[CONF_NAME]

        existing_entries = hass.config_entries.async_entries(DOMAIN)
        if any(entry.title == name for entry in existing_entries):
            _LOGGER.info(
                "Camera Lights Automation '%s' already exists, skipping YAML import",
                name,
            )
            continue

        _LOGGER.info("Importing Camera Lights Automation '%s' from YAML", name)
        hass.async_create_task(
            hass.config_entries.flow.async_init(
                DOMAIN,
                context={"source": SOURCE_IMPORT},
                data=dict(automation_config),
            )
        )

    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Camera lights automation from a config entry."""
    coordinator = CameraLightsCoordinator(hass, entry)
    entry.runtime_data = coordinator

    await coordinator.async_setup_listeners()

    await hass.config_entries.async_forward_entry_setups(entry, _PLATFORMS)

    # Option changes are the settings change notifications
    entry.async_on_unload(entry.add_update_listener(_async_entry_updated))

    async def handle_restore_lights(call: ServiceCall) -> None:
        """Handle restore lights service call."""
        target = hass.config_entries.async_get_entry(call.data["config_entry_id"])
        if (
            target is None
            or target.domain != DOMAIN
            or target.state is not ConfigEntryState.LOADED
        ):
            _LOGGER.warning(
                "restore_lights called for unknown entry %s",
                call.data["config_entry_id"],
            )
            return
        await target.runtime_data.async_restore_lights()

    hass.services.async_register(
        DOMAIN,
        SERVICE_RESTORE_LIGHTS,
        handle_restore_lights,
        schema=SERVICE_RESTORE_SCHEMA,
    )

    return True


async def _async_entry_updated(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Forward an entry update to the coordinator."""
    coordinator: CameraLightsCoordinator | None = getattr(entry, "runtime_data", None)
    if coordinator is not None:
        await coordinator.async_handle_settings_changed()


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    if hasattr(entry, "runtime_data") and entry.runtime_data:
        coordinator = entry.runtime_data
        await coordinator.async_release_lights()
        coordinator.async_cleanup_listeners()

    # Remove service if this was the last loaded entry
    if not [
        other
        for other in hass.config_entries.async_entries(DOMAIN)
        if other.entry_id != entry.entry_id
        and other.state is ConfigEntryState.LOADED
    ]:
        hass.services.async_remove(DOMAIN, SERVICE_RESTORE_LIGHTS)

    return await hass.config_entries.async_unload_platforms(entry, _PLATFORMS)
