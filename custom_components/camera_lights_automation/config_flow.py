"""Config flow for the Camera lights automation integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_NAME
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import selector

from .const import (
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
    DOMAIN,
    SETTINGS_KEYS,
)
from .settings import entity_list

_LOGGER = logging.getLogger(__name__)


def get_user_schema(data: dict[str, Any] | None = None) -> vol.Schema:
    """Get the basic user schema with optional default values."""
    camera_default = entity_list(data.get(CONF_CAMERA_ENTITY)) if data else []
    lights_default = entity_list(data.get(CONF_LIGHTS)) if data else []

    return vol.Schema(
        {
            vol.Optional(
                CONF_NAME, default=(data.get(CONF_NAME) if data else None)
            ): str,
            vol.Required(
                CONF_CAMERA_ENTITY,
                default=camera_default,
            ): selector.EntitySelector(
                selector.EntitySelectorConfig(
                    domain=["binary_sensor", "camera"],
                    multiple=True,
                )
            ),
            vol.Required(
                CONF_LIGHTS,
                default=lights_default,
            ): selector.EntitySelector(
                selector.EntitySelectorConfig(domain="light", multiple=True)
            ),
            vol.Optional(
                CONF_DEVICE_TIMEOUT,
                default=data.get(CONF_DEVICE_TIMEOUT, DEFAULT_DEVICE_TIMEOUT)
                if data
                else DEFAULT_DEVICE_TIMEOUT,
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=60)),
        }
    )


def get_settings_schema(data: dict[str, Any] | None = None) -> vol.Schema:
    """Get the automation settings schema."""
    data = data or {}
    return vol.Schema(
        {
            vol.Optional(
                CONF_LIGHTS_ON_WITH_CAMERA,
                default=data.get(
                    CONF_LIGHTS_ON_WITH_CAMERA, DEFAULT_LIGHTS_ON_WITH_CAMERA
                ),
            ): bool,
            vol.Optional(
                CONF_BOOST_BRIGHTNESS,
                default=data.get(CONF_BOOST_BRIGHTNESS, DEFAULT_BOOST_BRIGHTNESS),
            ): bool,
            vol.Optional(
                CONF_BOOST_PERCENT,
                default=data.get(CONF_BOOST_PERCENT, DEFAULT_BOOST_PERCENT),
            ): vol.All(vol.Coerce(int), vol.Range(min=0, max=100)),
        }
    )


STEP_USER_DATA_SCHEMA = get_user_schema()
STEP_SETTINGS_DATA_SCHEMA = get_settings_schema()


async def validate_input(hass: HomeAssistant, data: dict[str, Any]) -> dict[str, Any]:
    """Validate the user input.

    Data has the keys from STEP_USER_DATA_SCHEMA with values provided by the user.
    """
    cameras = entity_list(data.get(CONF_CAMERA_ENTITY))
    lights = entity_list(data.get(CONF_LIGHTS))

    if not cameras or not lights:
        raise InvalidConfiguration("At least one camera entity and one light are required")

    for ent in lights:
        if not hass.states.get(ent):
            raise CannotConnect(f"Light entity {ent} not found")

    for ent in cameras:
        if not hass.states.get(ent):
            raise CannotConnect(f"Camera entity {ent} not found")

    return {"title": data.get(CONF_NAME) or "Camera lights automation"}


def _unique_id(config_data: dict[str, Any]) -> str:
    """Build the unique ID from the name and camera entities."""
    camera_list = sorted(entity_list(config_data.get(CONF_CAMERA_ENTITY)))
    name = config_data.get(CONF_NAME) or DOMAIN
    camera_key = "|".join(camera_list) if camera_list else "no-camera"
    return f"{name}:{camera_key}"


def _split_settings(config: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Separate automation settings (options) from structural data."""
    data = {k: v for k, v in config.items() if k not in SETTINGS_KEYS}
    options = {k: v for k, v in config.items() if k in SETTINGS_KEYS}
    return data, options


class CameraLightsConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Camera lights automation."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the config flow."""
        self._basic_config: dict[str, Any] = {}

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Get the options flow for this handler."""
        return CameraLightsOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}
        if user_input is not None:
            try:
                await validate_input(self.hass, user_input)
                self._basic_config = user_input
                return await self.async_step_settings()
            except CannotConnect:
                errors["base"] = "cannot_connect"
            except InvalidConfiguration:
                errors["base"] = "invalid_config"
            except Exception:
                _LOGGER.exception("Unexpected exception")
                errors["base"] = "unknown"

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def async_step_settings(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the automation settings step."""
        if user_input is not None:
            await self.async_set_unique_id(_unique_id(self._basic_config))
            self._abort_if_unique_id_configured()

            info = await validate_input(self.hass, self._basic_config)
            return self.async_create_entry(
                title=info["title"], data=self._basic_config, options=user_input
            )

        return self.async_show_form(
            step_id="settings",
            data_schema=STEP_SETTINGS_DATA_SCHEMA,
        )

    async def async_step_import(
        self, import_data: dict[str, Any]
    ) -> ConfigFlowResult:
        """Create an entry from YAML configuration."""
        await self.async_set_unique_id(_unique_id(import_data))
        self._abort_if_unique_id_configured()

        data, options = _split_settings(import_data)
        return self.async_create_entry(
            title=data.get(CONF_NAME) or "Camera lights automation",
            data=data,
            options=options,
        )

    async def async_step_reconfigure(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle reconfiguration of cameras, lights and timeout."""
        config_entry = self._get_reconfigure_entry()

        errors: dict[str, str] = {}
        if user_input is not None:
            try:
                await validate_input(self.hass, user_input)
            except CannotConnect:
                errors["base"] = "cannot_connect"
            except InvalidConfiguration:
                errors["base"] = "invalid_config"
            except Exception:
                _LOGGER.exception("Unexpected exception")
                errors["base"] = "unknown"
            else:
                new_unique_id = _unique_id(user_input)
                if config_entry.unique_id != new_unique_id:
                    await self.async_set_unique_id(new_unique_id)
                    self._abort_if_unique_id_configured()

                return self.async_update_reload_and_abort(
                    config_entry,
                    unique_id=new_unique_id,
                    data=user_input,
                    reason="reconfigure_successful",
                )

        return self.async_show_form(
            step_id="reconfigure",
            data_schema=get_user_schema(dict(config_entry.data)),
            errors=errors,
            description_placeholders={"name": config_entry.title},
        )


class CameraLightsOptionsFlow(OptionsFlow):
    """Edit the automation settings of an entry."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the automation settings."""
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        current = {**self.config_entry.data, **self.config_entry.options}
        return self.async_show_form(
            step_id="init",
            data_schema=get_settings_schema(current),
        )


class CannotConnect(HomeAssistantError):
    """Error to indicate a referenced entity does not exist."""


class InvalidConfiguration(HomeAssistantError):
    """Error to indicate there is invalid configuration."""
