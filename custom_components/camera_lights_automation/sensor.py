"""Sensor platform for Camera Lights Automation integration.

This module exposes a single diagnostic sensor for the camera-triggered
lighting automation:

Core Status:
- Camera activity as seen by the automation (active / idle)
- Whether camera monitoring is currently running

Debugging Info:
- Current automation settings
- Lights turned on by the automation
- Boosted lights with their original brightness
- Device action statistics and recent events
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorEntityDescription
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .entity import CameraLightsEntity

STATE_ACTIVE = "active"
STATE_IDLE = "idle"

SENSOR_DESCRIPTION = SensorEntityDescription(
    key="camera_automation",
    name="Camera automation",
    icon="mdi:webcam",
    entity_category=EntityCategory.DIAGNOSTIC,
)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities."""
    coordinator = config_entry.runtime_data

    async_add_entities(
        [
            CameraLightsDiagnosticSensor(
                coordinator=coordinator,
                config_entry=config_entry,
                entity_description=SENSOR_DESCRIPTION,
            ),
        ]
    )


class CameraLightsDiagnosticSensor(CameraLightsEntity, SensorEntity):
    """Diagnostic sensor exposing the automation's bookkeeping."""

    @property
    def native_value(self) -> str:
        """Return camera activity as seen by the automation."""
        return STATE_ACTIVE if self._coordinator.is_camera_active else STATE_IDLE

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return diagnostic data."""
        diagnostic_data = self._coordinator.get_diagnostic_data()
        settings = diagnostic_data.get("settings", {})

        return {
            "camera_monitoring": diagnostic_data.get("camera_monitoring"),
            # Settings
            "lights_on_with_camera": settings.get("lights_on_with_camera"),
            "boost_brightness_on_camera": settings.get("boost_brightness_on_camera"),
            "boost_percent": settings.get("boost_percent"),
            # Bookkeeping
            "controlled_lights": diagnostic_data.get("controlled_lights", []),
            "boosted_lights": diagnostic_data.get("boosted_lights", {}),
            # Device actions
            "actions": diagnostic_data.get("actions", {}),
            "last_event": diagnostic_data.get("last_event_message"),
            "recent_events": diagnostic_data.get("recent_events", []),
        }
