"""Camera Lights Coordinator wiring Home Assistant to the reconciler."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import (
    CONF_CAMERA_ENTITY,
    CONF_DEVICE_TIMEOUT,
    CONF_LIGHTS,
    DEFAULT_DEVICE_TIMEOUT,
    DOMAIN,
    MAX_EVENTS,
    SETTINGS_KEYS,
)
from .executor import ActionResult, DeviceActionExecutor
from .light_devices import HassLightManager
from .reconciler import CameraLightsReconciler
from .settings import AutomationSettings, entity_list
from .triggers import CameraActivityTrigger

_LOGGER = logging.getLogger(__name__)


class CameraLightsCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Camera lights coordinator.

    Owns the camera trigger, the light manager, the action executor and the
    reconciler, and feeds camera transitions and settings notifications into
    the reconciler from the event loop.
    """

    def __init__(self, hass: HomeAssistant, config_entry: ConfigEntry) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_camera",
            update_interval=None,
            config_entry=config_entry,
        )

        self.config_entry = config_entry
        self._load_config()

        self.light_manager = HassLightManager(
            hass, self._lights, timeout=self.device_timeout
        )
        self.executor = DeviceActionExecutor(create_task=self._create_action_task)
        self.reconciler = CameraLightsReconciler(
            self.light_manager, self.read_settings, self.executor
        )
        self.camera_trigger = CameraActivityTrigger(
            hass, {"entity_ids": self.camera_entities}
        )
        self.camera_trigger.on_activated(self._handle_camera_on)
        self.camera_trigger.on_deactivated(self._handle_camera_off)

        self._unsubscribers: list = []
        self.data = {}

        # Event tracking for diagnostics
        self._events: list[dict[str, Any]] = []
        self._max_events = MAX_EVENTS
        self._last_event_message: str = "Initialized"

    def _load_config(self) -> None:
        """Load configuration."""
        data = self.config_entry.data
        self.camera_entities = entity_list(data.get(CONF_CAMERA_ENTITY))
        self._lights = entity_list(data.get(CONF_LIGHTS))
        self.device_timeout = data.get(CONF_DEVICE_TIMEOUT, DEFAULT_DEVICE_TIMEOUT)

    def read_settings(self) -> AutomationSettings:
        """Current automation settings; options take precedence over data."""
        return AutomationSettings.from_mapping(
            self.config_entry.data, self.config_entry.options
        )

    @callback
    def _create_action_task(self, coro, name: str):
        """Schedule a device action as a tracked Home Assistant task."""
        return self.hass.async_create_task(coro, name)

    async def async_setup_listeners(self) -> None:
        """Set up the coordinator - wire modules together."""
        start_time = time.monotonic()

        self.light_manager.async_setup()
        self._unsubscribers.append(
            self.executor.add_result_listener(self._handle_action_result)
        )

        if not self.camera_entities:
            _LOGGER.warning("No camera activity entities configured")
        self._update_monitoring()
        self._update_data()

        elapsed = time.monotonic() - start_time
        settings = self.reconciler.settings
        _LOGGER.info(
            "Camera Lights Automation initialized: %.2fs | Lights: %d | Cameras: %d | "
            "Lights on with camera: %s | Boost: %s (%d%%)",
            elapsed,
            len(self._lights),
            len(self.camera_entities),
            settings.lights_on_with_camera,
            settings.boost_brightness_on_camera,
            settings.boost_percent,
        )

    # ========================================================================
    # Event Handlers
    # ========================================================================

    def _handle_camera_on(self) -> None:
        """Handle camera activity started."""
        try:
            _LOGGER.info("Camera ON")
            self._log_event("camera_on", {"settings": self.reconciler.settings.as_dict()})
            self.reconciler.handle_camera_activity(True)
            self._update_data()
        except Exception:
            _LOGGER.exception("Error in camera ON handler")

    def _handle_camera_off(self) -> None:
        """Handle camera activity ended."""
        try:
            _LOGGER.info("Camera OFF")
            self._log_event(
                "camera_off",
                {
                    "boosted_lights": len(self.reconciler.boost_tracker),
                    "controlled_lights": len(self.reconciler.controlled_lights),
                },
            )
            self.reconciler.handle_camera_activity(False)
            self._update_data()
        except Exception:
            _LOGGER.exception("Error in camera OFF handler")

    async def async_handle_settings_changed(self) -> None:
        """Handle a config entry update (settings change notification)."""
        try:
            previous = self.reconciler.settings
            self.reconciler.handle_settings_changed()
            current = self.reconciler.settings
            if current != previous:
                self._log_event(
                    "settings_changed",
                    {"previous": previous.as_dict(), "current": current.as_dict()},
                )
            self._update_monitoring()
            self._update_data()
        except Exception:
            _LOGGER.exception("Error handling settings change")

    @callback
    def _handle_action_result(self, result: ActionResult) -> None:
        """Record failed device actions for diagnostics."""
        if not result.success:
            self._log_event(
                "action_failed",
                {
                    "light": result.identity,
                    "action": result.kind.value,
                    "error": result.error,
                },
            )
        self._update_data()

    # ========================================================================
    # Settings
    # ========================================================================

    async def async_set_setting(self, key: str, value: Any) -> None:
        """Persist one automation setting to the entry options.

        The entry update listener then delivers the change notification.
        """
        if key not in SETTINGS_KEYS:
            raise ValueError(f"Unknown automation setting: {key}")
        options = {**self.config_entry.options, key: value}
        self.hass.config_entries.async_update_entry(self.config_entry, options=options)

    @property
    def needs_monitoring(self) -> bool:
        """Camera activity is only watched while an automation uses it."""
        settings = self.reconciler.settings
        return settings.lights_on_with_camera or settings.boost_brightness_on_camera

    @callback
    def _update_monitoring(self) -> None:
        """Start or stop camera monitoring to match the settings."""
        if self.needs_monitoring:
            if self.camera_trigger.is_monitoring:
                return
            self.camera_trigger.start()
            if self.camera_trigger.is_active() != self.reconciler.is_camera_active:
                if self.camera_trigger.is_active():
                    self._handle_camera_on()
                else:
                    self._handle_camera_off()
        elif self.camera_trigger.is_monitoring:
            self.camera_trigger.stop()
            if self.reconciler.is_camera_active:
                self._handle_camera_off()

    async def async_restore_lights(self) -> None:
        """Undo all boosts and turn off lights the automation turned on."""
        _LOGGER.info("Restoring lights controlled by camera automation")
        self._log_event(
            "restore_lights",
            {
                "boosted_lights": len(self.reconciler.boost_tracker),
                "controlled_lights": len(self.reconciler.controlled_lights),
            },
        )
        self.reconciler.release_all()
        self._update_data()

    async def async_release_lights(self) -> None:
        """Undo the automation's changes and wait for the commands to finish.

        Called at unload; the bookkeeping does not survive a reload.
        """
        if self.reconciler.boost_tracker or self.reconciler.controlled_lights:
            _LOGGER.info("Releasing lights controlled by camera automation")
            self.reconciler.release_all()
        await self.executor.async_drain()

    # ========================================================================
    # Event Tracking (for diagnostics)
    # ========================================================================

    def _log_event(self, event_type: str, details: dict[str, Any]) -> None:
        """Log an event for diagnostics."""
        event = {
            "timestamp": datetime.now().isoformat(),
            "type": event_type,
            **details,
        }
        self._events.append(event)
        self._last_event_message = event_type.replace("_", " ").capitalize()

        # Keep only last N events
        if len(self._events) > self._max_events:
            self._events.pop(0)

        _LOGGER.debug("Event logged: %s - %s", event_type, details)

    def get_diagnostic_data(self) -> dict[str, Any]:
        """Get diagnostic data for sensor."""
        reconciler_info = self.reconciler.get_info()
        return {
            "camera_active": reconciler_info["camera_active"],
            "camera_monitoring": self.camera_trigger.is_monitoring,
            "settings": reconciler_info["settings"],
            "controlled_lights": reconciler_info["controlled_lights"],
            "boosted_lights": reconciler_info["boosted_lights"],
            "actions": self.executor.get_info(),
            "lights": self.light_manager.get_info(),
            "recent_events": list(self._events[-10:]),
            "last_event_message": self._last_event_message,
        }

    # ========================================================================
    # Data Update
    # ========================================================================

    def _update_data(self) -> None:
        """Update coordinator data."""
        self.data = {
            "camera_active": self.reconciler.is_camera_active,
            "controlled_lights": len(self.reconciler.controlled_lights),
            "boosted_lights": len(self.reconciler.boost_tracker),
            **self.reconciler.settings.as_dict(),
        }
        self.async_update_listeners()

    # ========================================================================
    # Cleanup
    # ========================================================================

    def async_cleanup_listeners(self) -> None:
        """Clean up listeners together with the reconciler's subscriptions."""
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers.clear()
        self.camera_trigger.cleanup()
        self.light_manager.cleanup()

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def lights(self) -> list[str]:
        """Return list of all configured light entity IDs."""
        return list(self._lights)

    @property
    def is_camera_active(self) -> bool:
        return self.reconciler.is_camera_active

    @property
    def lights_on_with_camera(self) -> bool:
        return self.reconciler.settings.lights_on_with_camera

    @property
    def boost_brightness_on_camera(self) -> bool:
        return self.reconciler.settings.boost_brightness_on_camera

    @property
    def boost_percent(self) -> int:
        return self.reconciler.settings.boost_percent

