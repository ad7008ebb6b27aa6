"""Trigger handlers for camera lights automation.

A trigger watches Home Assistant entities and turns their state changes into
activated/deactivated callbacks, deduplicated so that consumers only ever
see real transitions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable
import logging

from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers.event import async_track_state_change_event

from .const import CAMERA_ACTIVE_STATES

_LOGGER = logging.getLogger(__name__)


class TriggerHandler(ABC):
    """Abstract base class for trigger handlers.

    Each trigger handler monitors specific entities and calls callbacks
    when its trigger condition starts or stops holding.
    """

    def __init__(self, hass: HomeAssistant, config: dict[str, Any]):
        """Initialize the trigger handler.

        Args:
            hass: HomeAssistant instance
            config: Configuration for this trigger
        """
        self.hass = hass
        self.config = config
        self._callbacks: dict[str, list[Callable]] = {
            "activated": [],
            "deactivated": [],
        }
        self._unsubscribers: list[Callable] = []

    @abstractmethod
    def is_active(self) -> bool:
        """Check if the trigger condition currently holds."""

    def on_activated(self, callback: Callable) -> None:
        """Register a callback for when trigger activates."""
        self._callbacks["activated"].append(callback)

    def on_deactivated(self, callback: Callable) -> None:
        """Register a callback for when trigger deactivates."""
        self._callbacks["deactivated"].append(callback)

    def _fire_activated(self) -> None:
        """Fire all activated callbacks."""
        for callback in self._callbacks["activated"]:
            try:
                callback()
            except Exception as err:
                _LOGGER.error("Error in trigger activated callback: %s", err)

    def _fire_deactivated(self) -> None:
        """Fire all deactivated callbacks."""
        for callback in self._callbacks["deactivated"]:
            try:
                callback()
            except Exception as err:
                _LOGGER.error("Error in trigger deactivated callback: %s", err)

    def cleanup(self) -> None:
        """Clean up event listeners and resources."""
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers.clear()

    @abstractmethod
    def get_info(self) -> dict[str, Any]:
        """Get diagnostic information about this trigger."""


class CameraActivityTrigger(TriggerHandler):
    """Trigger handler for camera activity.

    Monitors one or more camera-activity entities (binary sensors that are
    "on" while a camera is in use, or camera entities that are streaming or
    recording). The camera counts as active while any of them is active.
    """

    def __init__(self, hass: HomeAssistant, config: dict[str, Any]):
        """Initialize camera activity trigger.

        Config should contain:
            - entity_ids: List of camera activity entity IDs
        """
        super().__init__(hass, config)
        self.entity_ids: list[str] = list(config.get("entity_ids", []))
        self._last_active: bool | None = None

    @property
    def is_monitoring(self) -> bool:
        """Return True while state changes are being tracked."""
        return bool(self._unsubscribers)

    @callback
    def start(self) -> None:
        """Start tracking the camera entities (no-op if already tracking)."""
        if self.is_monitoring or not self.entity_ids:
            return

        missing = [eid for eid in self.entity_ids if not self.hass.states.get(eid)]
        if missing:
            _LOGGER.warning(
                "Camera entities not yet available: %s (will monitor once they appear)",
                missing,
            )

        self._last_active = self.is_active()
        self._unsubscribers.append(
            async_track_state_change_event(
                self.hass,
                self.entity_ids,
                self._async_camera_changed,
            )
        )
        _LOGGER.info(
            "Camera monitoring started for %d entities", len(self.entity_ids)
        )

    @callback
    def stop(self) -> None:
        """Stop tracking the camera entities."""
        if not self.is_monitoring:
            return
        self.cleanup()
        self._last_active = None
        _LOGGER.info("Camera monitoring stopped")

    @callback
    def _async_camera_changed(self, event: Event) -> None:
        """Handle camera entity state change."""
        new_state = event.data.get("new_state")
        if not new_state:
            return

        active = self.is_active()
        if active == self._last_active:
            return

        self._last_active = active
        if active:
            _LOGGER.debug("Camera activity started on %s", new_state.entity_id)
            self._fire_activated()
        else:
            _LOGGER.debug("Camera activity ended on all entities")
            self._fire_deactivated()

    def is_active(self) -> bool:
        """Check if any camera entity currently reports activity."""
        return any(
            (state := self.hass.states.get(eid)) and state.state in CAMERA_ACTIVE_STATES
            for eid in self.entity_ids
        )

    def get_info(self) -> dict[str, Any]:
        """Get diagnostic information."""
        return {
            "type": "camera_activity",
            "monitoring": self.is_monitoring,
            "entity_ids": self.entity_ids,
            "is_active": self.is_active(),
            "camera_states": {
                eid: state.state if (state := self.hass.states.get(eid)) else "unknown"
                for eid in self.entity_ids
            },
        }
