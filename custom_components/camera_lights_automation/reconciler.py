"""Decision core for camera lights automation.

The reconciler reacts to two independent event sources, camera activity
transitions and settings change notifications, and turns each event into a
minimal list of device actions. Both handlers are plain synchronous methods:
the caller (the Home Assistant event loop) runs them one at a time, so the
bookkeeping below is only ever mutated from a single decision path.

Bookkeeping reflects intent. It is written when an action is dispatched (or,
for actions that first need a live read, when the device task reports back
through claim/capture), never on completion. A later pass always works from
the current contents, so rapid camera flaps restore whatever is recorded
and then re-apply fresh boosts instead of compounding them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .const import MAX_BRIGHTNESS
from .devices import DeviceManager, LightDevice
from .executor import ActionKind, DeviceAction, DeviceActionExecutor
from .settings import AutomationSettings, SettingsChange, SettingsSnapshotStore
from .tracking import BoostTracker, ControlledLights

_LOGGER = logging.getLogger(__name__)


def boosted_brightness(original: int, boost_percent: int) -> int:
    """Brightness after adding the boost, never above 100."""
    return min(original + boost_percent, MAX_BRIGHTNESS)


class CameraLightsReconciler:
    """Turns camera activity and settings changes into light actions."""

    def __init__(
        self,
        device_manager: DeviceManager,
        settings_source: Callable[[], AutomationSettings],
        executor: DeviceActionExecutor,
    ) -> None:
        """Initialize the reconciler.

        Args:
            device_manager: Owner of the lights
            settings_source: Returns the current settings when called
            executor: Runs the device actions
        """
        self._devices = device_manager
        self._settings_source = settings_source
        self._executor = executor

        self._settings = SettingsSnapshotStore(settings_source())
        self._boost = BoostTracker()
        self._controlled = ControlledLights()
        self._camera_active = False

    @property
    def is_camera_active(self) -> bool:
        return self._camera_active

    @property
    def settings(self) -> AutomationSettings:
        """Most recently observed settings."""
        return self._settings.current

    @property
    def boost_tracker(self) -> BoostTracker:
        return self._boost

    @property
    def controlled_lights(self) -> ControlledLights:
        return self._controlled

    # ========================================================================
    # Event handlers
    # ========================================================================

    def handle_settings_changed(self) -> None:
        """React to a settings change notification.

        The notification does not say what changed; the current settings are
        re-read and compared with the last committed snapshot.
        """
        change = self._settings.observe(self._settings_source())
        if not change.has_changes:
            _LOGGER.debug("Settings notification without relevant changes")
            self._settings.commit()
            return

        _LOGGER.debug(
            "Settings changed: %s -> %s", change.previous.as_dict(), change.current.as_dict()
        )

        if change.lights_on_enabled and self._camera_active:
            self._turn_on_all_lights()
        elif change.lights_on_disabled:
            self._turn_off_controlled_lights()

        if self._camera_active:
            self._apply_boost_change(change)

        self._settings.commit()

    def handle_camera_activity(self, is_active: bool) -> None:
        """React to a camera activity transition."""
        self._camera_active = is_active
        settings = self._settings.current

        if is_active:
            if settings.lights_on_with_camera:
                self._check_and_turn_on_lights()
            if settings.boost_brightness_on_camera:
                self._apply_brightness_boost()
            return

        # Restore first, including lights that are about to be turned off
        if self._boost:
            self._restore_brightness()
        if settings.lights_on_with_camera:
            self._turn_off_controlled_lights()

    def release_all(self) -> None:
        """Undo everything the automation is responsible for.

        Restores recorded boosts and turns off controlled lights without
        changing the cached camera activity.
        """
        if self._boost:
            self._restore_brightness()
        if self._controlled:
            self._turn_off_controlled_lights()

    # ========================================================================
    # Decisions
    # ========================================================================

    def _apply_boost_change(self, change: SettingsChange) -> None:
        """Handle boost transitions while the camera is active."""
        if change.boost_disabled:
            self._restore_brightness()
        elif change.boost_enabled:
            self._apply_brightness_boost()
        elif change.current.boost_brightness_on_camera and change.boost_percent_changed:
            self._recompute_brightness_boost()

    def _turn_on_all_lights(self) -> None:
        """Turn on every managed, online light and mark it as controlled."""
        devices = self._devices.managed_online_devices()
        for device in devices:
            self._controlled.add(device.identity)
        self._executor.dispatch(
            DeviceAction(device=device, kind=ActionKind.TURN_ON) for device in devices
        )
        _LOGGER.info(
            "Turning on %d light(s) due to lights-on-with-camera setting", len(devices)
        )

    def _check_and_turn_on_lights(self) -> None:
        """Turn on managed, online lights that a live read reports as off."""
        devices = self._devices.managed_online_devices()
        self._executor.dispatch(
            DeviceAction(
                device=device,
                kind=ActionKind.CHECK_AND_TURN_ON,
                claim=self._claim_light,
            )
            for device in devices
        )
        _LOGGER.info("Checking %d light(s) due to camera activity", len(devices))

    def _turn_off_controlled_lights(self) -> None:
        """Turn off every light the automation turned on, then forget them."""
        actions = []
        for identity in self._controlled.drain():
            device = self._devices.get(identity)
            if device is None:
                _LOGGER.debug("Controlled light %s no longer exists, skipping", identity)
                continue
            actions.append(DeviceAction(device=device, kind=ActionKind.TURN_OFF))
        self._executor.dispatch(actions)
        if actions:
            _LOGGER.info("Turning off %d controlled light(s)", len(actions))

    def _apply_brightness_boost(self) -> None:
        """Boost every managed, online light from a freshly read brightness."""
        devices = self._devices.managed_online_devices()
        self._executor.dispatch(
            DeviceAction(device=device, kind=ActionKind.BOOST, capture=self._capture_boost)
            for device in devices
        )
        _LOGGER.info(
            "Boosting %d light(s) by %d%%", len(devices), self._settings.current.boost_percent
        )

    def _restore_brightness(self) -> None:
        """Return every boosted light to its recorded brightness and clear the table."""
        actions = []
        for identity, original in self._boost.pop_all().items():
            device = self._devices.get(identity)
            if device is None:
                _LOGGER.debug("Boosted light %s no longer exists, skipping", identity)
                continue
            actions.append(
                DeviceAction(
                    device=device, kind=ActionKind.SET_BRIGHTNESS, brightness=original
                )
            )
        self._executor.dispatch(actions)
        if actions:
            _LOGGER.info("Restoring brightness of %d light(s)", len(actions))

    def _recompute_brightness_boost(self) -> None:
        """Re-apply the boost with the new percentage to already boosted lights."""
        percent = self._settings.current.boost_percent
        actions = []
        for identity, original in self._boost.items():
            device = self._devices.get(identity)
            if device is None:
                _LOGGER.debug("Boosted light %s no longer exists, skipping", identity)
                continue
            target = boosted_brightness(original, percent)
            _LOGGER.debug(
                "Recomputing brightness for %s: %d + %d%% = %d",
                device.name,
                original,
                percent,
                target,
            )
            actions.append(
                DeviceAction(device=device, kind=ActionKind.SET_BRIGHTNESS, brightness=target)
            )
        self._executor.dispatch(actions)

    # ========================================================================
    # Reports from device tasks
    # ========================================================================

    def _claim_light(self, device: LightDevice) -> bool:
        """A device task found the light off; decide whether to turn it on."""
        if not (self._camera_active and self._settings.current.lights_on_with_camera):
            return False
        self._controlled.add(device.identity)
        return True

    def _capture_boost(self, device: LightDevice, live_brightness: int) -> int | None:
        """A device task read the light's brightness; return the boost target."""
        settings = self._settings.current
        if not (self._camera_active and settings.boost_brightness_on_camera):
            return None
        # An off light has no brightness to return to
        if not device.is_on:
            _LOGGER.debug("Not boosting %s: light is off", device.name)
            return None
        original = self._boost.record(device.identity, live_brightness)
        return boosted_brightness(original, settings.boost_percent)

    # ========================================================================
    # Diagnostics
    # ========================================================================

    def get_info(self) -> dict[str, Any]:
        """Get diagnostic information."""
        return {
            "camera_active": self._camera_active,
            "settings": self._settings.current.as_dict(),
            "controlled_lights": self._controlled.as_list(),
            "boosted_lights": self._boost.as_dict(),
        }
