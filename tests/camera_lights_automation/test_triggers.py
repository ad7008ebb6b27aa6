"""Tests for the camera activity trigger."""

from __future__ import annotations

from homeassistant.const import STATE_OFF, STATE_ON
from homeassistant.core import HomeAssistant

from custom_components.camera_lights_automation.triggers import CameraActivityTrigger


def _trigger(hass: HomeAssistant, *entity_ids: str):
    trigger = CameraActivityTrigger(hass, {"entity_ids": list(entity_ids)})
    events: list[str] = []
    trigger.on_activated(lambda: events.append("activated"))
    trigger.on_deactivated(lambda: events.append("deactivated"))
    return trigger, events


class TestCameraActivityTrigger:
    """Test CameraActivityTrigger."""

    async def test_start_without_entities_does_nothing(self, hass: HomeAssistant):
        """Nothing is tracked when no entities are configured."""
        trigger, _ = _trigger(hass)
        trigger.start()
        assert trigger.is_monitoring is False

    async def test_active_states(self, hass: HomeAssistant):
        """Binary sensors count when on, cameras when streaming or recording."""
        trigger, _ = _trigger(hass, "binary_sensor.webcam", "camera.front")
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        hass.states.async_set("camera.front", "idle")
        assert trigger.is_active() is False

        hass.states.async_set("camera.front", "streaming")
        assert trigger.is_active() is True

        hass.states.async_set("camera.front", "recording")
        assert trigger.is_active() is True

    async def test_transitions_fire_callbacks(self, hass: HomeAssistant):
        """State changes become activated/deactivated callbacks."""
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        trigger, events = _trigger(hass, "binary_sensor.webcam")
        trigger.start()
        assert trigger.is_monitoring is True

        hass.states.async_set("binary_sensor.webcam", STATE_ON)
        await hass.async_block_till_done()
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        await hass.async_block_till_done()

        assert events == ["activated", "deactivated"]
        trigger.cleanup()

    async def test_duplicate_reports_are_suppressed(self, hass: HomeAssistant):
        """Only real transitions of the combined activity are reported."""
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        hass.states.async_set("binary_sensor.mic_cam", STATE_OFF)
        trigger, events = _trigger(hass, "binary_sensor.webcam", "binary_sensor.mic_cam")
        trigger.start()

        hass.states.async_set("binary_sensor.webcam", STATE_ON)
        await hass.async_block_till_done()
        hass.states.async_set("binary_sensor.mic_cam", STATE_ON)
        await hass.async_block_till_done()
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        await hass.async_block_till_done()
        # Attribute-only update
        hass.states.async_set("binary_sensor.mic_cam", STATE_ON, {"app": "Meet"})
        await hass.async_block_till_done()

        assert events == ["activated"]

        hass.states.async_set("binary_sensor.mic_cam", STATE_OFF)
        await hass.async_block_till_done()
        assert events == ["activated", "deactivated"]
        trigger.cleanup()

    async def test_stop_and_start(self, hass: HomeAssistant):
        """A stopped trigger ignores changes until started again."""
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        trigger, events = _trigger(hass, "binary_sensor.webcam")
        trigger.start()
        trigger.stop()
        assert trigger.is_monitoring is False

        hass.states.async_set("binary_sensor.webcam", STATE_ON)
        await hass.async_block_till_done()
        assert events == []

        # Starting while active adopts the current state without a callback
        trigger.start()
        assert trigger.is_monitoring is True
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        await hass.async_block_till_done()
        assert events == ["deactivated"]
        trigger.stop()

    async def test_callback_errors_are_contained(self, hass: HomeAssistant):
        """A failing callback does not stop the others."""
        hass.states.async_set("binary_sensor.webcam", STATE_OFF)
        trigger, events = _trigger(hass, "binary_sensor.webcam")

        def broken():
            raise RuntimeError("boom")

        trigger._callbacks["activated"].insert(0, broken)
        trigger.start()
        hass.states.async_set("binary_sensor.webcam", STATE_ON)
        await hass.async_block_till_done()

        assert events == ["activated"]
        assert trigger.get_info()["camera_states"] == {"binary_sensor.webcam": "on"}
        trigger.stop()
