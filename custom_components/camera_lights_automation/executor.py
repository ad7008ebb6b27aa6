"""Concurrent per-device action execution for camera lights automation.

Every action runs as its own task and fails on its own: an unreachable
light is logged and never retried, and never blocks or rolls back the
actions of other lights. Actions on the same light run in dispatch order.

Device tasks do not read or write the automation's bookkeeping. Whatever
they need is put into the DeviceAction at dispatch time, and the only way
back to the decision path is through the claim/capture callbacks.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Coroutine, Iterable

from .devices import DeviceError, LightDevice

_LOGGER = logging.getLogger(__name__)


class ActionKind(Enum):
    """Kinds of device actions."""

    TURN_ON = "turn_on"
    TURN_OFF = "turn_off"
    SET_BRIGHTNESS = "set_brightness"
    CHECK_AND_TURN_ON = "check_and_turn_on"
    BOOST = "boost"


@dataclass(frozen=True)
class DeviceAction:
    """One action to perform against one light.

    Attributes:
        device: The light to act on
        kind: What to do
        brightness: Target percentage for SET_BRIGHTNESS
        claim: For CHECK_AND_TURN_ON; asked once the light is known to be
            off, returns True if the turn-on should go ahead
        capture: For BOOST; given the freshly read brightness, returns the
            boosted target or None if the boost is no longer wanted
    """

    device: LightDevice
    kind: ActionKind
    brightness: int | None = None
    claim: Callable[[LightDevice], bool] | None = None
    capture: Callable[[LightDevice, int], int | None] | None = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one device action."""

    identity: str
    name: str
    kind: ActionKind
    success: bool
    performed: bool = True
    brightness: int | None = None
    error: str | None = None


TaskFactory = Callable[[Coroutine[Any, Any, None], str], "asyncio.Task[None]"]


def _create_loop_task(coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task[None]:
    """Create a task on the running loop."""
    return asyncio.get_running_loop().create_task(coro, name=name)


class DeviceActionExecutor:
    """Runs device actions concurrently and independently."""

    def __init__(self, create_task: TaskFactory | None = None) -> None:
        """Initialize the executor.

        Args:
            create_task: Factory used to schedule each action coroutine
                (defaults to the running loop's create_task)
        """
        self._create_task = create_task or _create_loop_task
        self._tasks: set[asyncio.Task[None]] = set()
        self._device_locks: dict[str, asyncio.Lock] = {}
        self._result_listeners: list[Callable[[ActionResult], None]] = []

        # Statistics for diagnostics
        self.dispatched = 0
        self.succeeded = 0
        self.failed = 0
        self.last_error: str | None = None

    @property
    def pending(self) -> int:
        """Number of actions still in flight."""
        return sum(1 for task in self._tasks if not task.done())

    def add_result_listener(
        self, listener: Callable[[ActionResult], None]
    ) -> Callable[[], None]:
        """Register a listener for action results; returns a remover."""
        self._result_listeners.append(listener)

        def _remove() -> None:
            if listener in self._result_listeners:
                self._result_listeners.remove(listener)

        return _remove

    def dispatch(self, actions: Iterable[DeviceAction]) -> list[asyncio.Task[None]]:
        """Start one task per action and return without waiting."""
        tasks = []
        for action in actions:
            self.dispatched += 1
            task = self._create_task(
                self._async_run(action),
                f"camera_lights_{action.kind.value}_{action.device.identity}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        return tasks

    async def async_drain(self) -> None:
        """Wait until every dispatched action has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            # Done callbacks run on the next loop iteration
            await asyncio.sleep(0)

    async def _async_run(self, action: DeviceAction) -> None:
        """Run one action behind its light's lock and report the outcome."""
        device = action.device
        lock = self._device_locks.setdefault(device.identity, asyncio.Lock())

        async with lock:
            try:
                result = await self._async_perform(action)
            except (DeviceError, TimeoutError) as err:
                _LOGGER.error(
                    "Failed to %s %s: %s",
                    action.kind.value.replace("_", " "),
                    device.name,
                    err,
                )
                result = self._failure(action, str(err))
            except Exception as err:
                _LOGGER.exception(
                    "Unexpected error during %s for %s", action.kind.value, device.name
                )
                result = self._failure(action, str(err))

        if result.success:
            self.succeeded += 1
        else:
            self.failed += 1
            self.last_error = f"{device.name}: {result.error}"

        for listener in list(self._result_listeners):
            try:
                listener(result)
            except Exception as err:
                _LOGGER.error("Error in action result listener: %s", err)

    async def _async_perform(self, action: DeviceAction) -> ActionResult:
        """Perform the action; raises on device failure."""
        device = action.device
        kind = action.kind

        if kind is ActionKind.TURN_ON:
            await device.async_turn_on()
            _LOGGER.info("Turned on device: %s", device.name)
            return self._success(action)

        if kind is ActionKind.TURN_OFF:
            await device.async_turn_off()
            _LOGGER.info("Turned off controlled device: %s", device.name)
            return self._success(action)

        if kind is ActionKind.SET_BRIGHTNESS:
            if action.brightness is None:
                raise ValueError("SET_BRIGHTNESS requires a brightness")
            await device.async_set_brightness(action.brightness)
            _LOGGER.info("Set brightness for %s to %d", device.name, action.brightness)
            return self._success(action, brightness=action.brightness)

        if kind is ActionKind.CHECK_AND_TURN_ON:
            await device.async_refresh_state()
            if device.is_on:
                _LOGGER.info("Device already on: %s", device.name)
                return self._success(action, performed=False)
            if action.claim is not None and not action.claim(device):
                _LOGGER.debug("Turn on of %s is no longer wanted", device.name)
                return self._success(action, performed=False)
            await device.async_turn_on()
            _LOGGER.info("Turned on device: %s", device.name)
            return self._success(action)

        if kind is ActionKind.BOOST:
            await device.async_refresh_state()
            live = device.brightness
            target = (
                action.capture(device, live)
                if action.capture is not None
                else action.brightness
            )
            if target is None:
                _LOGGER.debug("Boost of %s is no longer wanted", device.name)
                return self._success(action, performed=False)
            await device.async_set_brightness(target)
            _LOGGER.info("Boosted brightness for %s: %d -> %d", device.name, live, target)
            return self._success(action, brightness=target)

        raise ValueError(f"Unknown action kind: {kind}")

    @staticmethod
    def _success(
        action: DeviceAction, performed: bool = True, brightness: int | None = None
    ) -> ActionResult:
        return ActionResult(
            identity=action.device.identity,
            name=action.device.name,
            kind=action.kind,
            success=True,
            performed=performed,
            brightness=brightness,
        )

    @staticmethod
    def _failure(action: DeviceAction, error: str) -> ActionResult:
        return ActionResult(
            identity=action.device.identity,
            name=action.device.name,
            kind=action.kind,
            success=False,
            performed=False,
            error=error,
        )

    def get_info(self) -> dict[str, Any]:
        """Get diagnostic information."""
        return {
            "dispatched": self.dispatched,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "pending": self.pending,
            "last_error": self.last_error,
        }
