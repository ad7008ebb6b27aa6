"""Settings snapshots for camera lights automation.

The engine does not observe settings properties directly. Every settings
change notification produces a new AutomationSettings value which is diffed
against the last committed snapshot, so that a notification caused by an
unrelated edit produces no device actions.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from .const import (
    CONF_BOOST_BRIGHTNESS,
    CONF_BOOST_PERCENT,
    CONF_LIGHTS_ON_WITH_CAMERA,
    DEFAULT_BOOST_BRIGHTNESS,
    DEFAULT_BOOST_PERCENT,
    DEFAULT_LIGHTS_ON_WITH_CAMERA,
    MAX_BRIGHTNESS,
)


def entity_list(value: Any) -> list[str]:
    """Normalize a configured entity or entity list to a list of entity IDs."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value]
    return []


@dataclass(frozen=True)
class AutomationSettings:
    """Automation-relevant settings at one point in time."""

    lights_on_with_camera: bool = DEFAULT_LIGHTS_ON_WITH_CAMERA
    boost_brightness_on_camera: bool = DEFAULT_BOOST_BRIGHTNESS
    boost_percent: int = DEFAULT_BOOST_PERCENT

    def __post_init__(self) -> None:
        """Keep the boost percentage within 0-100."""
        object.__setattr__(
            self, "boost_percent", max(0, min(int(self.boost_percent), MAX_BRIGHTNESS))
        )

    @classmethod
    def from_mapping(cls, *sources: Mapping[str, Any]) -> AutomationSettings:
        """Build settings from config mappings; later sources take precedence."""
        merged: dict[str, Any] = {}
        for source in sources:
            merged.update(source or {})

        return cls(
            lights_on_with_camera=bool(
                merged.get(CONF_LIGHTS_ON_WITH_CAMERA, DEFAULT_LIGHTS_ON_WITH_CAMERA)
            ),
            boost_brightness_on_camera=bool(
                merged.get(CONF_BOOST_BRIGHTNESS, DEFAULT_BOOST_BRIGHTNESS)
            ),
            boost_percent=merged.get(CONF_BOOST_PERCENT, DEFAULT_BOOST_PERCENT),
        )

    def as_dict(self) -> dict[str, Any]:
        """Return the settings as a plain dict."""
        return asdict(self)


@dataclass(frozen=True)
class SettingsChange:
    """Difference between the previous and the current settings."""

    previous: AutomationSettings
    current: AutomationSettings

    @property
    def lights_on_changed(self) -> bool:
        return self.previous.lights_on_with_camera != self.current.lights_on_with_camera

    @property
    def lights_on_enabled(self) -> bool:
        return self.lights_on_changed and self.current.lights_on_with_camera

    @property
    def lights_on_disabled(self) -> bool:
        return self.lights_on_changed and not self.current.lights_on_with_camera

    @property
    def boost_enabled(self) -> bool:
        return (
            not self.previous.boost_brightness_on_camera
            and self.current.boost_brightness_on_camera
        )

    @property
    def boost_disabled(self) -> bool:
        return (
            self.previous.boost_brightness_on_camera
            and not self.current.boost_brightness_on_camera
        )

    @property
    def boost_percent_changed(self) -> bool:
        return self.previous.boost_percent != self.current.boost_percent

    @property
    def has_changes(self) -> bool:
        return self.previous != self.current


class SettingsSnapshotStore:
    """Holds the most recently observed and the last committed settings.

    observe() records a new snapshot and returns its diff against the
    committed one; commit() makes the observed snapshot the new baseline.
    A reconciliation pass calls commit() only after it has acted on the
    diff, so every transition is seen exactly once.
    """

    def __init__(self, initial: AutomationSettings | None = None) -> None:
        """Initialize the store with the settings present at startup."""
        initial = initial or AutomationSettings()
        self._current = initial
        self._previous = initial

    @property
    def current(self) -> AutomationSettings:
        """Most recently observed settings."""
        return self._current

    @property
    def previous(self) -> AutomationSettings:
        """Last committed settings."""
        return self._previous

    def observe(self, settings: AutomationSettings) -> SettingsChange:
        """Record newly observed settings and diff them against the baseline."""
        self._current = settings
        return SettingsChange(previous=self._previous, current=settings)

    def commit(self) -> None:
        """Make the observed settings the baseline for the next diff."""
        self._previous = self._current
