"""Bookkeeping of what the automation is responsible for undoing.

Both structures are owned by the reconciler and only mutated from the
event loop's decision path. Device tasks never touch them directly.
"""

from __future__ import annotations

from typing import Iterator


class BoostTracker:
    """Original brightness per light, recorded before a boost is applied."""

    def __init__(self) -> None:
        """Initialize an empty table."""
        self._originals: dict[str, int] = {}

    def record(self, identity: str, brightness: int) -> int:
        """Record the pre-boost brightness of a light.

        An existing entry is never overwritten: the first captured value is
        the one a restore must return to, even if the light has been
        boosted again since.

        Returns:
            The original brightness to compute boosts from
        """
        return self._originals.setdefault(identity, brightness)

    def original(self, identity: str) -> int | None:
        """Get the recorded original brightness of a light."""
        return self._originals.get(identity)

    def items(self) -> list[tuple[str, int]]:
        """Snapshot of (identity, original brightness) pairs."""
        return list(self._originals.items())

    def pop_all(self) -> dict[str, int]:
        """Return all entries and clear the table."""
        originals = self._originals
        self._originals = {}
        return originals

    def discard(self, identity: str) -> None:
        """Forget a single light."""
        self._originals.pop(identity, None)

    def as_dict(self) -> dict[str, int]:
        """Copy of the table for diagnostics."""
        return dict(self._originals)

    def __contains__(self, identity: object) -> bool:
        return identity in self._originals

    def __len__(self) -> int:
        return len(self._originals)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._originals))


class ControlledLights:
    """Lights the automation powered on because of camera activity.

    Lights that were already on when the camera became active are never
    members, so ending camera activity never turns off a manually
    activated light.
    """

    def __init__(self) -> None:
        """Initialize an empty set."""
        self._identities: set[str] = set()

    def add(self, identity: str) -> None:
        self._identities.add(identity)

    def discard(self, identity: str) -> None:
        self._identities.discard(identity)

    def drain(self) -> list[str]:
        """Return all members (sorted) and clear the set."""
        identities = sorted(self._identities)
        self._identities.clear()
        return identities

    def as_list(self) -> list[str]:
        return sorted(self._identities)

    def __contains__(self, identity: object) -> bool:
        return identity in self._identities

    def __len__(self) -> int:
        return len(self._identities)

    def __iter__(self) -> Iterator[str]:
        return iter(self.as_list())
