"""Selection ledger — the set of map regions the user has marked."""

import logging
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class SelectionChange(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


SelectionListener = Callable[[SelectionChange, str, str], None]


class SelectionLedger:
    """Membership of marked regions, in insertion order.

    Listeners receive (change, region_id, label) after every mutation so the
    selection list and region/border styling can follow. Rendering never
    mutates the ledger.
    """

    def __init__(self) -> None:
        self._members: dict[str, str] = {}
        self._listeners: list[SelectionListener] = []

    def add_listener(self, callback: SelectionListener) -> None:
        self._listeners.append(callback)

    def _notify(self, change: SelectionChange, region_id: str, label: str) -> None:
        logger.debug("%s %s (%s)", change.value, region_id, label)
        for callback in self._listeners:
            callback(change, region_id, label)

    def toggle(self, region_id: str, label: str) -> SelectionChange:
        if region_id in self._members:
            label = self._members.pop(region_id)
            self._notify(SelectionChange.REMOVED, region_id, label)
            return SelectionChange.REMOVED
        self._members[region_id] = label
        self._notify(SelectionChange.ADDED, region_id, label)
        return SelectionChange.ADDED

    def remove(self, region_id: str) -> bool:
        """Remove region_id if present. Returns whether anything changed."""
        if region_id not in self._members:
            return False
        label = self._members.pop(region_id)
        self._notify(SelectionChange.REMOVED, region_id, label)
        return True

    def has(self, region_id: str) -> bool:
        return region_id in self._members

    def label(self, region_id: str) -> str | None:
        return self._members.get(region_id)

    def entries(self) -> list[tuple[str, str]]:
        """(region_id, label) pairs in insertion order."""
        return list(self._members.items())

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._members

    def __len__(self) -> int:
        return len(self._members)
