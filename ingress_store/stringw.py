"""String values that remember their previous value and change status."""

from __future__ import annotations

from dataclasses import dataclass

from .status import Status


@dataclass
class StringW:
    """A string value with the value it replaced and a change status."""

    value: str = ""
    old_value: str = ""
    status: Status = Status.EMPTY

    def equal(self, other: StringW) -> bool:
        """Compare only the current values."""
        return self.value == other.value


class MapStringW(dict):
    """Named StringW values whose statuses track differences to an older map."""

    def get_value(self, name: str) -> StringW:
        """Return the named value; raise KeyError when it is missing."""
        try:
            return self[name]
        except KeyError:
            raise KeyError(f"stringW '{name}' does not exist") from None

    def __str__(self) -> str:
        return "[" + ", ".join(self) + "]"

    def set_status(self, old: MapStringW) -> bool:
        """Mark items added, modified or deleted relative to ``old``.

        Deleted items are taken over from ``old``. Return whether anything differs.
        """
        different = False
        for name, current in self.items():
            previous = old.get(name)
            if previous is None:
                current.status = Status.ADDED
                different = True
            elif current.value != previous.value:
                current.status = Status.MODIFIED
                current.old_value = previous.value
                different = True
            else:
                current.status = Status.EMPTY
        for name, previous in old.items():
            if name not in self:
                previous.status = Status.DELETED
                previous.old_value = previous.value
                self[name] = previous
                different = True
        return different

    def set_status_state(self, state: Status) -> None:
        """Give every item ``state`` and forget old values."""
        for current in self.values():
            current.status = state
            current.old_value = ""

    def clean(self) -> None:
        """Drop deleted items and reset the status of the rest."""
        for name in [name for name, item in self.items() if item.status is Status.DELETED]:
            del self[name]
        self.set_status_state(Status.EMPTY)

    def clone(self) -> MapStringW:
        """Return a copy holding copies of every item."""
        return MapStringW(
            (name, StringW(item.value, item.old_value, item.status)) for name, item in self.items()
        )

    def equal(self, other: MapStringW) -> bool:
        """Compare names and current values."""
        if len(self) != len(other):
            return False
        return all(name in other and item.equal(other[name]) for name, item in self.items())