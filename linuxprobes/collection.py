"""A small dictionary that counts occurrences of string keys."""

from __future__ import annotations


class Counter:
    """Count string keys, remembering the order in which they first appeared."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._elements = 0

    def put(self, key: str, increment: int = 1) -> int:
        """Add ``increment`` to the count of ``key`` and return the new count."""
        self._counts[key] = self._counts.get(key, 0) + increment
        self._elements += 1
        return self._counts[key]

    def lookup(self, key: str) -> int | None:
        """Return the count of ``key``, or None if it was never stored."""
        return self._counts.get(key)

    def keys(self) -> list[str]:
        """Return the stored keys in insertion order."""
        return list(self._counts)

    def elements(self) -> int:
        """Return how many times ``put`` has been called."""
        return self._elements

    def unique_elements(self) -> int:
        """Return the number of distinct keys."""
        return len(self._counts)

    def items(self) -> list[tuple[str, int]]:
        """Return (key, count) pairs in insertion order."""
        return list(self._counts.items())

    def __contains__(self, key: object) -> bool:
        return key in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __iter__(self):
        return iter(self._counts)