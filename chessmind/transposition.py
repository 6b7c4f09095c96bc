"""
Transposition table: memoized search results keyed by position hash.

The table has a fixed number of slots. A key maps to slot `key % capacity`
and a store always overwrites whatever the slot held before (no depth- or
age-based replacement policy). A probe only answers when the slot holds the
same 64-bit key, so two positions sharing a slot simply evict each other.
Two different positions with the same full 64-bit key are not detected.

The table is an ordinary object owned by whoever runs the search. A
Searcher gets a fresh one unless a table is injected, which lets a caller
keep one table for a whole game and lets tests start from an empty one.
"""

from dataclasses import dataclass

from chessmind.constants import TT_SIZE


@dataclass(frozen=True, slots=True)
class TTEntry:
    """
    One stored search result.

    Attributes:
        key:      Full 64-bit position hash the entry was stored under.
        value:    White-relative score.
        depth:    Remaining depth the value was searched to. A probe at a
                  greater remaining depth must not use it.
        is_exact: False if the value is only a bound.
    """

    key: int
    value: int
    depth: int
    is_exact: bool = True


class TranspositionTable:
    """
    Fixed-capacity, always-overwrite hash table of TTEntry records.

    Slots are kept in a dict so that memory grows with the number of
    occupied slots, never beyond `capacity` entries.
    """

    def __init__(self, capacity: int = TT_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._slots: dict[int, TTEntry] = {}
        self.probes = 0
        self.hits = 0
        self.stores = 0

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, key: int) -> bool:
        entry = self._slots.get(key % self.capacity)
        return entry is not None and entry.key == key

    def probe(self, key: int) -> TTEntry | None:
        """Return the entry stored under `key`, or None."""
        self.probes += 1
        entry = self._slots.get(key % self.capacity)
        if entry is None or entry.key != key:
            return None
        self.hits += 1
        return entry

    def store(self, key: int, value: int, depth: int, is_exact: bool = True) -> None:
        """Write an entry for `key`, replacing anything in its slot."""
        self._slots[key % self.capacity] = TTEntry(key, value, depth, is_exact)
        self.stores += 1

    def clear(self) -> None:
        self._slots.clear()
        self.probes = self.hits = self.stores = 0

    def hashfull(self) -> int:
        """Occupied slots in permille, as reported by UCI `info hashfull`."""
        return len(self._slots) * 1000 // self.capacity
