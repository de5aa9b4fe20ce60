"""Keyed locks for stock counters and order transitions.

Stock commits for the same product are serialized through one lock per
product id. A commit touching several products takes their locks in sorted
id order so two commits can never wait on each other. Status changes of one
order are serialized the same way, keyed by order id.

A key's lock only exists while someone holds or waits for it.
"""

from contextlib import contextmanager
from threading import Lock


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = Lock()
        self.users = 0


class KeyedLocks:
    def __init__(self) -> None:
        self._guard = Lock()
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def locked(self, key) -> bool:
        with self._guard:
            entry = self._entries.get(str(key))
            return entry is not None and entry.lock.locked()

    def _checkout(self, key: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, key: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(key) is entry:
                del self._entries[key]

    @contextmanager
    def hold(self, keys):
        """Hold the locks of all given keys for the duration of the block."""
        entries = [(key, self._checkout(key)) for key in sorted({str(k) for k in keys})]
        acquired = []
        try:
            for _, entry in entries:
                entry.lock.acquire()
                acquired.append(entry)
            yield
        finally:
            for entry in reversed(acquired):
                entry.lock.release()
            for key, entry in entries:
                self._checkin(key, entry)

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()


stock_locks = KeyedLocks()
order_locks = KeyedLocks()
