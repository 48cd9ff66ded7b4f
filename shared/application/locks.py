"""
Keyed Locks

In-process mutual exclusion per key (per unit, per parent resource,
per registration number). Different keys never block each other.

Strategy (together with the unit of work):
1. Acquire the key lock(s) in this process
2. Open the transaction and re-read the row with SELECT FOR UPDATE,
   which serializes writers running in other processes on PostgreSQL
3. Commit, then release the key lock(s)

SQLite ignores SELECT FOR UPDATE, so step 1 is what serializes
check-then-act sequences in a single-process deployment and in tests.
"""

from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List
import logging
import threading

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ('lock', 'holders')

    def __init__(self):
        self.lock = threading.RLock()
        self.holders = 0


class KeyedLock:
    """
    Registry of one lock per key

    Entries are created on first use and dropped once no thread holds or
    waits for them, so the registry does not grow with the catalog.
    Several keys are always acquired in sorted order to avoid deadlocks.
    Locks are reentrant: a thread holding a parent key may enter another
    block for the same key (catalog operation -> integrity coordinator).
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: Dict[Hashable, _Entry] = {}

    def _checkout(self, key: Hashable) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
            return entry

    def _checkin(self, key: Hashable, entry: _Entry):
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0:
                self._entries.pop(key, None)

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        """Hold the locks for all given keys for the duration of the block"""
        ordered = sorted(set(keys), key=repr)
        taken: List[tuple] = []
        try:
            for key in ordered:
                entry = self._checkout(key)
                try:
                    entry.lock.acquire()
                except BaseException:
                    self._checkin(key, entry)
                    raise
                taken.append((key, entry))
                logger.debug(f"Acquired lock {key!r}")
            yield
        finally:
            for key, entry in reversed(taken):
                entry.lock.release()
                self._checkin(key, entry)

    def active_keys(self) -> List[Hashable]:
        """Keys currently held or waited for"""
        with self._guard:
            return list(self._entries)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


def unit_key(unit_id) -> tuple:
    return ('unit', str(unit_id))


def parent_key(parent_id) -> tuple:
    return ('parent', str(parent_id))


def registration_key(registration_no: str) -> tuple:
    return ('registration', registration_no)
