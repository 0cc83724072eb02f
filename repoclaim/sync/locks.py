"""Per-owner serialisation for synchronisation runs.

Runs inside one event loop wait on an :class:`asyncio.Lock`. Worker threads
that each drive their own loop with :func:`asyncio.run` first take the
owner's :class:`threading.Lock` via :meth:`OwnerLocks.hold_blocking`, so an
``asyncio.Lock`` is never awaited from two loops.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
import typing as typ
import weakref


class OwnerLocks:
    """Hands out one lock per owner.

    :meth:`lock_for` returns a per-loop :class:`asyncio.Lock`, held weakly:
    once no run holds or waits on it the lock is dropped, so the table does
    not grow with every owner ever synced. :meth:`hold_blocking` serialises
    threads. Different owners never contend.
    """

    def __init__(self) -> None:
        """Create empty lock tables."""
        self._table_lock = threading.Lock()
        self._locks: weakref.WeakValueDictionary[tuple[int, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._thread_locks: dict[str, threading.Lock] = {}
        self._thread_users: dict[str, int] = {}

    def lock_for(self, owner_id: str) -> asyncio.Lock:
        """Return the running loop's lock guarding ``owner_id``.

        Raises
        ------
        RuntimeError
            If called without a running event loop.

        """
        key = (id(asyncio.get_running_loop()), owner_id)
        with self._table_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
            return lock

    @contextlib.contextmanager
    def hold_blocking(self, owner_id: str) -> typ.Iterator[None]:
        """Block the calling thread until it holds the owner's thread lock."""
        with self._table_lock:
            lock = self._thread_locks.setdefault(owner_id, threading.Lock())
            self._thread_users[owner_id] = self._thread_users.get(owner_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._table_lock:
                remaining = self._thread_users[owner_id] - 1
                if remaining:
                    self._thread_users[owner_id] = remaining
                else:
                    del self._thread_users[owner_id]
                    del self._thread_locks[owner_id]

    def is_locked(self, owner_id: str) -> bool:
        """Return True while a run or thread holds one of the owner's locks."""
        with self._table_lock:
            thread_lock = self._thread_locks.get(owner_id)
            if thread_lock is not None and thread_lock.locked():
                return True
            return any(
                lock.locked()
                for (_, locked_owner), lock in list(self._locks.items())
                if locked_owner == owner_id
            )


DEFAULT_OWNER_LOCKS = OwnerLocks()
