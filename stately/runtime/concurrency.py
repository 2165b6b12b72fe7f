# stately/runtime/concurrency.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from typing import Any

from stately.core.errors import ConfigurationError

# Instance attribute holding a host's transition lock.
LOCK_ATTR = "_stately_lock"

_creation_lock = threading.Lock()

# Locks of hosts without an instance __dict__ (slotted classes with __weakref__).
_slotted_locks: "weakref.WeakKeyDictionary[Any, threading.RLock]" = weakref.WeakKeyDictionary()


def get_lock() -> threading.RLock:
    """
    Provide a new re-entrant lock, so callbacks may trigger further transitions
    on the same host without deadlocking.
    """
    return threading.RLock()


def supports_host_lock(cls: type) -> bool:
    """
    Return True if instances of ``cls`` can carry a transition lock: they need
    either an instance ``__dict__`` or support for weak references.
    """
    return bool(getattr(cls, "__dictoffset__", 1) or getattr(cls, "__weakrefoffset__", 1))


def host_lock(host: Any) -> threading.RLock:
    """
    Return the transition lock of ``host``, creating it on first use.

    :raises ConfigurationError: If the host has neither an instance ``__dict__``
        nor weak reference support.
    """
    store = getattr(host, "__dict__", None)
    if store is not None:
        key = LOCK_ATTR
    else:
        store, key = _slotted_locks, host

    lock = _get(store, key)
    if lock is None:
        with _creation_lock:
            lock = _get(store, key)
            if lock is None:
                lock = get_lock()
                try:
                    store[key] = lock
                except TypeError as e:
                    raise ConfigurationError(
                        f"{type(host).__name__} instances need a __dict__ or __weakref__ slot to be locked."
                    ) from e
    return lock


def _get(store, key):
    try:
        return store.get(key)
    except TypeError:
        return None


@contextmanager
def with_lock(lock):
    """
    Acquire ``lock`` for the duration of the with-block.
    """
    lock.acquire()
    try:
        yield
    finally:
        lock.release()
