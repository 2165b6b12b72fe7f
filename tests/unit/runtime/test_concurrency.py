# tests/unit/runtime/test_concurrency.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from stately.core.errors import ConfigurationError, InvalidTransition
from stately.core.machine import Machine
from stately.core.transitions import TransitionResult
from stately.runtime.concurrency import LOCK_ATTR, get_lock, host_lock, supports_host_lock, with_lock


class Host:
    pass


def test_get_lock_is_reentrant():
    lock = get_lock()
    with with_lock(lock):
        with with_lock(lock):
            pass


def test_with_lock_releases_on_error():
    lock = threading.Lock()
    try:
        with with_lock(lock):
            raise ValueError("boom")
    except ValueError:
        pass
    assert not lock.locked()


def test_host_lock_is_per_instance():
    a, b = Host(), Host()
    assert host_lock(a) is host_lock(a)
    assert host_lock(a) is not host_lock(b)
    assert LOCK_ATTR in a.__dict__


def test_concurrent_triggers_commit_once():
    entered = []
    m = Machine(start="new")
    m.state("active", configure=lambda s: s.before_transition(do=lambda host: entered.append(1)))

    @m.bind(thread_safe=True)
    class Task:
        pass

    task = Task()

    def trigger():
        try:
            return task.active()
        except InvalidTransition:
            return None

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: trigger(), range(32)))

    assert results.count(TransitionResult.COMMITTED) == 1
    assert results.count(None) == 31
    assert entered == [1]
    assert task.is_active()


def test_callbacks_may_transition_reentrantly():
    m = Machine(start="new")
    m.state("active", configure=lambda s: s.after_transition(do="close"))
    m.state("closed", configure=lambda s: s.allow_from("active"))

    @m.bind(thread_safe=True)
    class Task:
        def close(self):
            self.transition_to("closed")

    task = Task()
    task.active()
    assert task.is_closed()


def test_slotted_host_with_weakref_slot():
    m = Machine(start="a")
    m.state("b")

    @m.bind(thread_safe=True)
    class Slotted:
        __slots__ = ("state", "__weakref__")

    host = Slotted()
    assert host.state == "a"
    assert host.b() is TransitionResult.COMMITTED
    assert host.is_b()
    assert host_lock(host) is host_lock(host)
    assert host_lock(host) is not host_lock(Slotted())


def test_slotted_host_without_weakref_is_rejected_at_bind():
    m = Machine(start="a")
    m.state("b")

    class Slotted:
        __slots__ = ("state",)

    with pytest.raises(ConfigurationError, match="thread_safe"):
        m.bind(Slotted, thread_safe=True)


def test_slotted_host_without_lock_binds_when_not_thread_safe():
    m = Machine(start="a")
    m.state("b")

    @m.bind
    class Slotted:
        __slots__ = ("state",)

    host = Slotted()
    host.b()
    assert host.state == "b"


def test_supports_host_lock():
    class Plain:
        pass

    class Weak:
        __slots__ = ("__weakref__",)

    class Bare:
        __slots__ = ()

    assert supports_host_lock(Plain)
    assert supports_host_lock(Weak)
    assert not supports_host_lock(Bare)
