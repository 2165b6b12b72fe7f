# tests/unit/core/test_binding.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass
from typing import Optional

import pytest

from stately.core.binding import bind, stately
from stately.core.errors import ConfigurationError, InvalidTransition, StateNotDefinedError
from stately.core.machine import Machine
from stately.core.transitions import TransitionResult


def test_installs_triggers_and_queries(order_class):
    for name in ["complete", "process", "refund", "invalidate"]:
        assert callable(getattr(order_class, name))
    for name in ["is_processing", "is_completed", "is_invalid", "is_refunded"]:
        assert callable(getattr(order_class, name))
    assert order_class.complete.__name__ == "complete"


def test_new_instances_start_in_start_state(order):
    assert order.state == "processing"
    assert order.is_processing()
    assert not order.is_completed()


def test_states_in_declaration_order(order):
    assert order.states() == ["completed", "invalid", "processing", "refunded"]


def test_machine_is_shared(order_class):
    assert order_class().stately_machine is order_class.stately_machine


def test_trigger_returns_result(order):
    assert order.complete() is TransitionResult.COMMITTED
    assert order.is_state("completed")


def test_generic_transition_and_checks(order):
    assert order.can_transition_to("invalid")
    assert not order.can_transition_to("refunded")
    order.transition_to("invalid")
    assert order.is_invalid()
    with pytest.raises(StateNotDefinedError):
        order.transition_to("shipped")
    with pytest.raises(StateNotDefinedError):
        order.is_state("shipped")


def test_existing_state_is_kept():
    m = Machine(start="new")
    m.state("active")

    @m.bind
    class Task:
        def __init__(self, state=None):
            self.state = state

    assert Task().state == "new"
    assert Task(state="active").state == "active"


def test_decorator_with_options():
    def configure(m):
        m.state("published", configure=lambda s: s.allow_from("draft"))

    @stately(start="draft", attr="status", configure=configure)
    class Article:
        pass

    article = Article()
    assert article.status == "draft"
    article.published()
    assert article.is_published()
    with pytest.raises(InvalidTransition):
        article.published()


def test_dataclass_host():
    m = Machine(start="pending")
    m.state("started")

    @m.bind
    @dataclass
    class Job:
        name: str
        state: Optional[str] = None

    job = Job("build")
    assert job.state == "pending"
    job.start()
    assert job.state == "started"


def test_collision_with_host_attribute():
    m = Machine(start="new")
    m.state("completed")

    class Host:
        def complete(self):
            pass

    with pytest.raises(ConfigurationError, match="Host.complete is already defined"):
        bind(m, Host)


def test_collision_between_entry_points():
    m = Machine(start="new")
    m.state("states")

    class Host:
        pass

    with pytest.raises(ConfigurationError, match="defined twice"):
        bind(m, Host)


def test_binding_validates_handlers():
    m = Machine(start="new")
    m.state("active", configure=lambda s: s.after_transition(do="save"))

    class Host:
        pass

    with pytest.raises(ConfigurationError):
        bind(m, Host)


def test_subclass_can_be_rebound(order_class):
    m = Machine(start="draft")
    m.state("completed")

    class Special(order_class):
        pass

    bind(m, Special)
    special = Special()
    assert special.state == "draft"
    assert special.states() == ["draft", "completed"]
    assert order_class().states() == ["completed", "invalid", "processing", "refunded"]


def test_thread_safe_binding_uses_lock():
    m = Machine(start="new")
    m.state("active")

    @m.bind(thread_safe=True)
    class Host:
        pass

    host = Host()
    assert host.active() is TransitionResult.COMMITTED
    assert "_stately_lock" in host.__dict__
