# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from stately.core.machine import Machine


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def _order_states(m: Machine) -> None:
    with m.state("completed") as s:
        s.prevent_from("refunded")
        s.before_transition(from_state="processing", do="before_completed")
        s.before_transition(from_state="invalid", do="cleanup_invalid")
        s.after_transition(do="after_completed")
        s.validate("validates_amount")
        s.validate("validates_credit_card")

    with m.state("invalid") as s:
        s.prevent_from("completed", "refunded")

    with m.state("processing") as s:
        s.prevent_from("completed", "invalid", "refunded")

    with m.state("refunded") as s:
        s.allow_from("completed")
        s.before_transition(from_state="completed", do="before_refunded")
        s.after_transition(from_state="completed", do="after_refunded")


@pytest.fixture
def order_machine():
    """The order lifecycle machine: processing, completed, invalid, refunded."""
    m = Machine(start="processing")
    _order_states(m)
    return m


@pytest.fixture
def order_class(order_machine):
    """A fresh host class bound to the order machine."""

    class Order:
        def __init__(self, amount=99, cc_number=123):
            self.amount = amount
            self.cc_number = cc_number
            self.serial_number = None
            self.refunded_reason = None
            self.calls = []

        def before_completed(self):
            self.calls.append("before_completed")
            self.serial_number = 42

        def after_completed(self):
            self.calls.append("after_completed")

        def before_refunded(self):
            self.calls.append("before_refunded")
            self.refunded_reason = "Overcharged"

        def after_refunded(self):
            self.calls.append("after_refunded")

        def cleanup_invalid(self):
            self.calls.append("cleanup_invalid")
            self.serial_number = None

        def validates_amount(self):
            self.calls.append("validates_amount")
            return 0.0 < self.amount < 100.0

        def validates_credit_card(self):
            self.calls.append("validates_credit_card")
            return self.cc_number == 123

    return order_machine.bind(Order)


@pytest.fixture
def order(order_class):
    return order_class()
