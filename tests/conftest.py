"""Shared fixtures for dungeon generation tests."""

import pytest

from py_dungeon.core.geometry import Point


class StubSpace:
    """Physics space that never moves anything; sleep state is set by the test."""

    def __init__(self, asleep=True):
        self.asleep = asleep
        self.bodies = {}
        self.steps = []
        self._next = 0

    def add_body(self, spec):
        handle = self._next
        self._next += 1
        self.bodies[handle] = spec
        return handle

    def remove_body(self, handle):
        del self.bodies[handle]

    def step(self, dt):
        self.steps.append(dt)

    def position(self, handle):
        return Point(*self.bodies[handle].position)

    def is_asleep(self, handle):
        return self.asleep


@pytest.fixture
def stub_space():
    return StubSpace()


@pytest.fixture
def awake_space():
    """Space whose bodies never settle."""
    return StubSpace(asleep=False)
