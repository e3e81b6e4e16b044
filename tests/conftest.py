import itertools
import random

import pytest


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True

    def fire(self):
        if not self.stopped:
            self.callback()


class FakeScheduler:
    """Stands in for Textual's set_timer; timers fire only when told to."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire_all(self):
        for timer in list(self.timers):
            timer.fire()


class StubRandom(random.Random):
    """Random source whose randint cycles through fixed values."""

    def __init__(self, values):
        super().__init__(0)
        self._values = itertools.cycle(values)

    def randint(self, a, b):
        return next(self._values)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def three_by_four():
    return StubRandom([3, 4])
