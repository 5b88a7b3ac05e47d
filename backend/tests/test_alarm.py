"""
Tests for the new order alert state machine.
"""

import pytest

from kitchen_display.ack_store import AckStore
from kitchen_display.alarm import AlertState, AlertStateMachine
from kitchen_display.reconciler import OrderReconciler
from shared.infrastructure.events import OrderCreatedEvent, OrderUpdatedEvent
from tests.conftest import make_snapshot


class Cue:
    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail

    def __call__(self):
        self.calls += 1
        if self.fail:
            raise OSError("no audio device")


@pytest.fixture
def cue():
    return Cue()


@pytest.fixture
def alarm(cue):
    return AlertStateMachine(cue, interval_seconds=2.2)


class TestTransitions:
    """silent <-> alarming"""

    def test_starts_silent(self, alarm, cue):
        assert alarm.state is AlertState.SILENT
        assert not alarm.tick(0.0)
        assert cue.calls == 0

    def test_enters_alarming_and_plays_at_once(self, alarm, cue):
        assert alarm.evaluate(True, 10.0) is AlertState.ALARMING
        assert cue.calls == 1

    def test_staying_alarming_does_not_replay(self, alarm, cue):
        alarm.evaluate(True, 10.0)
        alarm.evaluate(True, 10.5)
        assert cue.calls == 1

    def test_returns_to_silent(self, alarm, cue):
        alarm.evaluate(True, 10.0)

        assert alarm.evaluate(False, 11.0) is AlertState.SILENT
        assert not alarm.tick(20.0)
        assert cue.calls == 1


class TestRepeat:
    """tick() replays the cue on the interval while alarming."""

    def test_replays_after_interval(self, alarm, cue):
        alarm.evaluate(True, 10.0)

        assert not alarm.tick(11.0)
        assert alarm.tick(12.5)
        assert not alarm.tick(13.0)
        assert alarm.tick(15.0)
        assert cue.calls == 3

    def test_re_entering_alarming_plays_immediately(self, alarm, cue):
        alarm.evaluate(True, 10.0)
        alarm.evaluate(False, 10.5)

        alarm.evaluate(True, 11.0)

        assert cue.calls == 2

    def test_cue_failure_does_not_break_state(self):
        cue = Cue(fail=True)
        alarm = AlertStateMachine(cue, interval_seconds=1)

        alarm.evaluate(True, 0.0)
        assert alarm.is_alarming
        assert alarm.tick(1.0)
        assert cue.calls == 2


class TestWithReconciler:
    """Alarming exactly while an unacknowledged order is held."""

    def test_alarm_tracks_unacknowledged_orders(self, alarm, cue):
        reconciler = OrderReconciler(AckStore())

        reconciler.apply(OrderCreatedEvent(order=make_snapshot(1)))
        reconciler.apply(OrderCreatedEvent(order=make_snapshot(2)))
        assert alarm.evaluate(reconciler.has_unacknowledged(), 0.0) is AlertState.ALARMING

        reconciler.acknowledge(1)
        assert alarm.evaluate(reconciler.has_unacknowledged(), 1.0) is AlertState.ALARMING

        reconciler.apply(OrderUpdatedEvent(order=make_snapshot(2, "preparing")))
        assert alarm.evaluate(reconciler.has_unacknowledged(), 2.0) is AlertState.SILENT
        assert cue.calls == 1
