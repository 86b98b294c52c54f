import pytest

from session_clock import TickScheduler, TimerKind, WallClockTicker


def test_countdown_expires_after_duration(scheduler):
    ticks = []
    expired = []
    scheduler.start_timer(TimerKind.QUESTION, 3, on_tick=ticks.append, on_expire=lambda: expired.append(True))

    scheduler.advance(2)
    assert ticks == [2, 1]
    assert expired == []
    assert scheduler.remaining(TimerKind.QUESTION) == 1

    scheduler.tick()
    assert ticks == [2, 1, 0]
    assert expired == [True]
    assert not scheduler.is_running(TimerKind.QUESTION)

    # released timers never fire again
    scheduler.advance(5)
    assert expired == [True]


def test_unbounded_timer_keeps_ticking(scheduler):
    seen = []
    scheduler.start_timer(TimerKind.TOTAL, None, on_tick=seen.append)
    scheduler.advance(100)
    assert len(seen) == 100
    assert scheduler.is_running(TimerKind.TOTAL)
    assert scheduler.remaining(TimerKind.TOTAL) is None


def test_starting_same_kind_cancels_previous(scheduler):
    first = []
    second = []
    old = scheduler.start_timer(TimerKind.FEEDBACK, 2, on_expire=lambda: first.append(1))
    scheduler.tick()
    new = scheduler.start_timer(TimerKind.FEEDBACK, 2, on_expire=lambda: second.append(1))

    assert old.active is False
    assert new.active is True
    scheduler.advance(5)
    assert first == []
    assert second == [1]


def test_cancel_is_idempotent(scheduler):
    fired = []
    handle = scheduler.start_timer(TimerKind.QUESTION, 1, on_expire=lambda: fired.append(1))
    scheduler.cancel_timer(handle)
    scheduler.cancel_timer(handle)
    scheduler.cancel_timer(None)
    scheduler.tick()
    assert fired == []


def test_timer_cancelled_earlier_in_same_tick_does_not_fire(scheduler):
    fired = []
    victim = {}

    def cancel_victim(_remaining):
        scheduler.cancel_timer(victim['handle'])

    scheduler.start_timer(TimerKind.TOTAL, None, on_tick=cancel_victim)
    victim['handle'] = scheduler.start_timer(TimerKind.QUESTION, 1, on_expire=lambda: fired.append(1))
    scheduler.tick()
    assert fired == []


def test_timer_started_during_tick_waits_for_next_tick(scheduler):
    feedback_ticks = []

    def start_feedback():
        scheduler.start_timer(TimerKind.FEEDBACK, 5, on_tick=feedback_ticks.append)

    scheduler.start_timer(TimerKind.QUESTION, 1, on_expire=start_feedback)
    scheduler.tick()
    assert feedback_ticks == []
    assert scheduler.remaining(TimerKind.FEEDBACK) == 5
    scheduler.tick()
    assert feedback_ticks == [4]


def test_cancel_all(scheduler):
    scheduler.start_timer(TimerKind.TOTAL, None)
    scheduler.start_timer(TimerKind.QUESTION, 10)
    scheduler.start_timer(TimerKind.FEEDBACK, 10)
    scheduler.cancel_all()
    for kind in TimerKind:
        assert not scheduler.is_running(kind)


def test_rejects_non_positive_duration(scheduler):
    with pytest.raises(ValueError):
        scheduler.start_timer(TimerKind.QUESTION, 0)


def test_wall_clock_ticker_carries_remainder(fake_clock):
    scheduler = TickScheduler()
    seen = []
    scheduler.start_timer(TimerKind.TOTAL, None, on_tick=seen.append)
    ticker = WallClockTicker(scheduler, interval=1.0, time_source=fake_clock)

    fake_clock.advance(0.6)
    assert ticker.sync() == 0
    fake_clock.advance(0.6)
    assert ticker.sync() == 1
    fake_clock.advance(0.9)
    assert ticker.sync() == 1
    fake_clock.advance(3.0)
    assert ticker.sync() == 3
    assert len(seen) == 5
    assert scheduler.tick_count == 5


def test_wall_clock_ticker_reset_discards_elapsed(fake_clock):
    scheduler = TickScheduler()
    ticker = WallClockTicker(scheduler, time_source=fake_clock)
    fake_clock.advance(10)
    ticker.reset()
    assert ticker.sync() == 0
