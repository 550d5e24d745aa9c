"""Feedback flash tests: immediate color write, delayed real-time revert."""

import asyncio
import threading
import time

import pytest

from selfpark.constants import GREEN, RED
from selfpark.env.feedback import (
    FeedbackTimer,
    FlagKind,
    ThreadScheduler,
    VisualFlag,
    default_scheduler,
)
from tests.fakes import FLOOR_DEFAULT, FakeRenderer, ManualScheduler


@pytest.fixture
def timer(renderer, scheduler):
    t = FeedbackTimer(renderer, scheduler, delay_s=0.5)
    t.capture_defaults("car", "floor")
    return t


class TestFlash:
    def test_flash_writes_color_immediately(self, timer, renderer):
        timer.flash("floor", VisualFlag.alert())
        assert renderer.colors["floor"] == RED
        assert timer.flag("floor").kind is FlagKind.ALERT

    def test_revert_after_delay(self, timer, renderer, scheduler):
        handle = timer.flash("floor", VisualFlag.success())
        scheduler.advance(0.49)
        assert renderer.colors["floor"] == GREEN
        assert not handle.fired

        scheduler.advance(0.02)
        assert renderer.colors["floor"] == FLOOR_DEFAULT
        assert timer.flag("floor").kind is FlagKind.NORMAL
        assert handle.fired
        assert timer.pending == ()

    def test_revert_uses_default_captured_at_schedule_time(self, timer, renderer, scheduler):
        handle = timer.flash("floor", VisualFlag.alert())
        renderer.colors["floor"] = (0.0, 0.0, 0.0, 1.0)
        timer.capture_defaults("floor")  # default changes while the revert is in flight

        scheduler.advance(0.5)
        assert handle.revert_to == FLOOR_DEFAULT
        assert renderer.colors["floor"] == FLOOR_DEFAULT

    def test_cancel_keeps_flash_color(self, timer, renderer, scheduler):
        handle = timer.flash("floor", VisualFlag.alert())
        handle.cancel()
        scheduler.advance(1.0)
        assert renderer.colors["floor"] == RED
        assert handle.cancelled and not handle.fired

    def test_overlapping_flashes_end_normal(self, timer, renderer, scheduler):
        timer.flash("floor", VisualFlag.alert())
        scheduler.advance(0.2)
        timer.flash("floor", VisualFlag.success())
        scheduler.advance(0.3)
        # First revert fired while the second flash is still up: last write wins.
        assert renderer.colors["floor"] == FLOOR_DEFAULT
        scheduler.advance(0.2)
        assert renderer.colors["floor"] == FLOOR_DEFAULT
        assert timer.pending == ()

    def test_cancel_all(self, timer, scheduler):
        a = timer.flash("floor", VisualFlag.alert())
        b = timer.flash("floor", VisualFlag.success())
        timer.cancel_all()
        assert a.cancelled and b.cancelled
        assert scheduler.pending == []

    def test_restore_and_set_flag(self, timer, renderer):
        timer.set_flag("car", VisualFlag.alert())
        assert renderer.colors["car"] == RED
        timer.restore("car")
        assert timer.flag("car").kind is FlagKind.NORMAL
        assert renderer.colors["car"] == timer.default_color("car")


class TestWithoutRenderer:
    def test_flash_is_noop(self):
        scheduler = ManualScheduler()
        timer = FeedbackTimer(None, scheduler)
        timer.capture_defaults("floor")
        assert timer.flash("floor", VisualFlag.alert()) is None
        assert scheduler.scheduled == []
        timer.restore("floor")
        timer.set_flag("floor", VisualFlag.alert())
        assert timer.flag("floor") is None


class TestRealClocks:
    def test_thread_scheduler_reverts(self):
        renderer = FakeRenderer()
        timer = FeedbackTimer(renderer, ThreadScheduler(), delay_s=0.05)
        timer.capture_defaults("floor")
        handle = timer.flash("floor", VisualFlag.alert())

        deadline = time.monotonic() + 5.0
        while not handle.fired and time.monotonic() < deadline:
            time.sleep(0.01)
        assert handle.fired
        assert renderer.colors["floor"] == FLOOR_DEFAULT

    def test_asyncio_loop_is_a_scheduler(self):
        renderer = FakeRenderer()

        async def scenario():
            timer = FeedbackTimer(renderer, asyncio.get_running_loop(), delay_s=0.01)
            timer.capture_defaults("floor")
            handle = timer.flash("floor", VisualFlag.success())
            assert renderer.colors["floor"] == GREEN
            await asyncio.sleep(0.1)
            return handle

        handle = asyncio.run(scenario())
        assert handle.fired
        assert renderer.colors["floor"] == FLOOR_DEFAULT

    def test_default_scheduler_picks_running_loop(self):
        assert isinstance(default_scheduler(), ThreadScheduler)

        async def inner():
            return default_scheduler() is asyncio.get_running_loop()

        assert asyncio.run(inner())

    def test_thread_timer_can_be_cancelled(self):
        fired = threading.Event()
        timer = ThreadScheduler().call_later(0.2, fired.set)
        timer.cancel()
        assert not fired.wait(0.4)
