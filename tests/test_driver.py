"""
Timer ownership tests for the countdown driver and the scheduler.

All tests run on a VirtualClock; Scheduler.advance(n) fires every callback
due within the next n seconds.
"""

import pytest

from hiit_timer.core.driver import SessionDriver
from hiit_timer.core.engine import SessionEngine
from hiit_timer.core.events import SilentAudio, Sound, attach_audio
from hiit_timer.core.models import MainStep, Phase, SessionPlan, TimedStep
from hiit_timer.core.scheduler import Scheduler, VirtualClock


def _plan(work: int = 3, rest: int = 2, steps: int = 1, cooldown: tuple[int, ...] = ()) -> SessionPlan:
    return SessionPlan(
        main_steps=tuple(MainStep(f"Exercise {n}", work, rest) for n in range(1, steps + 1)),
        cooldown=tuple(TimedStep(f"stretch_{n}", d) for n, d in enumerate(cooldown, 1)),
    )


@pytest.fixture
def scheduler():
    return Scheduler.virtual()


class CompletionCounter:
    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self.calls: list[float] = []

    def __call__(self) -> None:
        self.calls.append(self.scheduler.now())


# ===========================================================================
# Scheduler
# ===========================================================================


class TestScheduler:

    def test_call_later_fires_once(self, scheduler):
        fired = []
        handle = scheduler.call_later(2, lambda: fired.append(scheduler.now()))
        scheduler.advance(1)
        assert fired == []
        scheduler.advance(5)
        assert fired == [2.0]
        assert not handle.active

    def test_call_every_repeats_until_cancelled(self, scheduler):
        fired = []
        handle = scheduler.call_every(1, lambda: fired.append(scheduler.now()))
        scheduler.advance(3)
        assert fired == [1.0, 2.0, 3.0]
        handle.cancel()
        handle.cancel()
        scheduler.advance(3)
        assert len(fired) == 3
        assert scheduler.empty()

    def test_callback_can_cancel_its_own_handle(self, scheduler):
        fired = []
        holder = {}

        def once_then_stop():
            fired.append(scheduler.now())
            holder["h"].cancel()

        holder["h"] = scheduler.call_every(1, once_then_stop)
        scheduler.advance(5)
        assert fired == [1.0]
        assert scheduler.empty()

    def test_interrupted_callback_keeps_repeating(self, scheduler):
        calls = []

        def redraw():
            calls.append(scheduler.now())
            if len(calls) == 2:
                raise KeyboardInterrupt

        handle = scheduler.call_every(0.25, redraw)
        with pytest.raises(KeyboardInterrupt):
            scheduler.advance(2.0)
        assert calls == [0.25, 0.5]
        assert handle.active
        assert scheduler.pending == 1

        scheduler.advance(0.5)
        assert calls == [0.25, 0.5, 0.75, 1.0]

    def test_missed_intervals_are_not_replayed(self):
        clock = VirtualClock()
        scheduler = Scheduler.virtual(clock)
        fired = []
        scheduler.call_every(0.25, lambda: fired.append(scheduler.now()))
        scheduler.advance(0.25)
        assert fired == [0.25]

        clock.now += 30  # queue not running, e.g. while a prompt waits for input
        scheduler.advance(0)
        assert len(fired) == 2
        scheduler.advance(0.25)
        assert len(fired) == 3
        assert fired[-1] - fired[-2] == pytest.approx(0.25)

    def test_run_drains_virtual_queue(self):
        clock = VirtualClock()
        scheduler = Scheduler.virtual(clock)
        scheduler.call_later(30, lambda: None)
        scheduler.run()
        assert clock.now == 30
        assert scheduler.empty()

    def test_advance_requires_virtual_clock(self):
        with pytest.raises(RuntimeError):
            Scheduler().advance(1)

    def test_non_positive_interval_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.call_every(0, lambda: None)


# ===========================================================================
# Driver
# ===========================================================================


class TestDriverTimer:

    def test_start_arms_single_tick_timer(self, scheduler):
        driver = SessionDriver(SessionEngine(_plan()), scheduler)
        assert scheduler.pending == 0
        driver.start()
        driver.start()
        assert driver.ticking
        assert scheduler.pending == 1

    def test_ticks_decrement_countdown(self, scheduler):
        engine = SessionEngine(_plan())
        driver = SessionDriver(engine, scheduler)
        driver.start()
        scheduler.advance(3)
        assert (engine.phase, engine.remaining_seconds) == (Phase.PREPARE, 2)

    def test_pause_resume_cycles_never_stack_timers(self, scheduler):
        engine = SessionEngine(_plan(work=30))
        driver = SessionDriver(engine, scheduler)
        driver.start()
        for _ in range(5):
            driver.pause()
            assert scheduler.pending == 0
            driver.resume()
            assert scheduler.pending == 1
        driver.toggle_pause()
        driver.toggle_pause()
        assert scheduler.pending == 1

        scheduler.advance(2)
        assert engine.remaining_seconds == 3

    def test_paused_driver_does_not_tick(self, scheduler):
        engine = SessionEngine(_plan(work=20))
        driver = SessionDriver(engine, scheduler)
        driver.start()
        driver.skip()
        scheduler.advance(3)
        assert engine.remaining_seconds == 17
        driver.pause()
        scheduler.advance(10)
        assert engine.remaining_seconds == 17
        driver.resume()
        scheduler.advance(1)
        assert engine.remaining_seconds == 16

    def test_stop_cancels_timer_and_start_continues(self, scheduler):
        engine = SessionEngine(_plan(work=20))
        driver = SessionDriver(engine, scheduler)
        driver.start()
        scheduler.advance(7)  # 5 prepare ticks + 2 work ticks
        assert (engine.phase, engine.remaining_seconds) == (Phase.WORK, 18)

        driver.stop()
        assert not driver.ticking
        assert scheduler.empty()
        scheduler.advance(10)
        assert engine.remaining_seconds == 18

        driver.start()
        scheduler.advance(1)
        assert (engine.phase, engine.remaining_seconds) == (Phase.WORK, 17)

    def test_context_exit_cancels_everything(self, scheduler):
        engine = SessionEngine(_plan())
        with SessionDriver(engine, scheduler) as driver:
            driver.start()
            assert scheduler.pending == 1
        assert scheduler.empty()
        scheduler.advance(10)
        assert engine.remaining_seconds == 5

    def test_start_after_close_is_ignored(self, scheduler):
        driver = SessionDriver(SessionEngine(_plan()), scheduler)
        driver.close()
        driver.start()
        assert scheduler.empty()


class TestCompletion:

    def test_complete_callback_after_display_delay(self, scheduler):
        engine = SessionEngine(_plan(work=3, rest=2))
        done = CompletionCounter(scheduler)
        driver = SessionDriver(engine, scheduler, on_complete=done)
        driver.start()

        scheduler.advance(10)  # 5 prepare + 3 work + 2 rest
        assert engine.is_complete
        assert engine.is_active is False
        assert not driver.ticking
        assert done.calls == []
        assert driver.completion_pending

        scheduler.advance(1)
        assert done.calls == []
        scheduler.advance(1)
        assert done.calls == [12.0]

        scheduler.advance(30)
        assert done.calls == [12.0]
        assert scheduler.empty()

    def test_skip_to_completion_schedules_callback(self, scheduler):
        engine = SessionEngine(_plan(steps=2))
        done = CompletionCounter(scheduler)
        driver = SessionDriver(engine, scheduler, on_complete=done)
        driver.start()
        while not engine.is_complete:
            driver.skip()
        driver.skip()
        assert scheduler.pending == 1
        scheduler.advance(2)
        assert done.calls == [2.0]

    def test_close_before_delay_prevents_callback(self, scheduler):
        engine = SessionEngine(_plan())
        done = CompletionCounter(scheduler)
        driver = SessionDriver(engine, scheduler, on_complete=done)
        driver.start()
        while not engine.is_complete:
            driver.skip()
        driver.close()
        scheduler.advance(10)
        assert done.calls == []

    def test_cooldown_runs_before_completion(self, scheduler):
        engine = SessionEngine(_plan(work=2, rest=2, cooldown=(3, 3)))
        done = CompletionCounter(scheduler)
        SessionDriver(engine, scheduler, on_complete=done).start()
        scheduler.advance(9)  # 5 prepare + 2 work + 2 rest
        assert (engine.phase, engine.step_index, engine.remaining_seconds) == (Phase.COOLDOWN, 0, 3)
        scheduler.advance(6)
        assert engine.is_complete
        scheduler.advance(2)
        assert done.calls == [17.0]


class TestAudio:

    def test_audio_resumed_before_start(self, scheduler):
        audio = SilentAudio()
        driver = SessionDriver(SessionEngine(_plan()), scheduler, audio=audio)
        assert not audio.resumed
        driver.start()
        assert audio.resumed

    def test_failing_audio_resume_does_not_block_start(self, scheduler):
        class BrokenAudio(SilentAudio):
            def resume(self):
                raise OSError("no audio device")

        engine = SessionEngine(_plan())
        SessionDriver(engine, scheduler, audio=BrokenAudio()).start()
        assert engine.is_active

    def test_sounds_for_full_session(self, scheduler):
        engine = SessionEngine(_plan(work=4, rest=4))
        audio = SilentAudio()
        attach_audio(engine.bus, audio)
        SessionDriver(engine, scheduler, audio=audio).start()
        scheduler.run()

        countdown = [Sound.COUNTDOWN] * 3
        assert audio.played == [
            *countdown,  # prepare 5 -> 1
            Sound.START,
            *countdown,  # work 4 -> 1
            Sound.REST,
            *countdown,  # rest 4 -> 1
            Sound.COMPLETION,
        ]
