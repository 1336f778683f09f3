"""Tests for the PomoTimer timer engine.

Covers: mode switching, start/pause/reset, tick countdown, completion
and long-break cadence, stale-tick safety, signal ordering, settings
application and persistence failures, progress fraction.
"""

import pytest

from pomotimer.settings import Settings, MemorySettingsStore
from pomotimer.timer.engine import (
    TimerEngine, TimerSnapshot, Mode,
    InvalidTransition, ValidationFailed, TICK_INTERVAL_MS,
)

from helpers import SignalCollector, RecordingSignaler, FailingStore, complete_session


# ═══════════════════════════════════════════════════════════════════════════
#  INITIAL STATE
# ═══════════════════════════════════════════════════════════════════════════


class TestInitialState:

    def test_starts_idle_in_work(self, engine):
        assert engine.mode == Mode.WORK
        assert engine.time_remaining == 1500
        assert engine.is_running is False
        assert engine.completed_work_sessions == 0

    def test_snapshot_matches_properties(self, engine):
        assert engine.snapshot() == TimerSnapshot(
            mode=Mode.WORK,
            time_remaining=1500,
            is_running=False,
            completed_work_sessions=0,
        )

    def test_loads_settings_from_store(self, qapp):
        saved = Settings(work_duration=10 * 60)
        eng = TimerEngine(store=MemorySettingsStore(saved))
        assert eng.time_remaining == 600

    def test_defaults_when_store_is_empty(self, qapp):
        eng = TimerEngine(store=MemorySettingsStore())
        assert eng.settings == Settings()
        assert eng.time_remaining == 1500

    def test_out_of_range_stored_settings_fall_back_to_defaults(self, qapp):
        stored = Settings(sessions_before_long_break=0, work_duration=30 * 60)
        eng = TimerEngine(store=MemorySettingsStore(stored))
        assert eng.settings == Settings()
        assert eng.time_remaining == 1500

        complete_session(eng)
        assert eng.mode == Mode.SHORT_BREAK
        assert eng.completed_work_sessions == 1

    def test_out_of_range_passed_settings_fall_back_to_defaults(self, qapp):
        eng = TimerEngine(settings=Settings(short_break_duration=0))
        assert eng.settings == Settings()

    def test_tick_interval_is_one_second(self, engine):
        assert TICK_INTERVAL_MS == 1000
        assert engine._qt_timer.interval() == 1000


# ═══════════════════════════════════════════════════════════════════════════
#  SWITCH MODE
# ═══════════════════════════════════════════════════════════════════════════


class TestSwitchMode:

    @pytest.mark.parametrize("mode, seconds", [
        (Mode.WORK, 1500),
        (Mode.SHORT_BREAK, 300),
        (Mode.LONG_BREAK, 900),
    ])
    def test_sets_full_duration(self, engine, mode, seconds):
        engine.switch_mode(mode)
        assert engine.mode == mode
        assert engine.time_remaining == seconds

    def test_same_mode_refills_countdown(self, engine):
        engine.start()
        for _ in range(10):
            engine.tick()
        engine.pause()
        engine.switch_mode(Mode.WORK)
        assert engine.time_remaining == 1500

    def test_rejected_while_running(self, engine):
        engine.start()
        engine.tick()
        with pytest.raises(InvalidTransition):
            engine.switch_mode(Mode.LONG_BREAK)
        assert engine.mode == Mode.WORK
        assert engine.time_remaining == 1499
        assert engine.is_running is True

    def test_does_not_touch_session_count(self, engine):
        complete_session(engine)
        engine.switch_mode(Mode.WORK)
        assert engine.completed_work_sessions == 1


# ═══════════════════════════════════════════════════════════════════════════
#  START / PAUSE / RESET
# ═══════════════════════════════════════════════════════════════════════════


class TestControls:

    def test_start_runs_tick_source(self, engine):
        engine.start()
        assert engine.is_running is True
        assert engine._qt_timer.isActive()

    def test_start_is_noop_when_running(self, engine):
        c = SignalCollector()
        engine.start()
        engine.state_changed.connect(c)
        engine.start()
        assert len(c) == 0
        assert engine.is_running is True

    def test_pause_stops_tick_source(self, engine):
        engine.start()
        engine.pause()
        assert engine.is_running is False
        assert not engine._qt_timer.isActive()

    def test_pause_is_noop_when_idle(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.pause()
        engine.pause()
        assert len(c) == 0

    def test_pause_keeps_remaining(self, engine):
        engine.start()
        engine.tick()
        engine.tick()
        engine.pause()
        assert engine.time_remaining == 1498

    def test_reset_refills_and_stops(self, engine):
        engine.switch_mode(Mode.SHORT_BREAK)
        engine.start()
        engine.tick()
        engine.reset()
        assert engine.is_running is False
        assert not engine._qt_timer.isActive()
        assert engine.mode == Mode.SHORT_BREAK
        assert engine.time_remaining == 300

    def test_reset_keeps_session_count(self, engine):
        complete_session(engine)
        complete_session(engine)
        engine.reset()
        assert engine.completed_work_sessions == 1


# ═══════════════════════════════════════════════════════════════════════════
#  TICK / COUNTDOWN
# ═══════════════════════════════════════════════════════════════════════════


class TestCountdown:

    def test_tick_decrements_remaining(self, engine):
        engine.start()
        engine.tick()
        assert engine.time_remaining == 1499

    def test_stale_ticks_after_pause_are_ignored(self, engine):
        engine.start()
        engine.tick()
        engine.pause()
        for _ in range(5):
            engine.tick()
        assert engine.time_remaining == 1499

    def test_tick_while_never_started_is_ignored(self, engine):
        engine.tick()
        assert engine.time_remaining == 1500

    @pytest.mark.parametrize("mode, next_mode", [
        (Mode.WORK, Mode.SHORT_BREAK),
        (Mode.SHORT_BREAK, Mode.WORK),
        (Mode.LONG_BREAK, Mode.WORK),
    ])
    def test_full_duration_completes_exactly_once(
        self, short_engine, signaler, mode, next_mode,
    ):
        completed = SignalCollector()
        short_engine.session_completed.connect(completed)

        short_engine.switch_mode(mode)
        short_engine.start()
        for _ in range(short_engine.duration_for(mode)):
            short_engine.tick()
        # Late ticks from the old run must not complete it again
        for _ in range(10):
            short_engine.tick()

        assert len(completed) == 1
        assert completed.last == mode
        assert signaler.calls == [mode]
        assert short_engine.mode == next_mode
        assert short_engine.time_remaining == short_engine.duration_for(next_mode)
        assert short_engine.is_running is False

    def test_1499_ticks_then_one_more(self, engine):
        engine.start()
        for _ in range(1499):
            engine.tick()
        assert engine.time_remaining == 1
        assert engine.is_running is True
        assert engine.completed_work_sessions == 0

        engine.tick()
        assert engine.mode == Mode.SHORT_BREAK
        assert engine.is_running is False
        assert engine.completed_work_sessions == 1
        assert not engine._qt_timer.isActive()

    def test_tick_signal_carries_snapshot(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        engine.tick()
        assert isinstance(c.last, TimerSnapshot)
        assert c.last.time_remaining == 1499
        assert c.last.is_running is True


# ═══════════════════════════════════════════════════════════════════════════
#  COMPLETION / CADENCE
# ═══════════════════════════════════════════════════════════════════════════


class TestCompletion:

    def test_four_session_scenario(self, engine):
        """Sessions 1-3 lead to short breaks, session 4 to a long break."""
        breaks = []
        for _ in range(4):
            assert engine.mode == Mode.WORK
            complete_session(engine)
            breaks.append(engine.mode)
            complete_session(engine)

        assert breaks == [
            Mode.SHORT_BREAK, Mode.SHORT_BREAK, Mode.SHORT_BREAK, Mode.LONG_BREAK,
        ]
        assert engine.completed_work_sessions == 4

    @pytest.mark.parametrize("cadence", [1, 2, 3, 4, 7])
    def test_long_break_every_nth_session(self, qapp, cadence):
        eng = TimerEngine(settings=Settings(sessions_before_long_break=cadence))
        for k in range(1, 3 * cadence + 2):
            complete_session(eng)
            expected = Mode.LONG_BREAK if k % cadence == 0 else Mode.SHORT_BREAK
            assert eng.mode == expected, f"session {k}"
            complete_session(eng)
            assert eng.mode == Mode.WORK

    def test_break_completion_returns_to_work(self, engine):
        engine.switch_mode(Mode.LONG_BREAK)
        complete_session(engine)
        assert engine.mode == Mode.WORK
        assert engine.time_remaining == 1500
        assert engine.completed_work_sessions == 0

    def test_switching_into_work_and_completing_counts(self, engine):
        engine.switch_mode(Mode.SHORT_BREAK)
        engine.switch_mode(Mode.WORK)
        complete_session(engine)
        assert engine.completed_work_sessions == 1

    def test_counter_never_decreases(self, engine):
        seen = [engine.completed_work_sessions]
        for step in range(12):
            if step % 3 == 0:
                engine.reset()
            if step % 4 == 1 and not engine.is_running:
                engine.switch_mode(Mode.WORK)
            complete_session(engine)
            seen.append(engine.completed_work_sessions)
        assert seen == sorted(seen)

    def test_completion_leaves_engine_idle(self, engine):
        complete_session(engine)
        assert engine.is_running is False
        assert not engine._qt_timer.isActive()

    def test_session_completed_precedes_new_state(self, engine):
        events = []
        engine.session_completed.connect(lambda m: events.append(("done", m)))
        engine.state_changed.connect(lambda s: events.append(("state", s.mode)))

        engine.start()
        engine._remaining = 1
        engine.tick()

        assert events[-2] == ("done", Mode.WORK)
        assert events[-1] == ("state", Mode.SHORT_BREAK)

    def test_signaler_failure_does_not_block_transition(self, qapp):
        signaler = RecordingSignaler(fail=True)
        eng = TimerEngine(signaler=signaler)
        complete_session(eng)
        assert signaler.calls == [Mode.WORK]
        assert eng.mode == Mode.SHORT_BREAK
        assert eng.completed_work_sessions == 1

    def test_works_without_signaler(self, qapp):
        eng = TimerEngine()
        complete_session(eng)
        assert eng.mode == Mode.SHORT_BREAK


# ═══════════════════════════════════════════════════════════════════════════
#  OBSERVERS
# ═══════════════════════════════════════════════════════════════════════════


class _Observer:
    def __init__(self):
        self.states = []
        self.completed = []

    def on_state_change(self, state):
        self.states.append(state)

    def on_session_complete(self, completed_mode):
        self.completed.append(completed_mode)


class TestObservers:

    def test_every_mutation_notifies(self, engine):
        obs = _Observer()
        engine.subscribe(obs)

        engine.switch_mode(Mode.WORK)
        engine.start()
        engine.tick()
        engine.pause()
        engine.reset()
        engine.apply_settings(Settings(work_duration=20 * 60))
        engine.complete_session()

        assert len(obs.states) == 7
        assert obs.completed == [Mode.WORK]

    def test_snapshots_are_immutable(self, engine):
        obs = _Observer()
        engine.subscribe(obs)
        engine.start()
        with pytest.raises(AttributeError):
            obs.states[-1].time_remaining = 5


# ═══════════════════════════════════════════════════════════════════════════
#  APPLY SETTINGS
# ═══════════════════════════════════════════════════════════════════════════


class TestApplySettings:

    def test_rejects_61_minute_work(self, engine, store):
        before = engine.settings
        with pytest.raises(ValidationFailed) as info:
            engine.apply_settings(Settings(work_duration=61 * 60))
        assert [v.field for v in info.value.violations] == ["work_duration"]
        assert engine.settings == before
        assert store.saved is None

    def test_idle_apply_refills_countdown(self, engine):
        engine.switch_mode(Mode.SHORT_BREAK)
        engine.apply_settings(Settings(short_break_duration=10 * 60))
        assert engine.time_remaining == 600

    def test_running_apply_keeps_countdown(self, engine):
        engine.start()
        for _ in range(100):
            engine.tick()
        engine.apply_settings(Settings(work_duration=45 * 60))
        assert engine.time_remaining == 1400
        assert engine.is_running is True

    def test_running_apply_used_for_next_mode(self, engine):
        engine.start()
        engine.apply_settings(Settings(short_break_duration=2 * 60))
        complete_session(engine)
        assert engine.time_remaining == 120

    def test_new_cadence_used_for_next_completion(self, engine):
        engine.apply_settings(Settings(sessions_before_long_break=1))
        complete_session(engine)
        assert engine.mode == Mode.LONG_BREAK

    def test_persists_to_store(self, engine, store):
        new = Settings(work_duration=30 * 60)
        engine.apply_settings(new)
        assert store.saved == new

    def test_store_failure_keeps_new_settings(self, qapp):
        store = FailingStore()
        eng = TimerEngine(store=store)
        failures = SignalCollector()
        eng.settings_save_failed.connect(failures)

        eng.apply_settings(Settings(work_duration=50 * 60))

        assert store.attempts == 1
        assert eng.settings.work_duration == 3000
        assert eng.time_remaining == 3000
        assert "No space left" in failures.last

    def test_caller_mutation_does_not_leak_in(self, engine):
        new = Settings(work_duration=30 * 60)
        engine.apply_settings(new)
        new.work_duration = 5
        assert engine.settings.work_duration == 1800


# ═══════════════════════════════════════════════════════════════════════════
#  PROGRESS
# ═══════════════════════════════════════════════════════════════════════════


class TestProgress:

    def test_starts_at_zero(self, engine):
        assert engine.progress_fraction() == 0.0

    def test_halfway(self, short_engine):
        short_engine.start()
        for _ in range(30):
            short_engine.tick()
        assert short_engine.progress_fraction() == pytest.approx(0.5)

    def test_just_before_completion(self, short_engine):
        short_engine.start()
        for _ in range(59):
            short_engine.tick()
        assert short_engine.progress_fraction() == pytest.approx(59 / 60)

    def test_clamped_after_shrinking_settings_mid_run(self, engine):
        engine.start()
        engine.apply_settings(Settings(work_duration=60))
        assert engine.progress_fraction() == 0.0

    def test_zero_duration_reports_complete(self, engine):
        engine._settings.work_duration = 0
        assert engine.progress_fraction() == 1.0
