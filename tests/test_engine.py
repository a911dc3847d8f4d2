import pytest

from workout_log.catalog import SQLiteExerciseCatalog
from workout_log.engine import LoggerState, SessionQueueEngine
from workout_log.errors import (
    PartialPersistenceError,
    PersistenceError,
    StateError,
    ValidationError,
)
from workout_log.reducer import reduce_queue
from workout_log.session_queue import RestEntry, SetEntry
from workout_log.timer import TimerMode
from utils import RecordingGateway


@pytest.fixture
def engine(user, exercises, clock):
    return SessionQueueEngine(user, exercises, unit="lbs", clock=clock, date="2025-03-01")


def log_set(engine, clock, seconds, **raw):
    """Run the action timer for ``seconds`` and commit ``raw`` as the set."""
    if engine.state == LoggerState.ACTION_ARMED:
        engine.commit()
    clock.advance(seconds)
    for name, value in raw.items():
        setattr(engine.raw, name, value)
    return engine.commit()


def rest(engine, clock, seconds):
    clock.advance(seconds)
    return engine.commit()


def test_initial_state_is_idle(engine):
    assert engine.state == LoggerState.IDLE
    assert not engine.can_commit
    assert not engine.can_save
    with pytest.raises(StateError):
        engine.commit()


def test_select_arms_action_timer(engine):
    engine.select_exercise(1)
    assert engine.state == LoggerState.ACTION_ARMED
    assert engine.mode == TimerMode.ACTION
    assert engine.timer.elapsed_seconds == 0
    assert not engine.timer.running


def test_select_unknown_exercise(engine):
    with pytest.raises(KeyError):
        engine.select_exercise(99)


def test_first_commit_only_starts_timer(engine, clock):
    engine.select_exercise(1)
    assert engine.commit() is None
    assert engine.state == LoggerState.ACTION_RUNNING
    assert len(engine.queue) == 0
    clock.advance(3)
    assert engine.timer.elapsed_seconds == 3


def test_weight_reps_set_stored_in_kg(engine, clock):
    engine.select_exercise(1)
    entry = log_set(engine, clock, 30, weight="100", reps="10")
    assert isinstance(entry, SetEntry)
    assert entry.weight_kg == pytest.approx(45.36, abs=0.01)
    assert entry.reps == 10
    assert entry.action_time_seconds == 30
    assert engine.state == LoggerState.REST_RUNNING
    assert engine.timer.elapsed_seconds == 0
    assert engine.raw.weight == "" and engine.raw.reps == ""


def test_rest_is_attached_to_next_set(engine, clock):
    engine.select_exercise(3)
    log_set(engine, clock, 42, duration="40")
    rest_entry = rest(engine, clock, 15)
    assert isinstance(rest_entry, RestEntry)
    assert engine.state == LoggerState.ACTION_RUNNING
    log_set(engine, clock, 44, duration="40")

    rows = reduce_queue(engine.queue, session_id=1)
    assert rows[0].action_time_seconds == 42
    assert rows[0].rest_time_seconds == 0
    assert rows[1].action_time_seconds == 44
    assert rows[1].rest_time_seconds == 15


def test_zero_length_rest_is_skipped(engine, clock):
    engine.select_exercise(2)
    log_set(engine, clock, 20, reps="12")
    assert rest(engine, clock, 0) is None
    assert engine.state == LoggerState.ACTION_RUNNING
    log_set(engine, clock, 18, reps="10")

    assert not any(isinstance(e, RestEntry) for e in engine.queue)
    rows = reduce_queue(engine.queue, session_id=1)
    assert [r.rest_time_seconds for r in rows] == [0, 0]


def test_delete_first_of_three_sets_renumbers(engine, clock):
    engine.select_exercise(2)
    first = log_set(engine, clock, 10, reps="5")
    rest(engine, clock, 0)
    log_set(engine, clock, 10, reps="6")
    rest(engine, clock, 0)
    log_set(engine, clock, 10, reps="7")

    removed = engine.delete_set(first.id)
    assert removed == [first]
    rows = reduce_queue(engine.queue, session_id=1)
    assert [r.set_order for r in rows] == [1, 2]
    assert [r.reps for r in rows] == [6, 7]


def test_delete_set_with_preceding_rest_removes_both(engine, clock):
    engine.select_exercise(2)
    log_set(engine, clock, 10, reps="5")
    rest(engine, clock, 30)
    second = log_set(engine, clock, 10, reps="6")
    assert len(engine.delete_set(second.id)) == 2
    assert len(engine.queue) == 1


def test_invalid_input_keeps_timer_running(engine, clock):
    engine.select_exercise(1)
    assert log_set(engine, clock, 12, weight="100") is None
    assert engine.warning == "Enter reps"
    assert engine.state == LoggerState.ACTION_RUNNING
    clock.advance(3)
    assert engine.timer.elapsed_seconds == 15

    engine.raw.reps = "8"
    entry = engine.commit()
    assert entry.action_time_seconds == 15
    assert engine.warning == ""


def test_select_during_rest_discards_interval(engine, clock):
    engine.select_exercise(1)
    log_set(engine, clock, 30, weight="100", reps="10")
    clock.advance(25)
    engine.select_exercise(2)
    assert engine.state == LoggerState.ACTION_ARMED
    assert engine.timer.elapsed_seconds == 0
    assert len(engine.queue) == 1


def test_queue_stays_well_formed(engine, clock):
    engine.select_exercise(1)
    sets = []
    for reps in ("10", "8", "6", "4"):
        sets.append(log_set(engine, clock, 20, weight="100", reps=reps))
        rest(engine, clock, 45)
    engine.delete_set(sets[0].id)
    assert engine.queue.is_well_formed()
    engine.delete_set(sets[2].id)
    assert engine.queue.is_well_formed()
    engine.select_exercise(4)
    log_set(engine, clock, 100, distance="400", duration="95")
    assert engine.queue.is_well_formed()


def test_on_tick_receives_elapsed(user, exercises, clock):
    ticks = []
    engine = SessionQueueEngine(user, exercises, clock=clock, on_tick=ticks.append)
    engine.select_exercise(3)
    engine.commit()
    clock.advance(2)
    assert ticks == [1, 2]


def test_engine_reads_catalog_once(user, sample_db, clock):
    engine = SessionQueueEngine(user, SQLiteExerciseCatalog(sample_db), clock=clock)
    assert [ex.name for ex in engine.search("press")] == ["Bench Press"]
    engine.select_exercise(5)
    assert engine.selected.name == "Mystery Move"


def test_unknown_unit_rejected(user, exercises):
    with pytest.raises(ValueError):
        SessionQueueEngine(user, exercises, unit="stone")


def test_update_entry(engine, clock):
    engine.select_exercise(1)
    entry = log_set(engine, clock, 30, weight="100", reps="10")
    engine.update_entry(entry.id, action_time_seconds=35)
    assert entry.action_time_seconds == 35


def test_update_entry_keeps_fields_of_the_type(engine, clock):
    engine.select_exercise(3)
    entry = log_set(engine, clock, 42, duration="40")
    with pytest.raises(ValueError):
        engine.update_entry(entry.id, weight_kg=80.0, duration_seconds=None, reps=0)
    row = reduce_queue(engine.queue, session_id=1)[0]
    assert row.duration_seconds == 40
    assert row.weight_kg is None
    assert row.reps is None


def test_cancel_discards_everything(engine, clock):
    engine.select_exercise(1)
    log_set(engine, clock, 30, weight="100", reps="10")
    engine.cancel()
    assert engine.state == LoggerState.IDLE
    assert len(engine.queue) == 0
    assert clock.events == []


def test_save_writes_sets_and_clears(engine, clock, gateway):
    engine.select_exercise(1)
    log_set(engine, clock, 30, weight="100", reps="10")
    rest(engine, clock, 60)
    log_set(engine, clock, 28, weight="100", reps="8")
    clock.advance(5)

    outcome = engine.save(gateway)
    assert outcome.session_id == 1
    assert outcome.set_count == 2
    assert outcome.discarded_seconds == 5
    assert gateway.calls == ["upsert_session", "insert_sets"]
    assert gateway.modes[1] == "timed"
    rows = gateway.sets[1]
    assert [r.rest_time_seconds for r in rows] == [0, 60]
    assert engine.state == LoggerState.IDLE
    assert len(engine.queue) == 0
    assert not engine.timer.running
    assert not engine.saving


def test_save_without_sets_rejected(engine, gateway):
    with pytest.raises(StateError):
        engine.save(gateway)
    assert gateway.calls == []


def test_failed_set_insert_keeps_queue(engine, clock):
    gateway = RecordingGateway(fail_insert=True)
    engine.select_exercise(1)
    log_set(engine, clock, 30, weight="100", reps="10")
    rest(engine, clock, 60)
    log_set(engine, clock, 28, weight="100", reps="8")
    before = len(engine.queue)

    with pytest.raises(PartialPersistenceError) as excinfo:
        engine.save(gateway)
    assert excinfo.value.session_id == 1
    assert len(engine.queue) == before
    assert not engine.saving
    assert engine.timer.running


def test_failed_upsert_keeps_queue(engine, clock):
    gateway = RecordingGateway(fail_upsert=True)
    engine.select_exercise(2)
    log_set(engine, clock, 10, reps="10")
    with pytest.raises(PersistenceError):
        engine.save(gateway)
    assert gateway.calls == ["upsert_session"]
    assert len(engine.queue) == 1


def test_actions_blocked_while_saving(engine, clock):
    engine.select_exercise(2)
    entry = log_set(engine, clock, 10, reps="10")
    request = engine.begin_save()
    assert request.entries == (entry,)
    assert request.date == "2025-03-01"
    assert not engine.can_commit
    assert not engine.can_save
    with pytest.raises(StateError):
        engine.commit()
    with pytest.raises(StateError):
        engine.begin_save()
    with pytest.raises(StateError):
        engine.select_exercise(1)
    with pytest.raises(StateError):
        engine.delete_set(entry.id)

    engine.abort_save()
    assert engine.can_save
    assert len(engine.queue) == 1


def test_unreadable_date_blocks_save(engine, clock, gateway):
    engine.select_exercise(2)
    log_set(engine, clock, 10, reps="10")
    engine.date = "31/02/2025"
    with pytest.raises(ValidationError):
        engine.begin_save()
    assert not engine.saving
    assert engine.can_save
    assert "YYYY-MM-DD" in engine.warning
    assert gateway.calls == []

    engine.date = "2025-3-2"
    outcome = engine.save(gateway)
    assert ("user-1", "2025-03-02") in gateway.sessions
    assert outcome.set_count == 1


def test_form_locked_while_saving(engine, clock):
    engine.select_exercise(2)
    log_set(engine, clock, 10, reps="10")
    assert engine.can_edit
    engine.begin_save()
    assert not engine.can_edit
    engine.abort_save()
    assert engine.can_edit
