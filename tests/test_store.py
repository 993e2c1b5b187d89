from datetime import date, datetime, timedelta

import pytest

from kubbtrainer_core.errors import MalformedInputError
from kubbtrainer_core.phase import GamePhase
from kubbtrainer_core.practice import PracticeSession
from kubbtrainer_store.db import Database
from kubbtrainer_store.session_manager import ACTIVE_INKAST_KEY, ACTIVE_PRACTICE_KEY, SessionManager

H = True
M = False


# ============================================================================
# DATABASE
# ============================================================================

def test_practice_session_round_trip(db, practice_factory):
    session = practice_factory([[H, H, H, H, H, H], [M, H]], datetime(2024, 6, 10, 18, 0), complete=False)
    session.pause_session()
    db.create_practice_session(session)
    loaded = db.read_practice_session(session.id)
    assert loaded == session
    assert loaded.is_paused is True
    assert db.read_practice_session("missing") is None


def test_practice_update_and_delete(db, practice_factory):
    session = practice_factory([[H]], datetime(2024, 6, 10, 18, 0), complete=False)
    db.create_practice_session(session)
    session.record_throw(M)
    assert db.update_practice_session(session) is True
    assert db.read_practice_session(session.id).total_batons == 2

    ghost = PracticeSession(target=5)
    assert db.update_practice_session(ghost) is False
    assert db.delete_practice_session(session.id) is True
    assert db.delete_practice_session(session.id) is False


def test_save_is_an_upsert(db, practice_factory):
    session = practice_factory([[H]], datetime(2024, 6, 10, 18, 0))
    db.save_practice_session(session)
    db.save_practice_session(session)
    assert db.get_session_counts()["practice"] == 1


def test_read_all_newest_first(db, practice_history):
    for session in practice_history:
        db.create_practice_session(session)
    loaded = db.read_all_practice_sessions()
    assert [s.id for s in loaded] == [s.id for s in reversed(practice_history)]


def test_date_range_queries(db, practice_history, handicap_rounds, inkast_session_factory):
    for session in practice_history:
        db.create_practice_session(session)
    inkast = inkast_session_factory(handicap_rounds, datetime(2024, 6, 11, 18, 0))
    db.create_inkast_blast_session(inkast)

    week = db.get_practice_sessions_by_date_range(datetime(2024, 6, 10), datetime(2024, 6, 16, 23, 59))
    assert len(week) == 2
    assert len(db.get_inkast_blast_sessions_by_date_range(datetime(2024, 6, 10), datetime(2024, 6, 12))) == 1
    assert db.get_inkast_blast_sessions_by_date_range(datetime(2024, 5, 1), datetime(2024, 5, 31)) == []


def test_inkast_session_round_trip(db, handicap_rounds, inkast_session_factory):
    session = inkast_session_factory(handicap_rounds, datetime(2024, 6, 11, 18, 0), phase=GamePhase.MID)
    db.create_inkast_blast_session(session)
    loaded = db.read_inkast_blast_session(session.id)
    assert loaded == session
    assert loaded.game_phase is GamePhase.MID
    assert loaded.totals_consistent()


def test_counts_and_delete_all(db, practice_history, handicap_rounds, inkast_session_factory):
    for session in practice_history:
        db.create_practice_session(session)
    db.create_inkast_blast_session(inkast_session_factory(handicap_rounds, datetime(2024, 6, 11, 18, 0)))
    db.set_state(ACTIVE_PRACTICE_KEY, practice_history[0].id)
    assert db.get_session_counts() == {"practice": 4, "inkast_blast": 1}

    db.delete_all_sessions()
    assert db.get_session_counts() == {"practice": 0, "inkast_blast": 0}
    assert db.get_state(ACTIVE_PRACTICE_KEY) is None


def test_corrupt_rounds_payload_raises(db):
    session = PracticeSession(target=5)
    db.create_practice_session(session)
    db.execute("UPDATE practice_sessions SET rounds = ? WHERE id = ?", ('[{"round_number": 1}]', session.id))
    with pytest.raises(MalformedInputError):
        db.read_practice_session(session.id)


def test_database_reopens_existing_file(tmp_path):
    path = tmp_path / "kubb.db"
    first = Database(path)
    session = PracticeSession(target=5)
    first.create_practice_session(session)
    first.close()

    second = Database(path)
    assert second.read_practice_session(session.id) == session
    second.close()


# ============================================================================
# SESSION MANAGER
# ============================================================================

def test_start_practice_uses_default_target(db):
    manager = SessionManager(db)
    session = manager.start_practice_session()
    assert session.target == 30
    assert manager.has_active_practice_session
    assert db.get_state(ACTIVE_PRACTICE_KEY) == session.id


def test_starting_new_session_completes_previous(db):
    manager = SessionManager(db)
    first = manager.start_practice_session(target=10)
    first.record_throw(H)
    manager.update_practice_session(first)
    second = manager.start_practice_session(target=20)

    stored = db.read_practice_session(first.id)
    assert stored.is_complete
    assert stored.total_batons == 1
    assert manager.active_practice_session is second
    assert db.get_state(ACTIVE_PRACTICE_KEY) == second.id


def test_active_sessions_survive_restart(db):
    manager = SessionManager(db)
    practice = manager.start_practice_session(target=10)
    inkast = manager.start_inkast_blast_session(GamePhase.EARLY)

    restarted = SessionManager(db)
    restarted.load_active_sessions()
    assert restarted.active_practice_session.id == practice.id
    assert restarted.active_inkast_blast_session.id == inkast.id


def test_missing_active_session_clears_pointer(db):
    db.set_state(ACTIVE_INKAST_KEY, "gone")
    manager = SessionManager(db)
    manager.load_active_sessions()
    assert manager.active_inkast_blast_session is None
    assert db.get_state(ACTIVE_INKAST_KEY) is None


def test_corrupt_active_session_clears_pointer(db, caplog):
    session = PracticeSession(target=5)
    db.create_practice_session(session)
    db.set_state(ACTIVE_PRACTICE_KEY, session.id)
    db.execute("UPDATE practice_sessions SET start_time = ? WHERE id = ?", ("not a time", session.id))

    manager = SessionManager(db)
    manager.load_active_sessions()
    assert manager.active_practice_session is None
    assert db.get_state(ACTIVE_PRACTICE_KEY) is None
    assert "MalformedInputError" in caplog.text


def test_pause_resume_complete_inkast(db, inkast_round_factory):
    manager = SessionManager(db)
    session = manager.start_inkast_blast_session(GamePhase.MID)
    session.add_round(inkast_round_factory(1, 5, [(H, 5)]))
    manager.update_inkast_blast_session(session)

    manager.pause_inkast_blast_session()
    stored = db.read_inkast_blast_session(session.id)
    assert stored.is_paused
    assert stored.end_time is not None

    resumed = manager.resume_inkast_blast_session(session.id)
    assert not resumed.is_paused
    assert resumed.end_time is None
    assert not db.read_inkast_blast_session(session.id).is_paused

    completed = manager.complete_inkast_blast_session()
    assert completed.is_complete
    assert manager.active_inkast_blast_session is None
    assert db.read_inkast_blast_session(session.id).total_rounds == 1
    assert manager.complete_inkast_blast_session() is None


def test_pause_and_resume_practice(db):
    manager = SessionManager(db)
    session = manager.start_practice_session(target=10)
    manager.pause_practice_session()
    assert db.read_practice_session(session.id).is_paused
    assert manager.resume_practice_session(session.id).is_paused is False
    assert manager.resume_practice_session("missing") is None
    manager.complete_practice_session()
    assert db.read_practice_session(session.id).is_complete
    assert db.get_state(ACTIVE_PRACTICE_KEY) is None


def test_app_becoming_active_retires_stale_sessions(db):
    manager = SessionManager(db)
    practice = manager.start_practice_session(target=10)
    inkast = manager.start_inkast_blast_session(GamePhase.ALL)

    manager.handle_app_did_become_active(today=date.today())
    assert manager.active_practice_session is practice
    assert manager.active_inkast_blast_session is inkast

    manager.handle_app_did_become_active(today=date.today() + timedelta(days=1))
    assert manager.active_practice_session is None
    assert manager.active_inkast_blast_session is None
    assert db.read_practice_session(practice.id).is_complete
    assert db.read_inkast_blast_session(inkast.id).is_complete


def test_background_saves_active_sessions(db):
    manager = SessionManager(db)
    session = manager.start_practice_session(target=10)
    session.record_throw(H)
    manager.handle_app_did_enter_background()
    assert db.read_practice_session(session.id).total_kubbs == 1


def test_delete_active_session_clears_it(db):
    manager = SessionManager(db)
    session = manager.start_inkast_blast_session(GamePhase.END)
    assert manager.delete_inkast_blast_session(session.id) is True
    assert manager.active_inkast_blast_session is None
    assert db.get_state(ACTIVE_INKAST_KEY) is None
    assert manager.get_session_counts() == {"practice": 0, "inkast_blast": 0}


def test_manager_queries_delegate_to_store(db, practice_history):
    for session in practice_history:
        db.create_practice_session(session)
    manager = SessionManager(db)
    assert len(manager.get_all_practice_sessions()) == 4
    assert manager.get_all_inkast_blast_sessions() == []
    week = manager.get_practice_sessions_by_date_range(datetime(2024, 6, 10), datetime(2024, 6, 17))
    assert {s.id for s in week} == {s.id for s in practice_history[2:]}
