from __future__ import annotations

import logging
from datetime import date, datetime

from kubbtrainer_core.errors import MalformedInputError
from kubbtrainer_core.inkast_blast import InkastBlastSession
from kubbtrainer_core.logging_config import log_exception
from kubbtrainer_core.phase import GamePhase
from kubbtrainer_core.practice import PracticeSession
from kubbtrainer_core.settings import load_settings

from .db import Database

logger = logging.getLogger(__name__)

ACTIVE_PRACTICE_KEY = "active_practice_session_id"
ACTIVE_INKAST_KEY = "active_inkast_blast_session_id"


class SessionManager:
    """Tracks the one active session per training kind on top of a ``Database``.

    Active ids survive restarts through the database's ``app_state`` table;
    call ``load_active_sessions`` after construction to pick them up.
    """

    def __init__(self, db: Database) -> None:
        self.db = db
        self.active_practice_session: PracticeSession | None = None
        self.active_inkast_blast_session: InkastBlastSession | None = None

    @property
    def has_active_practice_session(self) -> bool:
        return self.active_practice_session is not None

    @property
    def has_active_inkast_blast_session(self) -> bool:
        return self.active_inkast_blast_session is not None

    def load_active_sessions(self) -> None:
        self.active_practice_session = self.load_active_practice_session()
        self.active_inkast_blast_session = self.load_active_inkast_blast_session()

    def load_active_practice_session(self) -> PracticeSession | None:
        session_id = self.db.get_state(ACTIVE_PRACTICE_KEY)
        if session_id is None:
            return None
        try:
            session = self.db.read_practice_session(session_id)
        except MalformedInputError as exc:
            log_exception(logger, exc, {"session_id": session_id}, level="WARNING")
            session = None
        if session is None:
            logger.warning("Active practice session %s could not be loaded", session_id)
            self.db.clear_state(ACTIVE_PRACTICE_KEY)
        return session

    def load_active_inkast_blast_session(self) -> InkastBlastSession | None:
        session_id = self.db.get_state(ACTIVE_INKAST_KEY)
        if session_id is None:
            return None
        try:
            session = self.db.read_inkast_blast_session(session_id)
        except MalformedInputError as exc:
            log_exception(logger, exc, {"session_id": session_id}, level="WARNING")
            session = None
        if session is None:
            logger.warning("Active inkast blast session %s could not be loaded", session_id)
            self.db.clear_state(ACTIVE_INKAST_KEY)
        return session

    # 8 meter practice

    def start_practice_session(self, target: int | None = None, today: date | None = None) -> PracticeSession:
        if self.active_practice_session is not None:
            self._retire_practice_session(today)
        if target is None:
            target = load_settings().default_practice_target
        session = PracticeSession(target=target)
        self.db.create_practice_session(session)
        self.active_practice_session = session
        self.db.set_state(ACTIVE_PRACTICE_KEY, session.id)
        logger.info("Started practice session %s (target %s)", session.id, target)
        return session

    def resume_practice_session(self, session_id: str) -> PracticeSession | None:
        session = self.db.read_practice_session(session_id)
        if session is None:
            return None
        if session.is_paused:
            session.resume_session()
            self.db.update_practice_session(session)
        self.active_practice_session = session
        self.db.set_state(ACTIVE_PRACTICE_KEY, session.id)
        logger.info("Resumed practice session %s", session.id)
        return session

    def update_practice_session(self, session: PracticeSession) -> None:
        self.db.update_practice_session(session)
        self.active_practice_session = session

    def complete_practice_session(self) -> PracticeSession | None:
        session = self.active_practice_session
        if session is None:
            return None
        session.complete_session()
        self.db.update_practice_session(session)
        self._clear_active_practice()
        return session

    def pause_practice_session(self) -> None:
        if self.active_practice_session is None:
            return
        self.active_practice_session.pause_session()
        self.db.update_practice_session(self.active_practice_session)

    def delete_practice_session(self, session_id: str) -> bool:
        deleted = self.db.delete_practice_session(session_id)
        if self.active_practice_session is not None and self.active_practice_session.id == session_id:
            self._clear_active_practice()
        return deleted

    def _retire_practice_session(self, today: date | None) -> None:
        active = self.active_practice_session
        if active is None:
            return
        retired = active.with_auto_completion(today)
        if not retired.is_complete:
            retired.complete_session()
        self.db.update_practice_session(retired)
        logger.info("Auto-completed practice session %s", retired.id)
        self._clear_active_practice()

    def _clear_active_practice(self) -> None:
        self.active_practice_session = None
        self.db.clear_state(ACTIVE_PRACTICE_KEY)

    # Inkast & Blast

    def start_inkast_blast_session(self, game_phase: GamePhase, today: date | None = None) -> InkastBlastSession:
        if self.active_inkast_blast_session is not None:
            self._retire_inkast_blast_session(today)
        session = InkastBlastSession(game_phase=game_phase)
        self.db.create_inkast_blast_session(session)
        self.active_inkast_blast_session = session
        self.db.set_state(ACTIVE_INKAST_KEY, session.id)
        logger.info("Started inkast blast session %s (%s)", session.id, game_phase.value)
        return session

    def resume_inkast_blast_session(self, session_id: str) -> InkastBlastSession | None:
        session = self.db.read_inkast_blast_session(session_id)
        if session is None:
            return None
        if session.is_paused:
            session.resume_session()
            self.db.update_inkast_blast_session(session)
        self.active_inkast_blast_session = session
        self.db.set_state(ACTIVE_INKAST_KEY, session.id)
        logger.info("Resumed inkast blast session %s", session.id)
        return session

    def update_inkast_blast_session(self, session: InkastBlastSession) -> None:
        self.db.update_inkast_blast_session(session)
        self.active_inkast_blast_session = session

    def complete_inkast_blast_session(self) -> InkastBlastSession | None:
        session = self.active_inkast_blast_session
        if session is None:
            return None
        session.complete_session()
        self.db.update_inkast_blast_session(session)
        self._clear_active_inkast()
        return session

    def pause_inkast_blast_session(self) -> None:
        if self.active_inkast_blast_session is None:
            return
        self.active_inkast_blast_session.pause_session()
        self.db.update_inkast_blast_session(self.active_inkast_blast_session)

    def delete_inkast_blast_session(self, session_id: str) -> bool:
        deleted = self.db.delete_inkast_blast_session(session_id)
        if self.active_inkast_blast_session is not None and self.active_inkast_blast_session.id == session_id:
            self._clear_active_inkast()
        return deleted

    def _retire_inkast_blast_session(self, today: date | None) -> None:
        active = self.active_inkast_blast_session
        if active is None:
            return
        retired = active.with_auto_completion(today)
        if not retired.is_complete:
            retired.complete_session()
        self.db.update_inkast_blast_session(retired)
        logger.info("Auto-completed inkast blast session %s", retired.id)
        self._clear_active_inkast()

    def _clear_active_inkast(self) -> None:
        self.active_inkast_blast_session = None
        self.db.clear_state(ACTIVE_INKAST_KEY)

    # Lifecycle

    def handle_app_did_enter_background(self) -> None:
        if self.active_practice_session is not None:
            self.db.update_practice_session(self.active_practice_session)
        if self.active_inkast_blast_session is not None:
            self.db.update_inkast_blast_session(self.active_inkast_blast_session)

    def handle_app_did_become_active(self, today: date | None = None) -> None:
        """Close out active sessions left over from an earlier day."""
        practice = self.active_practice_session
        if practice is not None and not practice.is_complete:
            if practice.with_auto_completion(today).is_complete:
                self._retire_practice_session(today)
        inkast = self.active_inkast_blast_session
        if inkast is not None and not inkast.is_complete:
            if inkast.with_auto_completion(today).is_complete:
                self._retire_inkast_blast_session(today)

    # Queries

    def get_all_practice_sessions(self) -> list[PracticeSession]:
        return self.db.read_all_practice_sessions()

    def get_all_inkast_blast_sessions(self) -> list[InkastBlastSession]:
        return self.db.read_all_inkast_blast_sessions()

    def get_practice_sessions_by_date_range(self, start: datetime, end: datetime) -> list[PracticeSession]:
        return self.db.get_practice_sessions_by_date_range(start, end)

    def get_inkast_blast_sessions_by_date_range(self, start: datetime, end: datetime) -> list[InkastBlastSession]:
        return self.db.get_inkast_blast_sessions_by_date_range(start, end)

    def get_session_counts(self) -> dict[str, int]:
        return self.db.get_session_counts()
