"""8 meter practice: fixed-target rounds of six batons.

A round holds at most six throws. The sixth throw is a king throw only when
the first five throws all hit (the baseline was cleared cleanly).
"""
from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any

from .clock import from_iso, is_today, now, optional_from_iso, to_iso
from .errors import (
    MalformedInputError,
    RoundAlreadyCompleteError,
    RoundInProgressError,
    SessionCompleteError,
)
from .metrics import safe_div
from .throws import BatonThrow, ThrowType

logger = logging.getLogger(__name__)

BASELINE_KUBBS = 5
ROUND_THROW_LIMIT = 6


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Round:
    round_number: int
    baton_throws: list[BatonThrow] = field(default_factory=list)
    is_complete: bool = False
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=now)

    @property
    def total_baton_throws(self) -> int:
        return len(self.baton_throws)

    @property
    def hits(self) -> int:
        return sum(1 for t in self.baton_throws if t.is_hit)

    @property
    def misses(self) -> int:
        return sum(1 for t in self.baton_throws if not t.is_hit)

    @property
    def accuracy(self) -> float:
        return safe_div(self.hits, self.total_baton_throws)

    @property
    def has_baseline_clear(self) -> bool:
        return self.hits >= BASELINE_KUBBS

    @property
    def is_perfect(self) -> bool:
        return self.total_baton_throws == ROUND_THROW_LIMIT and self.hits == ROUND_THROW_LIMIT

    @property
    def king_throws_count(self) -> int:
        return sum(1 for t in self.baton_throws if t.throw_type is ThrowType.KING)

    @property
    def king_hits(self) -> int:
        return sum(1 for t in self.baton_throws if t.throw_type is ThrowType.KING and t.is_hit)

    @property
    def king_throw_attempts(self) -> int:
        return self.king_throws_count

    @property
    def king_accuracy(self) -> float:
        return safe_div(self.king_hits, self.king_throw_attempts)

    def next_throw_type(self) -> ThrowType:
        # Decided from the state before the throw is appended.
        if self.hits >= BASELINE_KUBBS and self.total_baton_throws == BASELINE_KUBBS:
            return ThrowType.KING
        return ThrowType.KUBB

    def add_baton_throw(self, is_hit: bool, timestamp: datetime | None = None) -> BatonThrow:
        if self.is_complete:
            raise RoundAlreadyCompleteError(f"Round {self.round_number} is already complete")
        baton = BatonThrow(
            is_hit=bool(is_hit),
            throw_type=self.next_throw_type(),
            throw_number=self.total_baton_throws + 1,
            timestamp=timestamp or now(),
        )
        self.baton_throws.append(baton)
        # Six throws end the round whatever the hit count, so a separate
        # "baseline cleared and six thrown" check would never change the result.
        if self.total_baton_throws >= ROUND_THROW_LIMIT:
            self.is_complete = True
            logger.info(
                "Round %s complete: %s/%s hits, king %s",
                self.round_number,
                self.hits,
                self.total_baton_throws,
                "attempted" if self.king_throw_attempts else "not earned",
            )
        return baton

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "round_number": self.round_number,
            "baton_throws": [t.to_dict() for t in self.baton_throws],
            "created_at": self.created_at.isoformat(),
            "is_complete": self.is_complete,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Round":
        try:
            throws = [BatonThrow.from_dict(t) for t in data["baton_throws"]]
            return cls(
                id=str(data["id"]),
                round_number=int(data["round_number"]),
                baton_throws=throws,
                created_at=from_iso(data["created_at"], "created_at"),
                is_complete=bool(data["is_complete"]),
            )
        except MalformedInputError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedInputError(f"Invalid round payload: {exc}") from exc


@dataclass
class PracticeSession:
    target: int
    id: str = field(default_factory=_new_id)
    date: datetime = field(default_factory=now)
    total_kubbs: int = 0
    total_batons: int = 0
    start_time: datetime = field(default_factory=now)
    end_time: datetime | None = None
    is_complete: bool = False
    is_paused: bool = False
    rounds: list[Round] = field(default_factory=list)
    created_at: datetime = field(default_factory=now)
    modified_at: datetime = field(default_factory=now)
    active_round_index: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.target < 0:
            raise MalformedInputError(f"target must be non-negative, got {self.target}")
        if not self.rounds:
            self.rounds.append(Round(round_number=1))
        self.active_round_index = self._locate_active_round()

    def _locate_active_round(self) -> int:
        for index, rnd in enumerate(self.rounds):
            if not rnd.is_complete:
                return index
        return len(self.rounds) - 1

    # Derived values

    @property
    def accuracy(self) -> float:
        return safe_div(self.total_kubbs, self.total_batons)

    @property
    def progress_percentage(self) -> float:
        if self.target == 0:
            return 0.0
        return min(1.0, max(0.0, self.total_batons / self.target))

    @property
    def is_target_reached(self) -> bool:
        return self.total_batons >= self.target

    def is_incomplete(self, today: date | None = None) -> bool:
        return is_today(self.date, today) and (self.is_paused or not self.is_target_reached)

    @property
    def active_round(self) -> Round:
        return self.rounds[self.active_round_index]

    @property
    def current_round(self) -> Round | None:
        rnd = self.active_round
        return None if rnd.is_complete else rnd

    @property
    def completed_rounds(self) -> list[Round]:
        return [r for r in self.rounds if r.is_complete]

    @property
    def total_baseline_clears(self) -> int:
        return sum(1 for r in self.rounds if r.has_baseline_clear)

    @property
    def total_king_throws(self) -> int:
        return sum(r.king_throws_count for r in self.rounds)

    @property
    def total_king_hits(self) -> int:
        return sum(r.king_hits for r in self.rounds)

    @property
    def total_king_throw_attempts(self) -> int:
        return sum(r.king_throw_attempts for r in self.rounds)

    @property
    def king_accuracy(self) -> float:
        return safe_div(self.total_king_hits, self.total_king_throw_attempts)

    def all_throws(self) -> list[BatonThrow]:
        return [t for r in self.rounds for t in r.baton_throws]

    def totals_consistent(self) -> bool:
        throws = self.all_throws()
        return self.total_batons == len(throws) and self.total_kubbs == sum(1 for t in throws if t.is_hit)

    # Mutations

    def _touch(self) -> None:
        self.modified_at = now()

    def _require_open(self) -> None:
        if self.is_complete:
            raise SessionCompleteError(f"Session {self.id} is already complete")

    def record_throw(self, is_hit: bool) -> Round:
        """Append a throw to the active round and return that round.

        The returned round's ``is_complete`` flag tells the caller whether
        this throw finished it.
        """
        self._require_open()
        rnd = self.active_round
        rnd.add_baton_throw(is_hit)
        self.total_batons += 1
        if is_hit:
            self.total_kubbs += 1
        self._touch()
        return rnd

    def start_next_round(self) -> Round:
        self._require_open()
        previous = self.active_round
        if not previous.is_complete:
            raise RoundInProgressError(f"Round {previous.round_number} is still open")
        rnd = Round(round_number=previous.round_number + 1)
        self.rounds.append(rnd)
        self.active_round_index = len(self.rounds) - 1
        self._touch()
        return rnd

    def reset_current_round(self) -> Round:
        self._require_open()
        old = self.active_round
        self.total_batons -= old.total_baton_throws
        self.total_kubbs -= old.hits
        fresh = Round(round_number=old.round_number)
        self.rounds[self.active_round_index] = fresh
        self._touch()
        logger.debug("Reset round %s of session %s", old.round_number, self.id)
        return fresh

    def complete_session(self) -> None:
        self._require_open()
        self.is_complete = True
        self.is_paused = False
        self.end_time = now()
        self._touch()
        logger.info("Practice session %s complete: %s/%s", self.id, self.total_kubbs, self.total_batons)

    def pause_session(self) -> None:
        self._require_open()
        self.is_paused = True
        self._touch()

    def resume_session(self) -> None:
        self._require_open()
        self.is_paused = False
        self._touch()

    def end_session_early(self) -> None:
        self._require_open()
        self.end_time = now()
        self._touch()

    def with_auto_completion(self, today: date | None = None) -> "PracticeSession":
        """Return a completed copy when the session belongs to an earlier day.

        ``modified_at`` is carried over unchanged so the derived view never
        looks like a fresh edit.
        """
        if is_today(self.date, today) or self.is_complete:
            return self
        return replace(
            self,
            rounds=copy.deepcopy(self.rounds),
            end_time=self.end_time or now(),
            is_complete=True,
            is_paused=False,
        )

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "target": self.target,
            "total_kubbs": self.total_kubbs,
            "total_batons": self.total_batons,
            "start_time": self.start_time.isoformat(),
            "end_time": to_iso(self.end_time),
            "is_complete": self.is_complete,
            "is_paused": self.is_paused,
            "rounds": [r.to_dict() for r in self.rounds],
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PracticeSession":
        try:
            session = cls(
                id=str(data["id"]),
                date=from_iso(data["date"], "date"),
                target=int(data["target"]),
                total_kubbs=int(data["total_kubbs"]),
                total_batons=int(data["total_batons"]),
                start_time=from_iso(data["start_time"], "start_time"),
                end_time=optional_from_iso(data.get("end_time"), "end_time"),
                is_complete=bool(data["is_complete"]),
                is_paused=bool(data["is_paused"]),
                rounds=[Round.from_dict(r) for r in data["rounds"]],
                created_at=from_iso(data["created_at"], "created_at"),
                modified_at=from_iso(data["modified_at"], "modified_at"),
            )
        except MalformedInputError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedInputError(f"Invalid practice session payload: {exc}") from exc
        if not session.totals_consistent():
            throws = session.all_throws()
            logger.warning(
                "Practice session %s totals out of sync (%s/%s), recomputing from throws",
                session.id,
                session.total_kubbs,
                session.total_batons,
            )
            session.total_batons = len(throws)
            session.total_kubbs = sum(1 for t in throws if t.is_hit)
        return session
