"""Inkast & Blast: progressive rounds with a variable number of kubbs.

Each round starts with an inkast of 1-10 kubbs. Kubbs still out of bounds
after the second inkast attempt become penalty kubbs and must be cleared
along with the in-bounds ones. Par for the blast depends on the kubb count.
"""
from __future__ import annotations

import copy
import logging
import math
import random
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any

from .clock import from_iso, is_today, now, optional_from_iso, to_iso
from .errors import (
    InvalidOperationError,
    MalformedInputError,
    RoundAlreadyCompleteError,
    RoundInProgressError,
    SessionCompleteError,
)
from .metrics import safe_div
from .phase import GamePhase, generate_kubb_count, parse_phase, phase_of, phase_range
from .throws import InkastBatonThrow

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def target_batons(inkast_kubbs: int) -> int:
    """Par for clearing ``inkast_kubbs`` kubbs."""
    if inkast_kubbs in (1, 2):
        return 1
    if inkast_kubbs in (3, 4):
        return 2
    if 5 <= inkast_kubbs <= 7:
        return 3
    if 8 <= inkast_kubbs <= 10:
        return 4
    return math.ceil((inkast_kubbs + 1) / 2)


@dataclass
class InkastBlastRound:
    round_number: int
    inkast_kubbs: int
    kubbs_out_first_attempt: int = 0
    kubbs_out_second_attempt: int = 0
    neighbor_kubbs: int = 0
    is_complete: bool = False
    baton_throws: list[InkastBatonThrow] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=now)

    def __post_init__(self) -> None:
        if self.inkast_kubbs < 1:
            raise MalformedInputError(f"inkast_kubbs must be at least 1, got {self.inkast_kubbs}")

    # Inkast figures

    @property
    def penalty_kubbs(self) -> int:
        return self.kubbs_out_second_attempt

    @property
    def total_kubbs_in_bounds(self) -> int:
        return self.inkast_kubbs - self.penalty_kubbs

    @property
    def kubbs_to_clear(self) -> int:
        return self.total_kubbs_in_bounds + self.penalty_kubbs

    @property
    def kubbs_out_of_bounds(self) -> int:
        return self.kubbs_out_first_attempt + self.kubbs_out_second_attempt

    # Blast figures

    @property
    def batons_used(self) -> int:
        return len(self.baton_throws)

    @property
    def misses(self) -> int:
        return sum(1 for t in self.baton_throws if not t.is_hit)

    @property
    def kubbs_cleared_first_throw(self) -> int:
        # Cumulative over every hit; the name is kept from the stored format.
        return sum(t.kubbs_knocked_down for t in self.baton_throws)

    @property
    def total_kubbs_knocked_down(self) -> int:
        return self.kubbs_cleared_first_throw

    @property
    def kubbs_remaining(self) -> int:
        return max(0, self.kubbs_to_clear - self.kubbs_cleared_first_throw)

    @property
    def initial_blast(self) -> int:
        if not self.baton_throws:
            return 0
        return self.baton_throws[0].kubbs_knocked_down

    @property
    def average_kubbs_per_baton(self) -> float:
        return safe_div(self.total_kubbs_knocked_down, self.batons_used)

    @property
    def target_batons(self) -> int:
        return target_batons(self.inkast_kubbs)

    @property
    def performance_vs_target(self) -> int:
        """Batons under par; positive is good, negative means over par."""
        return self.target_batons - self.batons_used

    @property
    def is_under_target(self) -> bool:
        return self.batons_used < self.target_batons

    @property
    def is_over_target(self) -> bool:
        return self.batons_used > self.target_batons

    @property
    def phase(self) -> GamePhase | None:
        return phase_of(self.inkast_kubbs)

    # Mutations

    def record_inkast_results(self, first_attempt_out: int, second_attempt_out: int, neighbors: int) -> None:
        if self.is_complete:
            raise RoundAlreadyCompleteError(f"Round {self.round_number} is already complete")
        if self.baton_throws:
            raise InvalidOperationError(f"Round {self.round_number} is already being blasted")
        if min(first_attempt_out, second_attempt_out, neighbors) < 0:
            raise MalformedInputError("Inkast counts must be non-negative")
        if first_attempt_out > self.inkast_kubbs:
            raise MalformedInputError(
                f"{first_attempt_out} kubbs out on the first attempt but only {self.inkast_kubbs} thrown"
            )
        if second_attempt_out > first_attempt_out:
            raise MalformedInputError(
                f"{second_attempt_out} kubbs out on the second attempt but only {first_attempt_out} re-thrown"
            )
        if neighbors > self.inkast_kubbs:
            raise MalformedInputError(f"{neighbors} neighbor kubbs but only {self.inkast_kubbs} thrown")
        self.kubbs_out_first_attempt = first_attempt_out
        self.kubbs_out_second_attempt = second_attempt_out
        self.neighbor_kubbs = neighbors

    def add_baton_throw(self, is_hit: bool, kubbs_hit: int = 0, timestamp: datetime | None = None) -> InkastBatonThrow:
        if self.is_complete:
            raise RoundAlreadyCompleteError(f"Round {self.round_number} is already complete")
        if kubbs_hit < 0:
            raise MalformedInputError(f"kubbs_hit must be non-negative, got {kubbs_hit}")
        counted = kubbs_hit if is_hit else 0
        if counted > self.kubbs_remaining:
            logger.debug(
                "Round %s: clamping kubbs_hit %s to %s remaining",
                self.round_number,
                counted,
                self.kubbs_remaining,
            )
            counted = self.kubbs_remaining
        baton = InkastBatonThrow(
            is_hit=bool(is_hit),
            kubbs_hit=counted,
            throw_number=self.batons_used + 1,
            timestamp=timestamp or now(),
        )
        self.baton_throws.append(baton)
        if self.kubbs_cleared_first_throw >= self.kubbs_to_clear:
            self.is_complete = True
            logger.info(
                "Inkast round %s complete: %s kubbs in %s batons (par %s)",
                self.round_number,
                self.inkast_kubbs,
                self.batons_used,
                self.target_batons,
            )
        return baton

    def reset_round(self) -> None:
        self.kubbs_out_first_attempt = 0
        self.kubbs_out_second_attempt = 0
        self.neighbor_kubbs = 0
        self.baton_throws = []
        self.is_complete = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "round_number": self.round_number,
            "inkast_kubbs": self.inkast_kubbs,
            "kubbs_out_first_attempt": self.kubbs_out_first_attempt,
            "kubbs_out_second_attempt": self.kubbs_out_second_attempt,
            "penalty_kubbs": self.penalty_kubbs,
            "neighbor_kubbs": self.neighbor_kubbs,
            "kubbs_cleared_first_throw": self.kubbs_cleared_first_throw,
            "batons_used": self.batons_used,
            "misses": self.misses,
            "is_complete": self.is_complete,
            "baton_throws": [t.to_dict() for t in self.baton_throws],
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InkastBlastRound":
        try:
            return cls(
                id=str(data["id"]),
                round_number=int(data["round_number"]),
                inkast_kubbs=int(data["inkast_kubbs"]),
                kubbs_out_first_attempt=int(data["kubbs_out_first_attempt"]),
                kubbs_out_second_attempt=int(data["kubbs_out_second_attempt"]),
                neighbor_kubbs=int(data["neighbor_kubbs"]),
                is_complete=bool(data["is_complete"]),
                baton_throws=[InkastBatonThrow.from_dict(t) for t in data["baton_throws"]],
                created_at=from_iso(data["created_at"], "created_at"),
            )
        except MalformedInputError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedInputError(f"Invalid inkast round payload: {exc}") from exc


_TOTAL_FIELDS = (
    ("total_inkast_kubbs", "inkast_kubbs"),
    ("total_kubbs_cleared_first_throw", "kubbs_cleared_first_throw"),
    ("total_batons_used", "batons_used"),
    ("total_penalty_kubbs", "penalty_kubbs"),
    ("total_neighbor_kubbs", "neighbor_kubbs"),
    ("total_misses", "misses"),
)


@dataclass
class InkastBlastSession:
    game_phase: GamePhase
    id: str = field(default_factory=_new_id)
    date: datetime = field(default_factory=now)
    start_time: datetime = field(default_factory=now)
    end_time: datetime | None = None
    is_complete: bool = False
    is_paused: bool = False
    total_rounds: int = 0
    total_inkast_kubbs: int = 0
    total_kubbs_cleared_first_throw: int = 0
    total_batons_used: int = 0
    total_penalty_kubbs: int = 0
    total_neighbor_kubbs: int = 0
    total_misses: int = 0
    rounds: list[InkastBlastRound] = field(default_factory=list)
    created_at: datetime = field(default_factory=now)
    modified_at: datetime = field(default_factory=now)

    # Derived values

    @property
    def completed_rounds(self) -> list[InkastBlastRound]:
        return [r for r in self.rounds if r.is_complete]

    @property
    def total_kubbs_knocked_down(self) -> int:
        return sum(r.total_kubbs_knocked_down for r in self.rounds)

    @property
    def average_kubbs_per_baton(self) -> float:
        return safe_div(self.total_kubbs_knocked_down, self.total_batons_used)

    @property
    def average_kubbs_per_round(self) -> float:
        return safe_div(self.total_inkast_kubbs, self.total_rounds)

    @property
    def average_batons_per_round(self) -> float:
        return safe_div(self.total_batons_used, self.total_rounds)

    @property
    def penalty_rate(self) -> float:
        return safe_div(self.total_penalty_kubbs, self.total_inkast_kubbs)

    @property
    def neighbor_rate(self) -> float:
        return safe_div(self.total_neighbor_kubbs, self.total_inkast_kubbs)

    @property
    def kubbs_out_of_bounds(self) -> int:
        return sum(r.kubbs_out_first_attempt + r.kubbs_out_second_attempt for r in self.rounds)

    @property
    def first_inkast_accuracy(self) -> float:
        first_out = sum(r.kubbs_out_first_attempt for r in self.rounds)
        return safe_div(self.total_inkast_kubbs - first_out, self.total_inkast_kubbs)

    def a_lines_left(self, baton_limit: int = 6) -> int:
        return sum(1 for r in self.rounds if r.batons_used > baton_limit)

    def is_incomplete(self, today: date | None = None) -> bool:
        return is_today(self.date, today) and (self.is_paused or not self.is_complete)

    def totals_consistent(self) -> bool:
        if self.total_rounds != len(self.rounds):
            return False
        return all(
            getattr(self, total) == sum(getattr(r, attr) for r in self.rounds) for total, attr in _TOTAL_FIELDS
        )

    def _resync_totals(self) -> None:
        self.total_rounds = len(self.rounds)
        for total, attr in _TOTAL_FIELDS:
            setattr(self, total, sum(getattr(r, attr) for r in self.rounds))

    # Mutations

    def _touch(self) -> None:
        self.modified_at = now()

    def _require_open(self) -> None:
        if self.is_complete:
            raise SessionCompleteError(f"Session {self.id} is already complete")

    def next_round(self, rng: random.Random | None = None) -> InkastBlastRound:
        """Draw a new round for this session's phase. It is not added yet."""
        low, high = phase_range(self.game_phase)
        kubbs = generate_kubb_count(low, high, rng)
        logger.debug("Generated %s kubbs (range %s-%s) for round %s", kubbs, low, high, len(self.rounds) + 1)
        return InkastBlastRound(round_number=len(self.rounds) + 1, inkast_kubbs=kubbs)

    def add_round(self, rnd: InkastBlastRound) -> None:
        self._require_open()
        if not rnd.is_complete or rnd.kubbs_remaining > 0:
            raise RoundInProgressError(f"Round {rnd.round_number} is still open")
        if any(r.id == rnd.id for r in self.rounds):
            raise InvalidOperationError(f"Round {rnd.id} was already added")
        folded = copy.deepcopy(rnd)
        self.rounds.append(folded)
        self.total_rounds += 1
        for total, attr in _TOTAL_FIELDS:
            setattr(self, total, getattr(self, total) + getattr(folded, attr))
        self._touch()

    def complete_session(self) -> None:
        self._require_open()
        self.is_complete = True
        self.is_paused = False
        self.end_time = now()
        self._touch()
        logger.info("Inkast & Blast session %s complete after %s rounds", self.id, self.total_rounds)

    def pause_session(self) -> None:
        self._require_open()
        # end_time doubles as the "last active" marker while paused.
        self.is_paused = True
        self.end_time = now()
        self._touch()

    def resume_session(self) -> None:
        self._require_open()
        self.is_paused = False
        self.end_time = None
        self._touch()

    def end_session_early(self) -> None:
        self._require_open()
        self.end_time = now()
        self._touch()

    def with_auto_completion(self, today: date | None = None) -> "InkastBlastSession":
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
            "game_phase": self.game_phase.value,
            "start_time": self.start_time.isoformat(),
            "end_time": to_iso(self.end_time),
            "is_complete": self.is_complete,
            "is_paused": self.is_paused,
            "total_rounds": self.total_rounds,
            "total_inkast_kubbs": self.total_inkast_kubbs,
            "total_kubbs_cleared_first_throw": self.total_kubbs_cleared_first_throw,
            "total_batons_used": self.total_batons_used,
            "total_penalty_kubbs": self.total_penalty_kubbs,
            "total_neighbor_kubbs": self.total_neighbor_kubbs,
            "total_misses": self.total_misses,
            "rounds": [r.to_dict() for r in self.rounds],
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InkastBlastSession":
        try:
            session = cls(
                id=str(data["id"]),
                date=from_iso(data["date"], "date"),
                game_phase=parse_phase(data["game_phase"]),
                start_time=from_iso(data["start_time"], "start_time"),
                end_time=optional_from_iso(data.get("end_time"), "end_time"),
                is_complete=bool(data["is_complete"]),
                is_paused=bool(data["is_paused"]),
                total_rounds=int(data["total_rounds"]),
                total_inkast_kubbs=int(data["total_inkast_kubbs"]),
                total_kubbs_cleared_first_throw=int(data["total_kubbs_cleared_first_throw"]),
                total_batons_used=int(data["total_batons_used"]),
                total_penalty_kubbs=int(data["total_penalty_kubbs"]),
                total_neighbor_kubbs=int(data["total_neighbor_kubbs"]),
                total_misses=int(data["total_misses"]),
                rounds=[InkastBlastRound.from_dict(r) for r in data["rounds"]],
                created_at=from_iso(data["created_at"], "created_at"),
                modified_at=from_iso(data["modified_at"], "modified_at"),
            )
        except MalformedInputError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedInputError(f"Invalid inkast session payload: {exc}") from exc
        if not session.totals_consistent():
            logger.warning("Inkast session %s totals out of sync, recomputing from rounds", session.id)
            session._resync_totals()
        return session
