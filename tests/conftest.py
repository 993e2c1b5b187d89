from __future__ import annotations

from datetime import date, datetime
from typing import Callable

import pytest

from kubbtrainer_core.inkast_blast import InkastBlastRound, InkastBlastSession
from kubbtrainer_core.phase import GamePhase
from kubbtrainer_core.practice import PracticeSession
from kubbtrainer_store.db import Database

H = True
M = False


# ============================================================================
# CLOCK
# ============================================================================

@pytest.fixture
def today() -> date:
    """A Wednesday; the training week started Monday 2024-06-10."""
    return date(2024, 6, 12)


# ============================================================================
# BUILDERS
# ============================================================================

def build_practice_session(
    rounds: list[list[bool]],
    when: datetime,
    target: int = 30,
    complete: bool = True,
) -> PracticeSession:
    session = PracticeSession(target=target, date=when, start_time=when)
    for index, results in enumerate(rounds):
        if index > 0:
            session.start_next_round()
        for is_hit in results:
            session.record_throw(is_hit)
    if complete:
        session.complete_session()
    return session


def build_inkast_round(
    round_number: int,
    inkast_kubbs: int,
    blasts: list[tuple[bool, int]],
    first_out: int = 0,
    second_out: int = 0,
    neighbors: int = 0,
) -> InkastBlastRound:
    rnd = InkastBlastRound(round_number=round_number, inkast_kubbs=inkast_kubbs)
    rnd.record_inkast_results(first_out, second_out, neighbors)
    for is_hit, kubbs_hit in blasts:
        rnd.add_baton_throw(is_hit, kubbs_hit)
    return rnd


def build_inkast_session(
    rounds: list[InkastBlastRound],
    when: datetime,
    phase: GamePhase = GamePhase.ALL,
    complete: bool = True,
) -> InkastBlastSession:
    session = InkastBlastSession(game_phase=phase, date=when, start_time=when)
    for rnd in rounds:
        session.add_round(rnd)
    if complete:
        session.complete_session()
    return session


@pytest.fixture
def practice_factory() -> Callable[..., PracticeSession]:
    return build_practice_session


@pytest.fixture
def inkast_round_factory() -> Callable[..., InkastBlastRound]:
    return build_inkast_round


@pytest.fixture
def inkast_session_factory() -> Callable[..., InkastBlastSession]:
    return build_inkast_session


@pytest.fixture
def practice_history() -> list[PracticeSession]:
    """Four completed one-round sessions at 100%, 83%, 50% and 17%."""
    return [
        build_practice_session([[H, H, H, H, H, H]], datetime(2024, 6, 3, 18, 0)),
        build_practice_session([[H, H, H, H, H, M]], datetime(2024, 6, 5, 18, 0)),
        build_practice_session([[H, H, H, M, M, M]], datetime(2024, 6, 10, 18, 0)),
        build_practice_session([[M, H, M, M, M, M]], datetime(2024, 6, 11, 18, 0)),
    ]


@pytest.fixture
def handicap_rounds() -> list[InkastBlastRound]:
    """One round a baton under par and one two batons over par."""
    return [
        build_inkast_round(1, 5, [(H, 3), (H, 2)], first_out=1),
        build_inkast_round(2, 2, [(M, 0), (M, 0), (H, 2)]),
    ]


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "kubb_trainer_test.db")
    yield database
    database.close()
