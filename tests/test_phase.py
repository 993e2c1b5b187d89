import random

import pytest

from kubbtrainer_core.errors import MalformedInputError
from kubbtrainer_core.phase import (
    CLASSIFIED_PHASES,
    PHASE_RANGES,
    GamePhase,
    display_name,
    generate_kubb_count,
    parse_phase,
    phase_of,
)


@pytest.mark.parametrize(
    "kubbs, expected",
    [
        (1, GamePhase.EARLY),
        (3, GamePhase.EARLY),
        (4, GamePhase.MID),
        (7, GamePhase.MID),
        (8, GamePhase.END),
        (10, GamePhase.END),
        (0, None),
        (11, None),
    ],
)
def test_phase_of_buckets_by_kubb_count(kubbs, expected):
    assert phase_of(kubbs) is expected


def test_all_phase_covers_every_classified_range():
    low, high = PHASE_RANGES[GamePhase.ALL]
    assert (low, high) == (1, 10)
    assert GamePhase.ALL not in CLASSIFIED_PHASES
    for kubbs in range(low, high + 1):
        assert phase_of(kubbs) in CLASSIFIED_PHASES


def test_generate_kubb_count_stays_in_range():
    rng = random.Random(42)
    draws = [generate_kubb_count(4, 7, rng) for _ in range(200)]
    assert min(draws) >= 4
    assert max(draws) <= 7
    assert set(draws) == {4, 5, 6, 7}


def test_generate_kubb_count_rejects_bad_range():
    with pytest.raises(ValueError):
        generate_kubb_count(5, 3)
    with pytest.raises(ValueError):
        generate_kubb_count(0, 3)


def test_parse_phase_accepts_values_and_display_names():
    assert parse_phase("mid") is GamePhase.MID
    assert parse_phase("End Game") is GamePhase.END
    assert display_name(GamePhase.ALL) == "All Phases"
    with pytest.raises(MalformedInputError):
        parse_phase("overtime")
