from __future__ import annotations

import random
from enum import Enum

from .errors import MalformedInputError


class GamePhase(str, Enum):
    EARLY = "early"
    MID = "mid"
    END = "end"
    ALL = "all"


# (min_kubbs, max_kubbs) inclusive
PHASE_RANGES: dict[GamePhase, tuple[int, int]] = {
    GamePhase.EARLY: (1, 3),
    GamePhase.MID: (4, 7),
    GamePhase.END: (8, 10),
    GamePhase.ALL: (1, 10),
}

PHASE_DISPLAY_NAMES: dict[GamePhase, str] = {
    GamePhase.EARLY: "Early Game",
    GamePhase.MID: "Mid Game",
    GamePhase.END: "End Game",
    GamePhase.ALL: "All Phases",
}

PHASE_DESCRIPTIONS: dict[GamePhase, str] = {
    GamePhase.EARLY: "Practice with 1-3 kubbs",
    GamePhase.MID: "Practice with 4-7 kubbs",
    GamePhase.END: "Practice with 8-10 kubbs",
    GamePhase.ALL: "Practice with 1-10 kubbs (random)",
}

# Phases a round can be bucketed into. ALL is only a filter value.
CLASSIFIED_PHASES: tuple[GamePhase, ...] = (GamePhase.EARLY, GamePhase.MID, GamePhase.END)


def phase_of(kubb_count: int) -> GamePhase | None:
    for phase in CLASSIFIED_PHASES:
        low, high = PHASE_RANGES[phase]
        if low <= kubb_count <= high:
            return phase
    return None


def phase_range(phase: GamePhase) -> tuple[int, int]:
    return PHASE_RANGES[phase]


def display_name(phase: GamePhase) -> str:
    return PHASE_DISPLAY_NAMES[phase]


def generate_kubb_count(min_kubbs: int, max_kubbs: int, rng: random.Random | None = None) -> int:
    if min_kubbs < 1 or max_kubbs < min_kubbs:
        raise ValueError(f"Invalid kubb range: {min_kubbs}-{max_kubbs}")
    source = rng or random
    return source.randint(min_kubbs, max_kubbs)


def parse_phase(raw: str) -> GamePhase:
    token = str(raw).strip().lower()
    try:
        return GamePhase(token)
    except ValueError:
        for phase, name in PHASE_DISPLAY_NAMES.items():
            if name.lower() == token:
                return phase
    raise MalformedInputError(f"Unknown game phase: {raw!r}")
