"""Statistics over Inkast & Blast history.

Handicap sign conventions live here and nowhere else:

* ``handicap_average`` is the mean of ``performance_vs_target`` (par minus
  batons used). Positive means rounds finished under par; higher is better.
* ``golf_score`` / ``golf_average`` flip the sign for scorecard display:
  over par is positive and lower is better.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Sequence

from .inkast_blast import InkastBlastRound, InkastBlastSession
from .metrics import average, ratio_or_numerator, safe_div
from .phase import CLASSIFIED_PHASES, GamePhase, display_name, phase_of
from .practice_stats import RecentForm
from .settings import TrainerSettings, load_settings


@dataclass(frozen=True)
class PhaseStats:
    phase: GamePhase
    rounds: int = 0
    inkast_kubbs: int = 0
    first_cast_success_rate: float = 0.0
    penalty_kubbs: int = 0
    penalty_rate: float = 0.0
    neighbor_rate: float = 0.0
    average_initial_blast: float = 0.0
    kubbs_per_baton: float = 0.0
    handicap: float = 0.0
    a_lines_left: int = 0
    inkasts_per_penalty: float = 0.0


@dataclass(frozen=True)
class InkastOverview:
    total_sessions: int = 0
    total_rounds: int = 0
    handicap: float = 0.0
    golf_score: int = 0
    kubbs_per_baton: float = 0.0
    penalty_rate: float = 0.0
    neighbor_rate: float = 0.0
    first_inkast_accuracy: float = 0.0
    a_lines_left: int = 0
    inkasts_per_penalty: float = 0.0


def completed_sessions(sessions: Iterable[InkastBlastSession], today: date | None = None) -> list[InkastBlastSession]:
    viewed = [s.with_auto_completion(today) for s in sessions]
    return sorted((s for s in viewed if s.is_complete), key=lambda s: (s.date, s.start_time))


def all_rounds(sessions: Iterable[InkastBlastSession]) -> list[InkastBlastRound]:
    ordered = sorted(sessions, key=lambda s: (s.date, s.start_time))
    return [r for s in ordered for r in s.rounds]


# Handicap conventions


def handicap_average(rounds: Sequence[InkastBlastRound]) -> float:
    """Mean batons under par per round. Higher is better."""
    return average(r.performance_vs_target for r in rounds)


def golf_score(rounds: Iterable[InkastBlastRound]) -> int:
    """Total strokes over par across rounds. Lower is better."""
    return -sum(r.performance_vs_target for r in rounds)


def golf_average(rounds: Sequence[InkastBlastRound]) -> float:
    return -handicap_average(rounds)


def session_handicap(session: InkastBlastSession) -> float:
    return handicap_average(session.rounds)


def format_handicap(value: float, decimals: int = 2) -> str:
    if decimals == 0:
        return f"{int(round(value)):+d}"
    return f"{value:+.{decimals}f}"


def handicap_form(
    sessions: Sequence[InkastBlastSession],
    golf_style: bool = False,
    settings: TrainerSettings | None = None,
) -> RecentForm:
    """Recent vs. overall per-session handicap.

    With ``golf_style`` the values are golf averages and lower is better.
    """
    if not sessions:
        return RecentForm(lower_is_better=golf_style)
    cfg = settings or load_settings()
    sign = -1.0 if golf_style else 1.0
    newest_first = sorted(sessions, key=lambda s: (s.date, s.start_time), reverse=True)
    values = [sign * session_handicap(s) for s in newest_first]
    window = min(cfg.recent_form_window, len(values))
    return RecentForm(
        recent_avg=average(values[:window]),
        overall_avg=average(values),
        session_count=window,
        lower_is_better=golf_style,
    )


# Ratios


def first_cast_success_rate(rounds: Sequence[InkastBlastRound]) -> float:
    thrown = sum(r.inkast_kubbs for r in rounds)
    first_out = sum(r.kubbs_out_first_attempt for r in rounds)
    return safe_div(thrown - first_out, thrown)


def penalty_rate(rounds: Sequence[InkastBlastRound]) -> float:
    return safe_div(sum(r.penalty_kubbs for r in rounds), sum(r.inkast_kubbs for r in rounds))


def neighbor_rate(rounds: Sequence[InkastBlastRound]) -> float:
    return safe_div(sum(r.neighbor_kubbs for r in rounds), sum(r.inkast_kubbs for r in rounds))


def kubbs_per_baton(rounds: Sequence[InkastBlastRound]) -> float:
    return safe_div(sum(r.total_kubbs_knocked_down for r in rounds), sum(r.batons_used for r in rounds))


def average_initial_blast(rounds: Sequence[InkastBlastRound]) -> float:
    blasted = [r for r in rounds if r.baton_throws]
    return average(r.initial_blast for r in blasted)


def inkasts_per_penalty(rounds: Sequence[InkastBlastRound]) -> float:
    """Kubbs inkasted per penalty kubb; with no penalties, the kubbs inkasted."""
    return ratio_or_numerator(sum(r.inkast_kubbs for r in rounds), sum(r.penalty_kubbs for r in rounds))


def a_lines_left(rounds: Iterable[InkastBlastRound], settings: TrainerSettings | None = None) -> int:
    cfg = settings or load_settings()
    return sum(1 for r in rounds if r.batons_used > cfg.a_line_baton_limit)


# Aggregates


def _phase_summary(
    phase: GamePhase,
    rounds: Sequence[InkastBlastRound],
    settings: TrainerSettings | None,
) -> PhaseStats:
    if not rounds:
        return PhaseStats(phase=phase)
    return PhaseStats(
        phase=phase,
        rounds=len(rounds),
        inkast_kubbs=sum(r.inkast_kubbs for r in rounds),
        first_cast_success_rate=first_cast_success_rate(rounds),
        penalty_kubbs=sum(r.penalty_kubbs for r in rounds),
        penalty_rate=penalty_rate(rounds),
        neighbor_rate=neighbor_rate(rounds),
        average_initial_blast=average_initial_blast(rounds),
        kubbs_per_baton=kubbs_per_baton(rounds),
        handicap=handicap_average(rounds),
        a_lines_left=a_lines_left(rounds, settings),
        inkasts_per_penalty=inkasts_per_penalty(rounds),
    )


def phase_stats(
    rounds: Iterable[InkastBlastRound],
    settings: TrainerSettings | None = None,
) -> dict[GamePhase, PhaseStats]:
    """Per-phase statistics for Early, Mid and End.

    Rounds are bucketed by their own kubb count, not by the session's phase,
    so an "All Phases" session spreads over several buckets.
    """
    buckets: dict[GamePhase, list[InkastBlastRound]] = {phase: [] for phase in CLASSIFIED_PHASES}
    for rnd in rounds:
        phase = phase_of(rnd.inkast_kubbs)
        if phase is not None:
            buckets[phase].append(rnd)
    return {phase: _phase_summary(phase, buckets[phase], settings) for phase in CLASSIFIED_PHASES}


def inkast_overview(
    sessions: Sequence[InkastBlastSession],
    settings: TrainerSettings | None = None,
) -> InkastOverview:
    if not sessions:
        return InkastOverview()
    rounds = all_rounds(sessions)
    return InkastOverview(
        total_sessions=len(sessions),
        total_rounds=len(rounds),
        handicap=handicap_average(rounds),
        golf_score=golf_score(rounds),
        kubbs_per_baton=kubbs_per_baton(rounds),
        penalty_rate=penalty_rate(rounds),
        neighbor_rate=neighbor_rate(rounds),
        first_inkast_accuracy=first_cast_success_rate(rounds),
        a_lines_left=a_lines_left(rounds, settings),
        inkasts_per_penalty=inkasts_per_penalty(rounds),
    )


def session_history_summary(session: InkastBlastSession) -> dict[str, Any]:
    duration = None
    if session.end_time is not None:
        duration = (session.end_time - session.start_time).total_seconds()
    return {
        "id": session.id,
        "date": session.date,
        "game_phase": display_name(session.game_phase),
        "handicap": format_handicap(session_handicap(session)),
        "rounds": session.total_rounds,
        "efficiency": round(session.average_kubbs_per_baton, 2),
        "total_batons": session.total_batons_used,
        "total_kubbs": session.total_kubbs_knocked_down,
        "penalty_rate": session.penalty_rate,
        "duration_seconds": duration,
    }
