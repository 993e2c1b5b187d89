"""Statistics over 8 meter practice history.

Every function takes a snapshot of sessions and returns plain values. Empty
input always yields a zero-valued result. Unless noted, only completed rounds
are counted, in chronological order.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from .consistency import consistency_score
from .metrics import average, is_improving, safe_div, trend_arrow
from .practice import PracticeSession, Round
from .settings import TrainerSettings, load_settings
from .throws import BatonThrow


@dataclass(frozen=True)
class StreakSummary:
    best: int = 0
    current: int = 0


@dataclass(frozen=True)
class OverallStats:
    total_sessions: int = 0
    total_batons: int = 0
    total_kubbs: int = 0
    overall_accuracy: float = 0.0
    best_streak: int = 0


@dataclass(frozen=True)
class TrainingStats:
    total_sessions: int = 0
    total_rounds: int = 0
    baseline_clears: int = 0
    king_hits: int = 0
    king_attempts: int = 0

    @property
    def king_accuracy(self) -> float:
        return safe_div(self.king_hits, self.king_attempts)


@dataclass(frozen=True)
class SessionLengths:
    average: float = 0.0
    shortest: int = 0
    longest: int = 0


@dataclass(frozen=True)
class PerformanceZones:
    excellent: int = 0
    good: int = 0
    average: int = 0
    needs_work: int = 0


@dataclass(frozen=True)
class RecentForm:
    recent_avg: float = 0.0
    overall_avg: float = 0.0
    session_count: int = 0
    lower_is_better: bool = False

    @property
    def improving(self) -> bool:
        return is_improving(self.recent_avg, self.overall_avg, self.lower_is_better)

    @property
    def trend(self) -> str:
        return trend_arrow(self.recent_avg, self.overall_avg, self.lower_is_better)


@dataclass(frozen=True)
class PersonalRecords:
    best_session_accuracy: float = 0.0
    longest_streak: int = 0
    perfect_rounds: int = 0
    most_baseline_clears: int = 0


@dataclass(frozen=True)
class WeeklySummary:
    sessions_this_week: int = 0
    batons_this_week: int = 0
    accuracy_this_week: float = 0.0
    baseline_clears_this_week: int = 0


@dataclass(frozen=True)
class AdvancedTrainingStats:
    first_throw_accuracy: float = 0.0
    consistency_score: float = 0.0
    clutch_accuracy: float = 0.0
    avg_kubbs_per_round: float = 0.0


@dataclass(frozen=True)
class RoundProgression:
    early_rounds_accuracy: float = 0.0
    late_rounds_accuracy: float = 0.0
    drop_off: float = 0.0


def completed_sessions(sessions: Iterable[PracticeSession], today: date | None = None) -> list[PracticeSession]:
    """Sessions that count as complete, stale ones included, oldest first."""
    viewed = [s.with_auto_completion(today) for s in sessions]
    return sorted((s for s in viewed if s.is_complete), key=lambda s: (s.date, s.start_time))


def _chronological(sessions: Iterable[PracticeSession]) -> list[PracticeSession]:
    return sorted(sessions, key=lambda s: (s.date, s.start_time))


def _rounds(sessions: Iterable[PracticeSession]) -> list[Round]:
    return [r for s in _chronological(sessions) for r in s.completed_rounds]


def _throws(sessions: Iterable[PracticeSession]) -> list[BatonThrow]:
    return [t for r in _rounds(sessions) for t in r.baton_throws]


def accuracy(throws: Sequence[BatonThrow]) -> float:
    return safe_div(sum(1 for t in throws if t.is_hit), len(throws))


def pooled_accuracy(rounds: Iterable[Round]) -> float:
    hits = 0
    total = 0
    for rnd in rounds:
        hits += rnd.hits
        total += rnd.total_baton_throws
    return safe_div(hits, total)


def compute_streaks(throws: Iterable[BatonThrow]) -> StreakSummary:
    best = 0
    current = 0
    for baton in throws:
        if baton.is_hit:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return StreakSummary(best=best, current=current)


def best_streak(sessions: Sequence[PracticeSession]) -> int:
    return compute_streaks(_throws(sessions)).best


def overall_stats(sessions: Sequence[PracticeSession]) -> OverallStats:
    if not sessions:
        return OverallStats()
    return OverallStats(
        total_sessions=len(sessions),
        total_batons=sum(s.total_batons for s in sessions),
        total_kubbs=sum(s.total_kubbs for s in sessions),
        overall_accuracy=average(s.accuracy for s in sessions),
        best_streak=best_streak(sessions),
    )


def training_stats(sessions: Sequence[PracticeSession]) -> TrainingStats:
    return TrainingStats(
        total_sessions=len(sessions),
        total_rounds=sum(len(s.completed_rounds) for s in sessions),
        baseline_clears=sum(s.total_baseline_clears for s in sessions),
        king_hits=sum(s.total_king_hits for s in sessions),
        king_attempts=sum(s.total_king_throw_attempts for s in sessions),
    )


def session_lengths(sessions: Sequence[PracticeSession]) -> SessionLengths:
    lengths = [s.total_batons for s in sessions]
    if not lengths:
        return SessionLengths()
    return SessionLengths(average=average(lengths), shortest=min(lengths), longest=max(lengths))


def performance_zones(
    sessions: Sequence[PracticeSession],
    settings: TrainerSettings | None = None,
) -> PerformanceZones:
    cfg = settings or load_settings()
    excellent = good = middling = needs_work = 0
    for session in sessions:
        acc = session.accuracy
        if acc >= cfg.zone_excellent:
            excellent += 1
        elif acc >= cfg.zone_good:
            good += 1
        elif acc >= cfg.zone_average:
            middling += 1
        else:
            needs_work += 1
    return PerformanceZones(excellent=excellent, good=good, average=middling, needs_work=needs_work)


def recent_form(
    sessions: Sequence[PracticeSession],
    settings: TrainerSettings | None = None,
) -> RecentForm:
    if not sessions:
        return RecentForm()
    cfg = settings or load_settings()
    newest_first = list(reversed(_chronological(sessions)))
    window = min(cfg.recent_form_window, len(newest_first))
    return RecentForm(
        recent_avg=average(s.accuracy for s in newest_first[:window]),
        overall_avg=average(s.accuracy for s in newest_first),
        session_count=window,
    )


def personal_records(sessions: Sequence[PracticeSession]) -> PersonalRecords:
    if not sessions:
        return PersonalRecords()
    return PersonalRecords(
        best_session_accuracy=max(s.accuracy for s in sessions),
        longest_streak=best_streak(sessions),
        perfect_rounds=sum(1 for r in _rounds(sessions) if r.is_perfect),
        most_baseline_clears=max(s.total_baseline_clears for s in sessions),
    )


def week_start(today: date) -> datetime:
    monday = today - timedelta(days=today.weekday())
    return datetime(monday.year, monday.month, monday.day)


def weekly_summary(sessions: Sequence[PracticeSession], today: date | None = None) -> WeeklySummary:
    start = week_start(today or date.today())
    week = [s for s in sessions if s.date >= start]
    if not week:
        return WeeklySummary()
    batons = sum(s.total_batons for s in week)
    hits = sum(s.total_kubbs for s in week)
    return WeeklySummary(
        sessions_this_week=len(week),
        batons_this_week=batons,
        accuracy_this_week=safe_div(hits, batons),
        baseline_clears_this_week=sum(s.total_baseline_clears for s in week),
    )


def first_throw_accuracy(sessions: Sequence[PracticeSession]) -> float:
    firsts = [r.baton_throws[0] for r in _rounds(sessions) if r.baton_throws]
    return accuracy(firsts)


def clutch_accuracy(sessions: Sequence[PracticeSession], settings: TrainerSettings | None = None) -> float:
    """Accuracy on throws taken with 3 or 4 kubbs already down in the round."""
    cfg = settings or load_settings()
    clutch: list[BatonThrow] = []
    for rnd in _rounds(sessions):
        hits_so_far = 0
        for baton in rnd.baton_throws:
            if cfg.clutch_min_hits <= hits_so_far <= cfg.clutch_max_hits:
                clutch.append(baton)
            if baton.is_hit:
                hits_so_far += 1
    return accuracy(clutch)


def session_consistency(sessions: Sequence[PracticeSession]) -> float:
    return consistency_score([s.accuracy for s in sessions])


def advanced_training_stats(
    sessions: Sequence[PracticeSession],
    settings: TrainerSettings | None = None,
) -> AdvancedTrainingStats:
    if not sessions:
        return AdvancedTrainingStats()
    rounds = _rounds(sessions)
    return AdvancedTrainingStats(
        first_throw_accuracy=first_throw_accuracy(sessions),
        consistency_score=session_consistency(sessions),
        clutch_accuracy=clutch_accuracy(sessions, settings),
        avg_kubbs_per_round=safe_div(sum(r.hits for r in rounds), len(rounds)),
    )


def round_progression(
    sessions: Sequence[PracticeSession],
    settings: TrainerSettings | None = None,
) -> RoundProgression:
    cfg = settings or load_settings()
    rounds = _rounds(sessions)
    early = pooled_accuracy(r for r in rounds if r.round_number <= cfg.early_round_cutoff)
    late = pooled_accuracy(r for r in rounds if r.round_number > cfg.early_round_cutoff)
    return RoundProgression(early_rounds_accuracy=early, late_rounds_accuracy=late, drop_off=early - late)
