from __future__ import annotations

from typing import Any, Sequence

import pandas as pd

from .inkast_blast import InkastBlastSession
from .inkast_stats import handicap_average
from .metrics import compare_window_to_overall
from .phase import CLASSIFIED_PHASES, display_name, phase_of
from .practice import PracticeSession

PRACTICE_COLUMNS = [
    "session_id",
    "date",
    "target",
    "rounds",
    "total_batons",
    "total_kubbs",
    "accuracy",
    "baseline_clears",
    "king_hits",
    "king_attempts",
    "is_complete",
]

INKAST_ROUND_COLUMNS = [
    "session_id",
    "date",
    "session_phase",
    "round_number",
    "phase",
    "inkast_kubbs",
    "kubbs_out_first_attempt",
    "penalty_kubbs",
    "neighbor_kubbs",
    "batons_used",
    "target_batons",
    "performance_vs_target",
    "kubbs_knocked_down",
    "initial_blast",
]


def practice_history_rows(sessions: Sequence[PracticeSession]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for session in sessions:
        rows.append(
            {
                "session_id": session.id,
                "date": session.date,
                "target": int(session.target),
                "rounds": len(session.completed_rounds),
                "total_batons": int(session.total_batons),
                "total_kubbs": int(session.total_kubbs),
                "accuracy": float(session.accuracy),
                "baseline_clears": int(session.total_baseline_clears),
                "king_hits": int(session.total_king_hits),
                "king_attempts": int(session.total_king_throw_attempts),
                "is_complete": bool(session.is_complete),
            }
        )
    return rows


def practice_history_frame(sessions: Sequence[PracticeSession]) -> pd.DataFrame:
    rows = practice_history_rows(sessions)
    if not rows:
        return pd.DataFrame(columns=PRACTICE_COLUMNS)
    return pd.DataFrame(rows, columns=PRACTICE_COLUMNS).sort_values("date").reset_index(drop=True)


def accuracy_trend(frame: pd.DataFrame, window: int = 5) -> pd.DataFrame:
    """Add a rolling mean of session accuracy for the progress chart."""
    out = frame.copy()
    if out.empty:
        out["rolling_accuracy"] = pd.Series(dtype=float)
        return out
    out["rolling_accuracy"] = out["accuracy"].rolling(window=window, min_periods=1).mean()
    return out


def recent_accuracy_delta(frame: pd.DataFrame, window: int = 5) -> dict[str, float | str]:
    if frame.empty:
        return compare_window_to_overall(None, None)
    recent = frame.sort_values("date").tail(window)["accuracy"].mean()
    return compare_window_to_overall(float(recent), float(frame["accuracy"].mean()))


def inkast_round_rows(sessions: Sequence[InkastBlastSession]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for session in sessions:
        for rnd in session.rounds:
            phase = phase_of(rnd.inkast_kubbs)
            rows.append(
                {
                    "session_id": session.id,
                    "date": session.date,
                    "session_phase": session.game_phase.value,
                    "round_number": int(rnd.round_number),
                    "phase": phase.value if phase is not None else "",
                    "inkast_kubbs": int(rnd.inkast_kubbs),
                    "kubbs_out_first_attempt": int(rnd.kubbs_out_first_attempt),
                    "penalty_kubbs": int(rnd.penalty_kubbs),
                    "neighbor_kubbs": int(rnd.neighbor_kubbs),
                    "batons_used": int(rnd.batons_used),
                    "target_batons": int(rnd.target_batons),
                    "performance_vs_target": int(rnd.performance_vs_target),
                    "kubbs_knocked_down": int(rnd.total_kubbs_knocked_down),
                    "initial_blast": int(rnd.initial_blast),
                }
            )
    return rows


def inkast_rounds_frame(sessions: Sequence[InkastBlastSession]) -> pd.DataFrame:
    rows = inkast_round_rows(sessions)
    if not rows:
        return pd.DataFrame(columns=INKAST_ROUND_COLUMNS)
    return pd.DataFrame(rows, columns=INKAST_ROUND_COLUMNS)


def phase_summary_frame(rounds_df: pd.DataFrame) -> pd.DataFrame:
    """One row per classified phase, zero-filled where no rounds were played."""
    index = pd.Index([p.value for p in CLASSIFIED_PHASES], name="phase")
    if rounds_df.empty:
        summary = pd.DataFrame(
            0,
            index=index,
            columns=["rounds", "inkast_kubbs", "penalty_kubbs", "neighbor_kubbs", "batons_used", "kubbs_knocked_down"],
        )
        summary["handicap"] = 0.0
    else:
        grouped = rounds_df.groupby("phase")
        summary = grouped[["inkast_kubbs", "penalty_kubbs", "neighbor_kubbs", "batons_used", "kubbs_knocked_down"]].sum()
        summary.insert(0, "rounds", grouped.size())
        summary["handicap"] = grouped["performance_vs_target"].mean()
        summary = summary.reindex(index).fillna(0)
    inkast = summary["inkast_kubbs"].where(summary["inkast_kubbs"] > 0)
    batons = summary["batons_used"].where(summary["batons_used"] > 0)
    summary["penalty_rate"] = (summary["penalty_kubbs"] / inkast).fillna(0.0)
    summary["neighbor_rate"] = (summary["neighbor_kubbs"] / inkast).fillna(0.0)
    summary["kubbs_per_baton"] = (summary["kubbs_knocked_down"] / batons).fillna(0.0)
    summary.insert(0, "phase_name", [display_name(p) for p in CLASSIFIED_PHASES])
    return summary.reset_index()


def session_handicaps(sessions: Sequence[InkastBlastSession]) -> pd.Series:
    ordered = sorted(sessions, key=lambda s: (s.date, s.start_time))
    return pd.Series(
        [handicap_average(s.rounds) for s in ordered],
        index=[s.date for s in ordered],
        name="handicap",
        dtype=float,
    )
