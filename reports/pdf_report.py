from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Sequence

from kubbtrainer_core.history import practice_history_frame, recent_accuracy_delta
from kubbtrainer_core.inkast_blast import InkastBlastSession
from kubbtrainer_core.inkast_stats import format_handicap, inkast_overview, phase_stats
from kubbtrainer_core.inkast_stats import completed_sessions as completed_inkast_sessions
from kubbtrainer_core.phase import display_name
from kubbtrainer_core.practice import PracticeSession
from kubbtrainer_core.practice_stats import (
    advanced_training_stats,
    completed_sessions,
    overall_stats,
    personal_records,
    recent_form,
    training_stats,
    weekly_summary,
)


def _pct(value: float | None) -> str:
    if value is None:
        return "—"
    return f"{value * 100:.1f}%"


def _fmt(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return "—"
    return f"{value:.{decimals}f}"


def generate_training_report_pdf(
    filepath: str | Path,
    practice_sessions: Sequence[PracticeSession],
    inkast_sessions: Sequence[InkastBlastSession],
    today: date | None = None,
) -> None:
    try:
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import letter
        from reportlab.pdfgen import canvas
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError(
            "ReportLab is required for PDF export. Install with: pip install reportlab"
        ) from exc

    practice = completed_sessions(practice_sessions, today)
    inkast = completed_inkast_sessions(inkast_sessions, today)

    path = Path(filepath)
    c = canvas.Canvas(str(path), pagesize=letter)
    width, height = letter

    left = 42
    y = height - 40

    def line(text: str, size: int = 10, bold: bool = False, color=colors.black, gap: int = 14) -> None:
        nonlocal y
        c.setFillColor(color)
        c.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        c.drawString(left, y, text)
        y -= gap

    line("Kubb Trainer", size=18, bold=True)
    line(f"Training report, {(today or date.today()).isoformat()}", size=10, color=colors.HexColor("#6B7785"), gap=18)

    line("8 Meter Practice", size=12, bold=True)
    if practice:
        overall = overall_stats(practice)
        training = training_stats(practice)
        form = recent_form(practice)
        trend = recent_accuracy_delta(practice_history_frame(practice))
        line(
            f"Sessions {overall.total_sessions}   Batons {overall.total_batons}   Kubbs {overall.total_kubbs}   "
            f"Accuracy {_pct(overall.overall_accuracy)}   Best Streak {overall.best_streak}",
            size=9,
        )
        line(
            f"Rounds {training.total_rounds}   Baseline Clears {training.baseline_clears}   "
            f"King {training.king_hits}/{training.king_attempts} ({_pct(training.king_accuracy)})",
            size=9,
        )
        line(
            f"Recent Form {_pct(form.recent_avg)} vs {_pct(form.overall_avg)} {form.trend}   "
            f"Trend {trend['trend']} ({trend['delta']:+.3f})",
            size=9,
        )
        advanced = advanced_training_stats(practice)
        line(
            f"First Throw {_pct(advanced.first_throw_accuracy)}   Clutch {_pct(advanced.clutch_accuracy)}   "
            f"Consistency {_fmt(advanced.consistency_score)}   Kubbs/Round {_fmt(advanced.avg_kubbs_per_round)}",
            size=9,
        )
        records = personal_records(practice)
        line(
            f"Best Session {_pct(records.best_session_accuracy)}   Perfect Rounds {records.perfect_rounds}   "
            f"Most Baseline Clears {records.most_baseline_clears}",
            size=9,
        )
        week = weekly_summary(practice, today)
        line(
            f"This Week: {week.sessions_this_week} sessions, {week.batons_this_week} batons, "
            f"{_pct(week.accuracy_this_week)}",
            size=9,
            gap=18,
        )
    else:
        line("No completed practice sessions.", size=9, gap=18)

    line("Inkast & Blast", size=12, bold=True)
    if inkast:
        overview = inkast_overview(inkast)
        line(
            f"Sessions {overview.total_sessions}   Rounds {overview.total_rounds}   "
            f"Handicap {format_handicap(overview.handicap)}   Golf Score {overview.golf_score:+d}",
            size=9,
        )
        line(
            f"Kubbs/Baton {_fmt(overview.kubbs_per_baton)}   First Inkast {_pct(overview.first_inkast_accuracy)}   "
            f"Penalty {_pct(overview.penalty_rate)}   Neighbors {_pct(overview.neighbor_rate)}   "
            f"A-Lines Left {overview.a_lines_left}",
            size=9,
            gap=16,
        )
        header = "Phase        Rounds   Handicap   Kubbs/Baton   Penalty   Neighbors   A-Lines"
        line(header, size=9, bold=True)
        rounds = [r for s in inkast for r in s.rounds]
        for phase, stats in phase_stats(rounds).items():
            line(
                f"{display_name(phase):<12} {stats.rounds:<8} {format_handicap(stats.handicap):<10} "
                f"{_fmt(stats.kubbs_per_baton):<13} {_pct(stats.penalty_rate):<9} "
                f"{_pct(stats.neighbor_rate):<11} {stats.a_lines_left}",
                size=8,
                gap=12,
            )
    else:
        line("No completed Inkast & Blast sessions.", size=9)

    c.showPage()
    c.save()
