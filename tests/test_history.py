from datetime import datetime

import pytest

from kubbtrainer_core.csv_io import export_inkast_rounds, export_practice_history, import_rows_from_csv
from kubbtrainer_core.history import (
    INKAST_ROUND_COLUMNS,
    PRACTICE_COLUMNS,
    accuracy_trend,
    inkast_rounds_frame,
    phase_summary_frame,
    practice_history_frame,
    recent_accuracy_delta,
    session_handicaps,
)

H = True
M = False


def test_empty_frames_keep_their_columns():
    assert list(practice_history_frame([]).columns) == PRACTICE_COLUMNS
    assert list(inkast_rounds_frame([]).columns) == INKAST_ROUND_COLUMNS
    assert "rolling_accuracy" in accuracy_trend(practice_history_frame([])).columns
    assert recent_accuracy_delta(practice_history_frame([])) == {"delta": 0.0, "trend": "FLAT"}


def test_practice_history_frame_sorted_by_date(practice_history):
    frame = practice_history_frame(list(reversed(practice_history)))
    assert len(frame) == 4
    assert list(frame["session_id"]) == [s.id for s in practice_history]
    assert frame["total_batons"].sum() == 24
    assert frame["accuracy"].iloc[0] == pytest.approx(1.0)


def test_accuracy_trend_rolling_mean(practice_history):
    frame = accuracy_trend(practice_history_frame(practice_history[:3]), window=2)
    assert list(frame["rolling_accuracy"]) == pytest.approx([1.0, (1 + 5 / 6) / 2, (5 / 6 + 0.5) / 2])


def test_recent_accuracy_delta(practice_history):
    result = recent_accuracy_delta(practice_history_frame(practice_history), window=2)
    assert result["trend"] == "DOWN"
    assert result["delta"] == pytest.approx((0.5 + 1 / 6) / 2 - 0.625)


def test_phase_summary_zero_filled():
    summary = phase_summary_frame(inkast_rounds_frame([]))
    assert list(summary["phase"]) == ["early", "mid", "end"]
    assert list(summary["phase_name"]) == ["Early Game", "Mid Game", "End Game"]
    assert summary["rounds"].sum() == 0
    assert summary["kubbs_per_baton"].sum() == 0.0


def test_phase_summary_groups_rounds(handicap_rounds, inkast_session_factory):
    session = inkast_session_factory(handicap_rounds, datetime(2024, 6, 11, 18, 0))
    rounds_df = inkast_rounds_frame([session])
    assert len(rounds_df) == 2
    summary = phase_summary_frame(rounds_df).set_index("phase")
    assert summary.loc["mid", "rounds"] == 1
    assert summary.loc["mid", "handicap"] == pytest.approx(1.0)
    assert summary.loc["early", "handicap"] == pytest.approx(-2.0)
    assert summary.loc["early", "kubbs_per_baton"] == pytest.approx(2 / 3)
    assert summary.loc["end", "rounds"] == 0


def test_session_handicaps_series(handicap_rounds, inkast_session_factory):
    session = inkast_session_factory(handicap_rounds, datetime(2024, 6, 11, 18, 0))
    series = session_handicaps([session])
    assert series.name == "handicap"
    assert series.iloc[0] == pytest.approx(-0.5)


def test_csv_export_round_trip(tmp_path, practice_history, handicap_rounds, inkast_session_factory):
    practice_path = tmp_path / "exports" / "practice.csv"
    assert export_practice_history(practice_path, practice_history) == 4
    rows = import_rows_from_csv(practice_path)
    assert list(rows[0].keys()) == PRACTICE_COLUMNS
    assert rows[0]["date"] == "2024-06-03T18:00:00"
    assert rows[0]["total_batons"] == "6"

    session = inkast_session_factory(handicap_rounds, datetime(2024, 6, 11, 18, 0))
    rounds_path = tmp_path / "exports" / "rounds.csv"
    assert export_inkast_rounds(rounds_path, [session]) == 2
    rounds = import_rows_from_csv(rounds_path)
    assert [r["phase"] for r in rounds] == ["mid", "early"]
    assert rounds[1]["performance_vs_target"] == "-2"
