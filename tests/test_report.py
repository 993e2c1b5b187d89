from datetime import datetime

import pytest

from reports.pdf_report import generate_training_report_pdf

pytest.importorskip("reportlab")


def test_training_report_is_written(tmp_path, practice_history, handicap_rounds, inkast_session_factory, today):
    inkast = inkast_session_factory(handicap_rounds, datetime(2024, 6, 11, 18, 0))
    out = tmp_path / "report.pdf"
    generate_training_report_pdf(out, practice_history, [inkast], today=today)
    assert out.read_bytes().startswith(b"%PDF")


def test_report_handles_empty_history(tmp_path, today):
    out = tmp_path / "empty.pdf"
    generate_training_report_pdf(out, [], [], today=today)
    assert out.exists()
