from .consistency import compute_consistency, consistency_score
from .csv_io import export_inkast_rounds, export_practice_history, export_rows_to_csv, import_rows_from_csv
from .errors import (
    InvalidOperationError,
    KubbTrainerError,
    MalformedInputError,
    RoundAlreadyCompleteError,
    RoundInProgressError,
    SessionCompleteError,
)
from .inkast_blast import InkastBlastRound, InkastBlastSession, target_batons
from .inkast_stats import (
    format_handicap,
    golf_average,
    golf_score,
    handicap_average,
    inkast_overview,
    phase_stats,
    session_history_summary,
)
from .metrics import safe_div, trend_arrow
from .phase import PHASE_RANGES, GamePhase, generate_kubb_count, phase_of
from .practice import PracticeSession, Round
from .practice_stats import (
    advanced_training_stats,
    compute_streaks,
    overall_stats,
    performance_zones,
    personal_records,
    recent_form,
    round_progression,
    training_stats,
    weekly_summary,
)
from .settings import TrainerSettings, load_settings
from .throws import BatonThrow, InkastBatonThrow, ThrowType

__all__ = [
    "GamePhase",
    "PHASE_RANGES",
    "phase_of",
    "generate_kubb_count",
    "ThrowType",
    "BatonThrow",
    "InkastBatonThrow",
    "Round",
    "PracticeSession",
    "InkastBlastRound",
    "InkastBlastSession",
    "target_batons",
    "safe_div",
    "trend_arrow",
    "consistency_score",
    "compute_consistency",
    "compute_streaks",
    "overall_stats",
    "training_stats",
    "performance_zones",
    "recent_form",
    "personal_records",
    "weekly_summary",
    "advanced_training_stats",
    "round_progression",
    "handicap_average",
    "golf_score",
    "golf_average",
    "format_handicap",
    "phase_stats",
    "inkast_overview",
    "session_history_summary",
    "export_rows_to_csv",
    "import_rows_from_csv",
    "export_practice_history",
    "export_inkast_rounds",
    "TrainerSettings",
    "load_settings",
    "KubbTrainerError",
    "InvalidOperationError",
    "RoundAlreadyCompleteError",
    "RoundInProgressError",
    "SessionCompleteError",
    "MalformedInputError",
]
