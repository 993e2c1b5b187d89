from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Any

DB_PATH_ENV = "KUBBTRAINER_DB_PATH"


@dataclass(frozen=True)
class TrainerSettings:
    recent_form_window: int = 5
    clutch_min_hits: int = 3
    clutch_max_hits: int = 4
    early_round_cutoff: int = 3
    a_line_baton_limit: int = 6
    zone_excellent: float = 0.9
    zone_good: float = 0.7
    zone_average: float = 0.5
    default_practice_target: int = 30
    db_filename: str = "kubb_trainer.db"


@lru_cache(maxsize=4)
def load_settings(settings_path: str | None = None) -> TrainerSettings:
    if settings_path:
        path = Path(settings_path)
    else:
        path = Path(__file__).resolve().with_name("trainer_settings.json")
    with path.open("r", encoding="utf-8") as f:
        raw: dict[str, Any] = json.load(f)
    known = {f.name for f in fields(TrainerSettings)}
    return TrainerSettings(**{k: v for k, v in raw.items() if k in known})


def resolve_db_path(default_dir: Path | None = None) -> Path:
    override = os.getenv(DB_PATH_ENV)
    if override:
        return Path(override)
    base = default_dir or Path(__file__).resolve().parent.parent
    return base / load_settings().db_filename
