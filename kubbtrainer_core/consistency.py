from __future__ import annotations

import math
from typing import Any

from .metrics import population_variance


def consistency_score(accuracies: list[float]) -> float:
    """Inverse-variance score over session accuracies, in (0, 1].

    No sessions scores 0.0; a single session has nothing to vary against and
    scores 1.0.
    """
    n = len(accuracies)
    if n == 0:
        return 0.0
    if n == 1:
        return 1.0
    return 1.0 / (1.0 + population_variance(accuracies))


def compute_consistency(accuracies: list[float]) -> dict[str, Any]:
    n = len(accuracies)
    if n == 0:
        return {
            "n": 0,
            "mean": 0.0,
            "sd": 0.0,
            "score": 0.0,
            "grade": "—",
            "label": "Not enough data",
            "provisional": False,
        }

    mean = sum(accuracies) / n
    sd = math.sqrt(population_variance(accuracies))

    if n == 1:
        grade, label = "—", "Not enough data"
    elif sd <= 0.05:
        grade, label = "A", "Consistent"
    elif sd <= 0.10:
        grade, label = "B", "Consistent"
    elif sd <= 0.15:
        grade, label = "C", "Moderate"
    elif sd <= 0.20:
        grade, label = "D", "Inconsistent"
    else:
        grade, label = "F", "Inconsistent"

    provisional = n < 5
    if provisional and label != "Not enough data":
        label = f"{label} (provisional)"
    return {
        "n": n,
        "mean": mean,
        "sd": sd,
        "score": consistency_score(accuracies),
        "grade": grade,
        "label": label,
        "provisional": provisional,
    }
