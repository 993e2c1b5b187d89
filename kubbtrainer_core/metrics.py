from __future__ import annotations

from typing import Iterable


def safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def ratio_or_numerator(numerator: float, denominator: float) -> float:
    """``numerator / denominator``, or the numerator itself when nothing happened.

    Used for "X per event" ratios (e.g. inkasts per penalty) where zero events
    means the ratio is unbounded; the numerator is a non-negative stand-in.
    """
    return numerator / denominator if denominator else float(numerator)


def average(values: Iterable[float]) -> float:
    values_list = list(values)
    return sum(values_list) / len(values_list) if values_list else 0.0


def population_variance(values: Iterable[float]) -> float:
    values_list = list(values)
    if not values_list:
        return 0.0
    mean = sum(values_list) / len(values_list)
    return sum((x - mean) ** 2 for x in values_list) / len(values_list)


def trend_arrow(recent: float, overall: float, lower_is_better: bool = False) -> str:
    if abs(recent - overall) < 1e-9:
        return "→"
    if lower_is_better:
        return "↑" if recent < overall else "↓"
    return "↑" if recent > overall else "↓"


def is_improving(recent: float, overall: float, lower_is_better: bool = False) -> bool:
    if lower_is_better:
        return recent < overall
    return recent > overall


def compare_window_to_overall(window_value: float | None, overall_value: float | None) -> dict[str, float | str]:
    if window_value is None or overall_value is None:
        return {"delta": 0.0, "trend": "FLAT"}
    delta = window_value - overall_value
    if abs(delta) < 0.005:
        trend = "FLAT"
    elif delta > 0:
        trend = "UP"
    else:
        trend = "DOWN"
    return {"delta": delta, "trend": trend}
