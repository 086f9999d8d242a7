# sleepformula/plots.py
from __future__ import annotations

from typing import Optional, Sequence
import matplotlib.pyplot as plt

from .engine import SleepDebtResult, TimelinePoint


def _level_color(level: float) -> str:
    if level >= 100:
        return "#ef4444"
    if level >= 50:
        return "#f59e0b"
    return "#22c55e"


def plot_caffeine_timeline(
    points: Sequence[TimelinePoint],
    safe_line_mg: float = 50.0,
    title: str = "카페인 잔여량 (24h)",
    ax: Optional[plt.Axes] = None,
):
    """
    Bar chart of the sampled caffeine level, x = hours from the timeline origin.
    Returns matplotlib Figure.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 3))
    else:
        fig = ax.figure

    hours = [p.hour for p in points]
    levels = [p.level for p in points]
    ax.bar(hours, levels, width=0.4, color=[_level_color(v) for v in levels])
    ax.axhline(safe_line_mg, linestyle="--", linewidth=1, color="#64748b", label=f"{safe_line_mg:.0f}mg 안전선")

    ax.set_title(title)
    ax.set_xlabel("+h")
    ax.set_ylabel("mg")
    ax.set_xlim(-0.5, 24.5)
    ax.set_xticks(range(0, 25, 3))
    ax.grid(True, axis="y", alpha=0.2)
    ax.legend(loc="upper right")
    return fig


def plot_sleep_debt(
    result: SleepDebtResult,
    recommended_hours: float,
    title: str = "최근 7일 수면",
    ax: Optional[plt.Axes] = None,
):
    """Actual hours per day against the recommended line; debt stacked on top."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 3))
    else:
        fig = ax.figure

    labels = [f"{d.day[5:].replace('-', '/')}\n{d.day_label}" for d in result.daily]
    x = list(range(len(result.daily)))
    hours = [d.hours for d in result.daily]
    debts = [d.debt for d in result.daily]

    ax.bar(x, hours, color="#4f46e5", label="수면")
    ax.bar(x, debts, bottom=hours, color="#fca5a5", label="부채")
    ax.axhline(recommended_hours, linestyle="--", linewidth=1, color="#64748b", label="권장")

    ax.set_title(title)
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel("시간")
    ax.set_ylim(0, max([recommended_hours + 2, 10.0] + [h + d for h, d in zip(hours, debts)]))
    ax.grid(True, axis="y", alpha=0.2)
    ax.legend(loc="upper right")
    return fig
