"""Priority scoring: four normalized signals, weighted, plus a blocked penalty.

Every signal lies in [0, 10]. The blocked penalty (-1000) must dwarf any
realistic weighted sum so blocked tasks always rank after unblocked ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from functools import cmp_to_key
from typing import TYPE_CHECKING, Dict, List, Optional

from .dependency_validator import get_blocked_by, get_blocking_tasks
from .errors import InvalidEstimateError
from .task_detail import Estimate, Task

if TYPE_CHECKING:
    from config import Settings

BLOCKED_PENALTY = -1000.0
MAX_SIGNAL = 10.0
URGENCY_HORIZON_DAYS = 30
BLOCKING_SATURATION = 5
STALENESS_HORIZON_DAYS = 14
QUICK_WIN_MIN_HOURS = 0.5
QUICK_WIN_MAX_HOURS = 8.0
MAX_SUMMARY_FACTORS = 3


@dataclass
class ScoreResult:
    score: float
    primary_factors: List[str] = field(default_factory=list)
    signals: Dict[str, float] = field(default_factory=dict)


def _today() -> date:
    return date.today()


def urgency_signal(due: Optional[date], today: date) -> float:
    if due is None:
        return 0.0
    days_remaining = (due - today).days
    if days_remaining <= 0:
        return MAX_SIGNAL
    if days_remaining >= URGENCY_HORIZON_DAYS:
        return 0.0
    return MAX_SIGNAL * (1.0 - days_remaining / URGENCY_HORIZON_DAYS)


def blocking_signal(task_id: int, all_tasks: List[Task]) -> float:
    count = len(get_blocking_tasks(task_id, all_tasks))
    if count == 0:
        return 0.0
    if count >= BLOCKING_SATURATION:
        return MAX_SIGNAL
    return MAX_SIGNAL * (count / BLOCKING_SATURATION)


def staleness_signal(updated_on: date, today: date) -> float:
    days = (today - updated_on).days
    if days <= 0:
        return 0.0
    if days >= STALENESS_HORIZON_DAYS:
        return MAX_SIGNAL
    return MAX_SIGNAL * (days / STALENESS_HORIZON_DAYS)


def quick_win_signal(estimate: Optional[str], point_to_hours: float) -> float:
    if estimate is None:
        return 0.0
    try:
        hours = Estimate.parse(estimate).to_hours(point_to_hours)
    except InvalidEstimateError:
        return 0.0
    if hours <= QUICK_WIN_MIN_HOURS:
        return MAX_SIGNAL
    if hours >= QUICK_WIN_MAX_HOURS:
        return 0.0
    return MAX_SIGNAL * (1.0 - hours / QUICK_WIN_MAX_HOURS)


def blocked_penalty(task: Task, all_tasks: List[Task]) -> float:
    return BLOCKED_PENALTY if get_blocked_by(task, all_tasks) else 0.0


def compute_score(
    task: Task,
    all_tasks: List[Task],
    settings: "Settings",
    today: Optional[date] = None,
) -> ScoreResult:
    """Weighted sum of the four signals plus the blocked penalty."""
    today = today or _today()
    weights = settings.weights
    signals = {
        "urgency": urgency_signal(task.due, today),
        "blocking": blocking_signal(task.id, all_tasks),
        "staleness": staleness_signal(task.updated_at.date(), today),
        "quick_win": quick_win_signal(task.estimate, settings.point_to_hours),
    }
    penalty = blocked_penalty(task, all_tasks)
    score = (
        weights.urgency * signals["urgency"]
        + weights.blocking * signals["blocking"]
        + weights.staleness * signals["staleness"]
        + weights.quick_win * signals["quick_win"]
        + penalty
    )
    signals["blocked_penalty"] = penalty
    return ScoreResult(
        score=score,
        primary_factors=summary_factors(task, all_tasks, today),
        signals=signals,
    )


def _compare(a: Task, b: Task, scores: Dict[int, float]) -> int:
    # pinned before unpinned
    if a.pinned != b.pinned:
        return -1 if a.pinned else 1
    if a.pinned and b.pinned and a.pinned_at != b.pinned_at:
        # earliest pin first; a missing pin time orders before any real one
        if a.pinned_at is None:
            return -1
        if b.pinned_at is None:
            return 1
        return -1 if a.pinned_at < b.pinned_at else 1
    score_a, score_b = scores[id(a)], scores[id(b)]
    if score_a != score_b:
        return -1 if score_a > score_b else 1
    if a.created_at != b.created_at:
        return -1 if a.created_at < b.created_at else 1
    return 0


def sort_tasks(
    tasks: List[Task],
    all_tasks: List[Task],
    settings: "Settings",
    today: Optional[date] = None,
) -> List[Task]:
    """Return tasks in priority order (stable).

    Pinned first (earliest pin first), then score descending, then created_at
    ascending.
    """
    today = today or _today()
    scores = {id(task): compute_score(task, all_tasks, settings, today).score for task in tasks}
    return sorted(tasks, key=cmp_to_key(lambda a, b: _compare(a, b, scores)))


def _due_phrase(due: date, today: date) -> str:
    days = (due - today).days
    if days < 0:
        return "due: overdue"
    if days == 0:
        return "due: today"
    if days == 1:
        return "due: tomorrow"
    return f"due: {due.strftime('%m/%d')}"


def summary_factors(task: Task, all_tasks: List[Task], today: Optional[date] = None) -> List[str]:
    """Up to three display factors in fixed priority order."""
    today = today or _today()
    factors: List[str] = []
    if task.due is not None:
        factors.append(_due_phrase(task.due, today))
    blocking = get_blocking_tasks(task.id, all_tasks)
    if blocking:
        factors.append(f"blocks: {len(blocking)}")
    if task.estimate:
        factors.append(f"est: {task.estimate}")
    if task.pinned:
        factors.append("pinned")
    blockers = get_blocked_by(task, all_tasks)
    if blockers:
        factors.append("blocked by: " + ", ".join(f"#{dep}" for dep in blockers))
    return factors[:MAX_SUMMARY_FACTORS]


__all__ = [
    "BLOCKED_PENALTY",
    "ScoreResult",
    "urgency_signal",
    "blocking_signal",
    "staleness_signal",
    "quick_win_signal",
    "blocked_penalty",
    "compute_score",
    "sort_tasks",
    "summary_factors",
]
