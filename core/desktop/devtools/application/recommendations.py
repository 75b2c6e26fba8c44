from datetime import date
from typing import List, Optional, Tuple

from config import Settings
from core import Status, Task, is_blocked
from core.scoring import sort_tasks


def _actionable(tasks: List[Task]) -> List[Task]:
    return [t for t in tasks if t.status != Status.DONE and not is_blocked(t, tasks)]


def next_recommendations(
    tasks: List[Task],
    settings: Settings,
    *,
    today: Optional[date] = None,
    limit: int = 3,
) -> Tuple[List[Task], Optional[Task]]:
    """Rank unfinished, unblocked tasks; returns (top candidates, selected)."""
    candidates = _actionable(tasks)
    if not candidates:
        return [], None
    ranked = sort_tasks(candidates, tasks, settings, today)
    return ranked[:limit], ranked[0]


def today_focus(
    tasks: List[Task],
    settings: Settings,
    *,
    today: Optional[date] = None,
) -> List[Task]:
    """Unfinished tasks that are due, started or pinned; falls back to the next pick."""
    today = today or date.today()
    focus = [
        t
        for t in tasks
        if t.status != Status.DONE
        and ((t.due is not None and t.due <= today) or t.status == Status.IN_PROGRESS or t.pinned)
    ]
    if focus:
        return sort_tasks(focus, tasks, settings, today)
    _, selected = next_recommendations(tasks, settings, today=today)
    return [selected] if selected else []


__all__ = ["next_recommendations", "today_focus"]
