from datetime import date, datetime, timedelta, timezone

import pytest

from config import Settings
from core import Status, Task
from core.scoring import (
    BLOCKED_PENALTY,
    blocking_signal,
    compute_score,
    quick_win_signal,
    sort_tasks,
    staleness_signal,
    summary_factors,
    urgency_signal,
)

TODAY = date(2026, 10, 19)
BASE = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _task(task_id, *, created_offset=0, due=None, estimate=None, deps=None, status=Status.PENDING):
    stamp = BASE + timedelta(minutes=created_offset)
    task = Task(id=task_id, title=f"Task {task_id}", created_at=stamp, updated_at=stamp)
    task.due = due
    task.estimate = estimate
    task.depends_on = list(deps or [])
    task.status = status
    return task


def test_urgency_scenarios():
    assert urgency_signal(TODAY - timedelta(days=1), TODAY) == 10.0
    assert urgency_signal(TODAY, TODAY) == 10.0
    assert urgency_signal(TODAY + timedelta(days=15), TODAY) == pytest.approx(5.0)
    assert urgency_signal(TODAY + timedelta(days=30), TODAY) == 0.0
    assert urgency_signal(None, TODAY) == 0.0


def test_urgency_is_monotonic_as_due_approaches():
    values = [urgency_signal(TODAY + timedelta(days=d), TODAY) for d in range(40, -3, -1)]
    assert values == sorted(values)


def test_blocking_signal_saturates():
    tasks = [_task(1)] + [_task(i, deps=[1]) for i in range(2, 9)]
    assert blocking_signal(1, tasks[:3]) == pytest.approx(4.0)
    assert blocking_signal(1, tasks) == 10.0
    assert blocking_signal(2, tasks) == 0.0


def test_staleness_signal():
    assert staleness_signal(TODAY, TODAY) == 0.0
    assert staleness_signal(TODAY - timedelta(days=7), TODAY) == pytest.approx(5.0)
    assert staleness_signal(TODAY - timedelta(days=30), TODAY) == 10.0


def test_quick_win_signal():
    assert quick_win_signal(None, 1.0) == 0.0
    assert quick_win_signal("garbage", 1.0) == 0.0
    assert quick_win_signal("15m", 1.0) == 10.0
    assert quick_win_signal("4h", 1.0) == pytest.approx(5.0)
    assert quick_win_signal("2p", 4.0) == 0.0
    hours = ["30m", "1h", "2h", "4h", "6h", "8h"]
    values = [quick_win_signal(h, 1.0) for h in hours]
    assert values == sorted(values, reverse=True)


def test_compute_score_weights_signals():
    task = _task(1, due=TODAY + timedelta(days=15), estimate="4h")
    result = compute_score(task, [task], Settings(), TODAY)
    assert result.signals["urgency"] == pytest.approx(5.0)
    assert result.signals["quick_win"] == pytest.approx(5.0)
    assert result.score == pytest.approx(1.0 * 5.0 + 0.3 * 5.0)
    assert result.primary_factors == [f"due: {(TODAY + timedelta(days=15)).strftime('%m/%d')}", "est: 4h"]


def test_blocked_task_gets_penalty():
    blocker = _task(1)
    blocked = _task(2, deps=[1], due=TODAY)
    result = compute_score(blocked, [blocker, blocked], Settings(), TODAY)
    assert result.signals["blocked_penalty"] == BLOCKED_PENALTY
    assert result.score < 0


def test_sort_pinned_first_then_score_then_created():
    urgent = _task(1, due=TODAY)
    old_plain = _task(2, created_offset=0)
    new_plain = _task(3, created_offset=5)
    pinned_late = _task(4)
    pinned_early = _task(5)
    pinned_early.pinned, pinned_early.pinned_at = True, BASE
    pinned_late.pinned, pinned_late.pinned_at = True, BASE + timedelta(hours=1)
    tasks = [new_plain, pinned_late, old_plain, urgent, pinned_early]
    ordered = sort_tasks(tasks, tasks, Settings(), TODAY)
    assert [t.id for t in ordered] == [5, 4, 1, 2, 3]


def test_sort_is_deterministic_for_ties():
    tasks = [_task(i, created_offset=10 - i) for i in range(1, 6)]
    first = [t.id for t in sort_tasks(tasks, tasks, Settings(), TODAY)]
    second = [t.id for t in sort_tasks(list(reversed(tasks)), tasks, Settings(), TODAY)]
    assert first == second == [5, 4, 3, 2, 1]


def test_blocked_sorts_after_unblocked():
    blocker = _task(1, created_offset=10)
    blocked = _task(2, deps=[1], due=TODAY - timedelta(days=3))
    ordered = sort_tasks([blocked, blocker], [blocked, blocker], Settings(), TODAY)
    assert [t.id for t in ordered] == [1, 2]


def test_summary_factors_truncated_to_three():
    blocker = _task(1)
    task = _task(2, due=TODAY - timedelta(days=1), estimate="2h", deps=[1])
    dependent = _task(3, deps=[2])
    task.pinned = True
    factors = summary_factors(task, [blocker, task, dependent], TODAY)
    assert factors == ["due: overdue", "blocks: 1", "est: 2h"]


def test_summary_factor_phrases():
    tomorrow = _task(1, due=TODAY + timedelta(days=1))
    today = _task(2, due=TODAY)
    blocked = _task(3, deps=[1, 2])
    all_tasks = [tomorrow, today, blocked]
    assert summary_factors(tomorrow, all_tasks, TODAY) == ["due: tomorrow", "blocks: 1"]
    assert summary_factors(today, all_tasks, TODAY) == ["due: today", "blocks: 1"]
    assert summary_factors(blocked, all_tasks, TODAY) == ["blocked by: #1, #2"]


def test_pinned_without_pin_time_sorts_first_among_pinned():
    timed = _task(1)
    timed.pinned, timed.pinned_at = True, BASE
    untimed = _task(2)
    untimed.pinned = True
    plain = _task(3, due=TODAY)
    tasks = [timed, plain, untimed]
    assert [t.id for t in sort_tasks(tasks, tasks, Settings(), TODAY)] == [2, 1, 3]
