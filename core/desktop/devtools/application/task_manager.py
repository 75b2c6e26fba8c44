from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from application.ports import TaskRepository
from config import Settings
from core import (
    Estimate,
    Status,
    Task,
    TaskNotFoundError,
    TaskRecord,
    TreeNode,
    add_dependency,
    get_blocked_by,
    get_blocking_tasks,
    get_dependency_tree,
    is_blocked,
    remove_dependency,
    transition,
)
from core.date_parser import parse_due
from core.desktop.devtools.application.recommendations import next_recommendations, today_focus
from core.scoring import ScoreResult, compute_score, sort_tasks
from infrastructure.file_repository import FileTaskRepository

logger = logging.getLogger("taskctl.manager")

DueInput = Union[str, date, None]


def split_tags(values: Iterable[str]) -> List[str]:
    """Flatten comma-separated tag arguments, dropping blanks."""
    tags: List[str] = []
    for value in values or []:
        for tag in str(value).split(","):
            tag = tag.strip()
            if tag:
                tags.append(tag)
    return tags


def _unique(ids: Iterable[int]) -> List[int]:
    seen = set()
    ordered: List[int] = []
    for task_id in ids:
        if task_id not in seen:
            seen.add(task_id)
            ordered.append(task_id)
    return ordered


@dataclass
class TaskView:
    """A record with its score and graph context, as shown by `show`."""

    record: TaskRecord
    score: ScoreResult
    blocked: bool
    blocked_by: List[int]
    blocking: List[int]


class TaskManager:
    """Command handlers: read-modify-write against the task store."""

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        repository: Optional[TaskRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings.load()
        self.data_dir = Path(data_dir) if data_dir is not None else self.settings.data_dir
        self.repo: TaskRepository = repository or FileTaskRepository(self.data_dir)

    def _today(self) -> date:
        return date.today()

    def _resolve_due(self, due: DueInput, today: Optional[date] = None) -> Optional[date]:
        if due is None or isinstance(due, date):
            return due
        return parse_due(due, today or self._today())

    def snapshot(self) -> List[Task]:
        return [record.task for record in self.repo.list()]

    # ---- create / edit / delete -------------------------------------------------

    def add_task(
        self,
        title: str,
        *,
        due: DueInput = None,
        tags: Sequence[str] = (),
        estimate: Optional[str] = None,
        note: Optional[str] = None,
        depends_on: Sequence[int] = (),
    ) -> TaskRecord:
        if estimate is not None:
            Estimate.parse(estimate)
        due_date = self._resolve_due(due)
        all_tags = split_tags(tags)
        deps = _unique(depends_on)

        def build(task: Task) -> None:
            if deps:
                current = self.snapshot()
                for dep_id in deps:
                    add_dependency(task.id, dep_id, current)
            task.due = due_date
            task.tags = list(all_tags)
            task.estimate = estimate
            task.depends_on = list(deps)

        record = self.repo.create(title, build)
        if note:
            record.note = note
            self.repo.update(record)
        logger.info("Created task #%s", record.task.id)
        return record

    def edit_task(
        self,
        task_id: int,
        *,
        title: Optional[str] = None,
        due: DueInput = None,
        add_tags: Sequence[str] = (),
        remove_tags: Sequence[str] = (),
        estimate: Optional[str] = None,
        note: Optional[str] = None,
        depends_on: Optional[Sequence[int]] = None,
    ) -> TaskRecord:
        """Apply a multi-field edit; every field is validated before anything is written.

        `due=""` and `estimate=""` clear the field.
        """
        record = self.repo.read(task_id)
        task = record.task

        new_due = task.due
        if due is not None:
            new_due = None if due == "" else self._resolve_due(due)
        new_estimate = task.estimate
        if estimate is not None:
            if estimate == "":
                new_estimate = None
            else:
                Estimate.parse(estimate)
                new_estimate = estimate
        new_deps = list(task.depends_on)
        if depends_on is not None:
            new_deps = _unique(depends_on)
            current = self.snapshot()
            for other in current:
                if other.id == task_id:
                    other.depends_on = []
            for dep_id in new_deps:
                add_dependency(task_id, dep_id, current)

        if title is not None:
            task.title = title
        task.due = new_due
        task.estimate = new_estimate
        for tag in split_tags(add_tags):
            if tag not in task.tags:
                task.tags.append(tag)
        removed = {tag.lower() for tag in split_tags(remove_tags)}
        if removed:
            task.tags = [tag for tag in task.tags if tag.lower() not in removed]
        task.depends_on = new_deps
        if note is not None:
            record.note = note
        task.touch()
        self.repo.update(record)
        return record

    def delete_task(self, task_id: int) -> None:
        self.repo.delete(task_id)
        logger.info("Deleted task #%s", task_id)

    # ---- status -----------------------------------------------------------------

    def set_status(self, task_id: int, target: Status) -> Tuple[TaskRecord, bool]:
        """Transition a task; returns (record, changed). Same-state moves are no-ops."""
        record = self.repo.read(task_id)
        new_status = transition(record.task.status, target)
        if new_status == record.task.status:
            return record, False
        record.task.status = new_status
        record.task.touch()
        self.repo.update(record)
        return record, True

    def start(self, task_id: int) -> Tuple[TaskRecord, bool]:
        return self.set_status(task_id, Status.IN_PROGRESS)

    def reopen(self, task_id: int) -> Tuple[TaskRecord, bool]:
        return self.set_status(task_id, Status.PENDING)

    def complete(self, task_id: int) -> Tuple[TaskRecord, List[int]]:
        """Mark done; returns the record and the dependents that are now unblocked.

        Completing a task that is already done unblocks nothing.
        """
        record, changed = self.set_status(task_id, Status.DONE)
        if not changed:
            return record, []
        current = self.snapshot()
        by_id = {task.id: task for task in current}
        unblocked = [
            dependent
            for dependent in get_blocking_tasks(task_id, current)
            if not is_blocked(by_id[dependent], current)
        ]
        return record, unblocked

    # ---- pin ----------------------------------------------------------------------

    def pin(self, task_id: int) -> Tuple[TaskRecord, bool]:
        record = self.repo.read(task_id)
        changed = record.task.pin()
        if changed:
            self.repo.update(record)
        return record, changed

    def unpin(self, task_id: int) -> Tuple[TaskRecord, bool]:
        record = self.repo.read(task_id)
        changed = record.task.unpin()
        if changed:
            self.repo.update(record)
        return record, changed

    # ---- dependencies -------------------------------------------------------------

    def add_dependency(self, task_id: int, depends_on_id: int) -> TaskRecord:
        record = self.repo.read(task_id)
        add_dependency(task_id, depends_on_id, self.snapshot())
        if depends_on_id not in record.task.depends_on:
            record.task.depends_on.append(depends_on_id)
            record.task.touch()
            self.repo.update(record)
        return record

    def remove_dependency(self, task_id: int, depends_on_id: int) -> TaskRecord:
        record = self.repo.read(task_id)
        if remove_dependency(record.task, depends_on_id):
            record.task.touch()
            self.repo.update(record)
        return record

    def dependency_tree(self, task_id: int) -> TreeNode:
        tree = get_dependency_tree(task_id, self.snapshot())
        if tree is None:
            raise TaskNotFoundError(task_id)
        return tree

    # ---- queries ------------------------------------------------------------------

    def show(self, task_id: int, today: Optional[date] = None) -> TaskView:
        record = self.repo.read(task_id)
        current = self.snapshot()
        blocked_by = get_blocked_by(record.task, current)
        return TaskView(
            record=record,
            score=compute_score(record.task, current, self.settings, today or self._today()),
            blocked=bool(blocked_by),
            blocked_by=blocked_by,
            blocking=get_blocking_tasks(task_id, current),
        )

    def list_tasks(
        self,
        *,
        tag: Optional[str] = None,
        status: Optional[Status] = None,
        due_before: DueInput = None,
        due_after: DueInput = None,
        include_done: bool = False,
        today: Optional[date] = None,
    ) -> List[Task]:
        today = today or self._today()
        current = self.snapshot()
        tasks = list(current)
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        elif not include_done:
            tasks = [t for t in tasks if t.status != Status.DONE]
        if tag:
            wanted = tag.lower()
            tasks = [t for t in tasks if any(tg.lower() == wanted for tg in t.tags)]
        before = self._resolve_due(due_before, today)
        if before is not None:
            tasks = [t for t in tasks if t.due is not None and t.due <= before]
        after = self._resolve_due(due_after, today)
        if after is not None:
            tasks = [t for t in tasks if t.due is not None and t.due >= after]
        return sort_tasks(tasks, current, self.settings, today)

    def search(
        self,
        query: str,
        *,
        tag: Optional[str] = None,
        status: Optional[Status] = None,
        today: Optional[date] = None,
    ) -> List[Task]:
        """Case-insensitive substring match on title or note."""
        records = self.repo.list()
        current = [record.task for record in records]
        needle = (query or "").lower()
        tasks = [
            record.task
            for record in records
            if needle in record.task.title.lower() or needle in record.note.lower()
        ]
        if tag:
            wanted = tag.lower()
            tasks = [t for t in tasks if any(tg.lower() == wanted for tg in t.tags)]
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        return sort_tasks(tasks, current, self.settings, today or self._today())

    def next_task(self, today: Optional[date] = None) -> Optional[Task]:
        _, selected = next_recommendations(self.snapshot(), self.settings, today=today or self._today())
        return selected

    def today_tasks(self, today: Optional[date] = None) -> List[Task]:
        return today_focus(self.snapshot(), self.settings, today=today or self._today())


__all__ = ["TaskManager", "TaskView", "split_tags"]
