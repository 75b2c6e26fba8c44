import functools
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from core import Status, Task, TaskCtlError, is_blocked
from core.desktop.devtools.application.task_manager import TaskManager
from core.desktop.devtools.interface.cli_io import error_from_exception, structured_response
from core.desktop.devtools.interface.serializers import (
    record_to_dict,
    render_tree,
    score_to_dict,
    task_to_dict,
    tree_to_dict,
)
from core.scoring import summary_factors

logger = logging.getLogger("taskctl.cli")

TaskManagerFactory = Callable[[], TaskManager]


@dataclass
class CliDeps:
    manager_factory: TaskManagerFactory
    init_config: Callable[[Optional[Path], bool], Path]
    today: Callable[[], date] = field(default=date.today)


def command(name: str):
    """Turn domain errors raised by a handler into a structured error response."""

    def decorate(handler: Callable[[Any, CliDeps], int]) -> Callable[[Any, CliDeps], int]:
        @functools.wraps(handler)
        def wrapper(args, deps: CliDeps) -> int:
            try:
                return handler(args, deps)
            except TaskCtlError as exc:
                logger.debug("%s failed: %s", name, exc.message)
                return error_from_exception(name, exc)

        return wrapper

    return decorate


def _status(value: Optional[str]) -> Optional[Status]:
    return Status.from_string(value) if value else None


def _rows(tasks: List[Task], all_tasks: List[Task], today: date) -> List[Dict[str, Any]]:
    rows = []
    for task in tasks:
        row = task_to_dict(task, blocked=is_blocked(task, all_tasks))
        row["factors"] = summary_factors(task, all_tasks, today)
        rows.append(row)
    return rows


def _ids(ids: List[int]) -> str:
    return ", ".join(f"#{task_id}" for task_id in ids)


@command("init")
def cmd_init(args, deps: CliDeps) -> int:
    config = getattr(args, "config", None)
    path = deps.init_config(Path(config) if config else None, bool(getattr(args, "force", False)))
    return structured_response("init", message=f"Wrote default config to {path}", payload={"path": str(path)})


@command("add")
def cmd_add(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    record = manager.add_task(
        args.title,
        due=getattr(args, "due", None),
        tags=getattr(args, "tags", None) or [],
        estimate=getattr(args, "estimate", None),
        note=getattr(args, "note", None),
        depends_on=getattr(args, "depends_on", None) or [],
    )
    return structured_response(
        "add",
        message=f"Created task #{record.id}",
        payload={"task": record_to_dict(record)},
    )


@command("list")
def cmd_list(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    today = deps.today()
    tasks = manager.list_tasks(
        tag=getattr(args, "tag", None),
        status=_status(getattr(args, "status", None)),
        due_before=getattr(args, "due_before", None),
        due_after=getattr(args, "due_after", None),
        include_done=bool(getattr(args, "include_done", False)),
        today=today,
    )
    rows = _rows(tasks, manager.snapshot(), today)
    return structured_response(
        "list",
        message=f"{len(rows)} task(s)",
        payload={"tasks": rows, "count": len(rows)},
    )


@command("show")
def cmd_show(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    view = manager.show(args.task_id, today=deps.today())
    return structured_response(
        "show",
        message=f"Task #{view.record.id}",
        payload={
            "task": record_to_dict(view.record),
            "score": score_to_dict(view.score),
            "blocked": view.blocked,
            "blocked_by": view.blocked_by,
            "blocking": view.blocking,
        },
    )


@command("edit")
def cmd_edit(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    record = manager.edit_task(
        args.task_id,
        title=getattr(args, "title", None),
        due=getattr(args, "due", None),
        add_tags=getattr(args, "add_tags", None) or [],
        remove_tags=getattr(args, "remove_tags", None) or [],
        estimate=getattr(args, "estimate", None),
        note=getattr(args, "note", None),
        depends_on=getattr(args, "depends_on", None),
    )
    return structured_response("edit", message=f"Updated task #{record.id}", payload={"task": record_to_dict(record)})


@command("delete")
def cmd_delete(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    manager.delete_task(args.task_id)
    return structured_response("delete", message=f"Deleted task #{args.task_id}", payload={"task_id": args.task_id})


def _toggle(name: str, action: Callable[[TaskManager, int], Any], done_message: str, noop_message: str):
    @command(name)
    def handler(args, deps: CliDeps) -> int:
        record, changed = action(deps.manager_factory(), args.task_id)
        template = done_message if changed else noop_message
        return structured_response(
            name,
            message=template.format(id=record.id, status=record.task.status.token),
            payload={"task": record_to_dict(record), "changed": changed},
        )

    handler.__name__ = f"cmd_{name}"
    return handler


cmd_start = _toggle("start", TaskManager.start, "Started task #{id}", "Task #{id} is already {status}")
cmd_pending = _toggle("pending", TaskManager.reopen, "Task #{id} is pending again", "Task #{id} is already {status}")
cmd_pin = _toggle("pin", TaskManager.pin, "Pinned task #{id}", "Task #{id} is already pinned")
cmd_unpin = _toggle("unpin", TaskManager.unpin, "Unpinned task #{id}", "Task #{id} is not pinned")


@command("done")
def cmd_done(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    record, unblocked = manager.complete(args.task_id)
    message = f"Completed task #{record.id}"
    if unblocked:
        message += f"; unblocked {_ids(unblocked)}"
    return structured_response(
        "done",
        message=message,
        payload={"task": record_to_dict(record), "unblocked": unblocked},
    )


@command("depends")
def cmd_depends(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    record = manager.add_dependency(args.task_id, args.on)
    return structured_response(
        "depends",
        message=f"Task #{args.task_id} now depends on #{args.on}",
        payload={"task": record_to_dict(record)},
    )


@command("undepends")
def cmd_undepends(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    record = manager.remove_dependency(args.task_id, args.on)
    return structured_response(
        "undepends",
        message=f"Task #{args.task_id} no longer depends on #{args.on}",
        payload={"task": record_to_dict(record)},
    )


@command("tree")
def cmd_tree(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    tree = manager.dependency_tree(args.task_id)
    lines = render_tree(tree)
    return structured_response(
        "tree",
        message=f"Dependency tree of #{args.task_id}",
        payload={"tree": tree_to_dict(tree), "lines": lines},
        summary="\n".join(lines),
    )


@command("next")
def cmd_next(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    today = deps.today()
    selected = manager.next_task(today=today)
    if selected is None:
        return structured_response("next", message="No actionable tasks", payload={"task": None})
    row = _rows([selected], manager.snapshot(), today)[0]
    return structured_response("next", message=f"Next: #{selected.id} {selected.title}", payload={"task": row})


@command("today")
def cmd_today(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    today = deps.today()
    tasks = manager.today_tasks(today=today)
    rows = _rows(tasks, manager.snapshot(), today)
    return structured_response("today", message=f"{len(rows)} task(s) for today", payload={"tasks": rows, "count": len(rows)})


@command("search")
def cmd_search(args, deps: CliDeps) -> int:
    manager = deps.manager_factory()
    today = deps.today()
    tasks = manager.search(
        args.query,
        tag=getattr(args, "tag", None),
        status=_status(getattr(args, "status", None)),
        today=today,
    )
    rows = _rows(tasks, manager.snapshot(), today)
    return structured_response(
        "search",
        message=f"{len(rows)} match(es) for {args.query!r}",
        payload={"query": args.query, "tasks": rows, "count": len(rows)},
    )


__all__ = [
    "CliDeps",
    "command",
    "cmd_init",
    "cmd_add",
    "cmd_list",
    "cmd_show",
    "cmd_edit",
    "cmd_delete",
    "cmd_start",
    "cmd_done",
    "cmd_pending",
    "cmd_pin",
    "cmd_unpin",
    "cmd_depends",
    "cmd_undepends",
    "cmd_tree",
    "cmd_next",
    "cmd_today",
    "cmd_search",
]
