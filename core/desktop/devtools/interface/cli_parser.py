"""CLI parser construction for taskctl."""

import argparse
from typing import Any

STATUS_CHOICES = ["pending", "in_progress", "done"]


def _task_id(value: str) -> int:
    text = value.strip().lstrip("#")
    if not text.isdigit():
        raise argparse.ArgumentTypeError(f"invalid task id: {value!r}")
    return int(text)


def _id_list(value: str):
    return [_task_id(part) for part in value.split(",") if part.strip()]


def build_parser(commands: Any) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskctl",
        description="Local task tracker with dependencies and priority scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--data-dir", dest="data_dir", help="task data directory (overrides config and $TASKCTL_DATA_DIR)")
    parser.add_argument("--config", dest="config", help="config file path (overrides $TASKCTL_CONFIG)")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging on stderr")

    sub = parser.add_subparsers(dest="command", help="Commands")

    # init
    ip = sub.add_parser("init", help="Write the default config file")
    ip.add_argument("--force", action="store_true", help="overwrite an existing config")
    ip.set_defaults(func=commands.cmd_init)

    # add
    ap = sub.add_parser("add", help="Create a task")
    ap.add_argument("title")
    ap.add_argument("--due", help="YYYY-MM-DD, today, tomorrow, +3d, +2w or a weekday name")
    ap.add_argument("--tag", "-t", dest="tags", action="append", default=[], help="tag (repeatable, or comma-separated)")
    ap.add_argument("--estimate", "-e", help="e.g. 30m, 2h, 3p")
    ap.add_argument("--note", "-n")
    ap.add_argument("--depends-on", dest="depends_on", type=_id_list, default=[], help="comma-separated ids")
    ap.set_defaults(func=commands.cmd_add)

    # list
    lp = sub.add_parser("list", help="List tasks in priority order")
    lp.add_argument("--tag")
    lp.add_argument("--status", choices=STATUS_CHOICES)
    lp.add_argument("--due-before", dest="due_before")
    lp.add_argument("--due-after", dest="due_after")
    lp.add_argument("--all", dest="include_done", action="store_true", help="include done tasks")
    lp.set_defaults(func=commands.cmd_list)

    # show
    sp = sub.add_parser("show", help="Show a task with its score")
    sp.add_argument("task_id", type=_task_id)
    sp.set_defaults(func=commands.cmd_show)

    # edit
    ep = sub.add_parser("edit", help="Edit task fields")
    ep.add_argument("task_id", type=_task_id)
    ep.add_argument("--title")
    ep.add_argument("--due", help="new due date; empty string clears it")
    ep.add_argument("--add-tag", dest="add_tags", action="append", default=[])
    ep.add_argument("--remove-tag", dest="remove_tags", action="append", default=[])
    ep.add_argument("--estimate", help="new estimate; empty string clears it")
    ep.add_argument("--note")
    ep.add_argument("--depends-on", dest="depends_on", type=_id_list, help="replace dependencies (comma-separated ids)")
    ep.set_defaults(func=commands.cmd_edit)

    # delete
    dp = sub.add_parser("delete", help="Delete a task and drop it from dependents")
    dp.add_argument("task_id", type=_task_id)
    dp.set_defaults(func=commands.cmd_delete)

    # single-task commands
    for name, handler, help_text in (
        ("start", commands.cmd_start, "Mark a task in progress"),
        ("done", commands.cmd_done, "Mark a task done"),
        ("pending", commands.cmd_pending, "Move a task back to pending"),
        ("pin", commands.cmd_pin, "Pin a task to the top"),
        ("unpin", commands.cmd_unpin, "Remove a pin"),
        ("tree", commands.cmd_tree, "Show the dependency tree of a task"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("task_id", type=_task_id)
        p.set_defaults(func=handler)

    # dependencies
    dep = sub.add_parser("depends", help="Make a task depend on another")
    dep.add_argument("task_id", type=_task_id)
    dep.add_argument("on", type=_task_id)
    dep.set_defaults(func=commands.cmd_depends)

    undep = sub.add_parser("undepends", help="Remove a dependency edge")
    undep.add_argument("task_id", type=_task_id)
    undep.add_argument("on", type=_task_id)
    undep.set_defaults(func=commands.cmd_undepends)

    # recommendations
    np = sub.add_parser("next", help="Recommend the next task")
    np.set_defaults(func=commands.cmd_next)

    tp = sub.add_parser("today", help="Tasks due, started or pinned")
    tp.set_defaults(func=commands.cmd_today)

    # search
    qp = sub.add_parser("search", help="Search titles and notes")
    qp.add_argument("query")
    qp.add_argument("--tag")
    qp.add_argument("--status", choices=STATUS_CHOICES)
    qp.set_defaults(func=commands.cmd_search)

    return parser


__all__ = ["build_parser", "STATUS_CHOICES"]
