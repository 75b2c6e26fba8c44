from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from core import Status, Task, TaskFileParseError
from infrastructure.task_file_parser import TaskFileParser


def _full_task() -> Task:
    stamp = datetime(2026, 10, 1, 8, 30, 15, 123456, tzinfo=timezone.utc)
    return Task(
        id=12,
        title="Ship: the \"release\" notes",
        status=Status.IN_PROGRESS,
        created_at=stamp,
        updated_at=stamp,
        due=date(2026, 11, 1),
        tags=["work", "Écriture"],
        estimate="1.5h",
        depends_on=[3, 4],
        pinned=True,
        pinned_at=stamp,
    )


def test_roundtrip_preserves_every_field(tmp_path: Path):
    task = _full_task()
    note = "# Heading\n\n- item with --- inside\n"
    path = tmp_path / "12.md"
    path.write_text(TaskFileParser.serialize(task, note), encoding="utf-8")

    record = TaskFileParser.parse(path)

    assert record.task == task
    assert record.note == note


def test_serialized_layout():
    task = Task.new(1, "Plain")
    text = TaskFileParser.serialize(task, "body")
    assert text.startswith("---\nid: 1\ntitle: Plain\nstatus: pending\n")
    assert "\n---\n\nbody\n" in text
    assert TaskFileParser.serialize(task).endswith("---\n")


@pytest.mark.parametrize("note", ["\nleading blank\n", "\n\n# h\n", "\r\nwindows\n", "no newline at end"])
def test_note_leading_blank_lines_roundtrip(note):
    task = Task.new(4, "Notes")
    record = TaskFileParser.parse_text(TaskFileParser.serialize(task, note))
    expected = note if note.endswith("\n") else note + "\n"
    assert record.note == expected


def test_hand_written_note_without_separator():
    text = TaskFileParser.serialize(Task.new(6, "Tight")) + "body right after\n"
    assert TaskFileParser.parse_text(text).note == "body right after\n"


def test_minimal_task_without_note_roundtrips():
    task = Task.new(2, "Minimal")
    record = TaskFileParser.parse_text(TaskFileParser.serialize(task))
    assert record.task == task
    assert record.note == ""


def test_timestamps_decoded_by_yaml_are_accepted():
    text = (
        "---\n"
        "id: 5\n"
        "title: Hand written\n"
        "status: done\n"
        "created_at: 2026-10-01T08:00:00+00:00\n"
        "updated_at: 2026-10-02 09:00:00\n"
        "due: 2026-10-20\n"
        "---\n"
    )
    task = TaskFileParser.parse_text(text).task
    assert task.status is Status.DONE
    assert task.created_at == datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)
    assert task.updated_at.tzinfo is not None
    assert task.due == date(2026, 10, 20)
    assert task.tags == [] and task.depends_on == []


@pytest.mark.parametrize(
    "text, reason",
    [
        ("id: 1\ntitle: x\n", "missing front matter delimiter"),
        ("---\nid: 1\ntitle: x\n", "missing closing front matter delimiter"),
        ("---\n- a\n- b\n---\n", "front matter is not a mapping"),
        ("---\nid: [1\n---\n", "invalid YAML"),
        ("---\nid: 1\ntitle: x\n---\n", "missing required fields"),
    ],
)
def test_malformed_files_raise(text, reason):
    with pytest.raises(TaskFileParseError) as excinfo:
        TaskFileParser.parse_text(text, Path("bad.md"))
    assert reason in excinfo.value.reason
    assert excinfo.value.exit_code == 2


def test_bad_field_values_raise():
    base = "---\nid: {id}\ntitle: x\nstatus: {status}\ncreated_at: 2026-10-01T08:00:00+00:00\nupdated_at: 2026-10-01T08:00:00+00:00\n---\n"
    with pytest.raises(TaskFileParseError):
        TaskFileParser.parse_text(base.format(id="-1", status="pending"))
    with pytest.raises(TaskFileParseError):
        TaskFileParser.parse_text(base.format(id="1", status="waiting"))


def test_unreadable_file_raises(tmp_path: Path):
    with pytest.raises(TaskFileParseError):
        TaskFileParser.parse(tmp_path / "missing.md")
