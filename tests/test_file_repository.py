from pathlib import Path

import pytest

from core import LockTimeoutError, Status, TaskNotFoundError, is_blocked
from infrastructure.file_lock import FileLock
from infrastructure.file_repository import FileTaskRepository
from infrastructure.meta_store import MetaStore


def _repo(tmp_path: Path) -> FileTaskRepository:
    return FileTaskRepository(tmp_path / "data", lock_timeout=0.2, lock_retry_interval=0.05)


def test_create_allocates_sequential_ids(tmp_path: Path):
    repo = _repo(tmp_path)
    first = repo.create("First")
    second = repo.create("Second")

    assert (first.id, second.id) == (1, 2)
    assert (repo.data_dir / "1.md").exists()
    assert MetaStore.load(repo.data_dir).next_id == 3


def test_ids_are_never_reused_after_delete(tmp_path: Path):
    repo = _repo(tmp_path)
    repo.create("One")
    repo.create("Two")
    repo.delete(2)
    assert repo.create("Three").id == 3


def test_mutator_cannot_change_id(tmp_path: Path):
    repo = _repo(tmp_path)

    def mutate(task):
        task.id = 99
        task.tags = ["x"]

    record = repo.create("Mutated", mutate)
    assert record.id == 1
    assert repo.read(1).task.tags == ["x"]


def test_failing_mutator_writes_nothing(tmp_path: Path):
    repo = _repo(tmp_path)

    def explode(task):
        raise ValueError("nope")

    with pytest.raises(ValueError):
        repo.create("Broken", explode)
    assert repo.list() == []
    assert MetaStore.load(repo.data_dir).next_id == 1
    assert not (repo.data_dir / ".lock").exists()


def test_read_update_roundtrip(tmp_path: Path):
    repo = _repo(tmp_path)
    record = repo.create("Edit me")
    record.note = "some notes"
    record.task.status = Status.IN_PROGRESS
    repo.update(record)

    loaded = repo.read(record.id)
    assert loaded.note == "some notes"
    assert loaded.task.status is Status.IN_PROGRESS


def test_missing_task_raises_not_found(tmp_path: Path):
    repo = _repo(tmp_path)
    with pytest.raises(TaskNotFoundError):
        repo.read(4)
    with pytest.raises(TaskNotFoundError):
        repo.delete(4)
    other = _repo(tmp_path / "other").create("elsewhere")
    with pytest.raises(TaskNotFoundError):
        repo.update(other)


def test_list_sorted_and_skips_corrupt_and_foreign_files(tmp_path: Path, caplog):
    repo = _repo(tmp_path)
    for title in ("a", "b", "c"):
        repo.create(title)
    (repo.data_dir / "2.md").write_text("garbage without front matter")
    (repo.data_dir / "README.md").write_text("not a task")
    (repo.data_dir / ".1.md.abc.tmp").write_text("temp")

    with caplog.at_level("WARNING", logger="taskctl.storage"):
        records = repo.list()

    assert [r.id for r in records] == [1, 3]
    assert "Skipping" in caplog.text


def test_list_of_missing_directory_is_empty(tmp_path: Path):
    assert _repo(tmp_path).list() == []


def test_delete_cascade_unblocks_dependents(tmp_path: Path):
    repo = _repo(tmp_path)
    blocker = repo.create("Blocker")

    def depends(task):
        task.depends_on = [blocker.id]

    dependents = [repo.create("Dependent A", depends), repo.create("Dependent B", depends)]
    tasks = [r.task for r in repo.list()]
    assert all(is_blocked(repo.read(d.id).task, tasks) for d in dependents)

    repo.delete(blocker.id)

    after = [r.task for r in repo.list()]
    assert [t.id for t in after] == [d.id for d in dependents]
    for task in after:
        assert task.depends_on == []
        assert not is_blocked(task, after)


def test_mutation_times_out_while_lock_is_held(tmp_path: Path):
    repo = _repo(tmp_path)
    record = repo.create("Locked")
    with FileLock(repo.data_dir):
        with pytest.raises(LockTimeoutError):
            repo.update(record)
    repo.update(record)
