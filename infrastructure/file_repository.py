import logging
from pathlib import Path
from typing import List, Optional

from application.ports import TaskMutator, TaskRepository
from core import Task, TaskRecord
from core.errors import PersistenceError, TaskFileParseError, TaskNotFoundError
from infrastructure.atomic_write import atomic_write_text
from infrastructure.file_lock import LOCK_RETRY_INTERVAL_SECONDS, LOCK_TIMEOUT_SECONDS, FileLock
from infrastructure.meta_store import MetaStore
from infrastructure.task_file_parser import TaskFileParser

TASK_FILE_SUFFIX = ".md"

logger = logging.getLogger("taskctl.storage")


class FileTaskRepository(TaskRepository):
    """One `<id>.md` file per task inside a single data directory.

    Mutations (create/update/delete) run under the directory lock; reads take
    no lock and may observe a delete cascade half-way through.
    """

    def __init__(
        self,
        data_dir: Path,
        lock_timeout: float = LOCK_TIMEOUT_SECONDS,
        lock_retry_interval: float = LOCK_RETRY_INTERVAL_SECONDS,
    ):
        self.data_dir = Path(data_dir)
        self.lock_timeout = lock_timeout
        self.lock_retry_interval = lock_retry_interval

    def ensure_dir(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create data directory: {exc}", self.data_dir) from exc

    def _lock(self) -> FileLock:
        return FileLock(self.data_dir, timeout=self.lock_timeout, retry_interval=self.lock_retry_interval)

    def _resolve_path(self, task_id: int) -> Path:
        if isinstance(task_id, bool) or not isinstance(task_id, int) or task_id < 0:
            raise ValueError(f"Invalid task_id: {task_id!r}")
        return self.data_dir / f"{task_id}{TASK_FILE_SUFFIX}"

    def _write(self, record: TaskRecord) -> None:
        content = TaskFileParser.serialize(record.task, record.note)
        atomic_write_text(self._resolve_path(record.task.id), content)

    def _task_files(self) -> List[Path]:
        if not self.data_dir.exists():
            return []
        # Only numeric stems are task files; temp files and dotfiles are skipped
        return [
            path
            for path in self.data_dir.glob(f"*{TASK_FILE_SUFFIX}")
            if path.is_file() and path.stem.isdigit()
        ]

    def create(self, title: str, mutator: Optional[TaskMutator] = None) -> TaskRecord:
        """Allocate the next id and write a fresh task, all under the lock."""
        self.ensure_dir()
        with self._lock():
            meta = MetaStore.load(self.data_dir)
            task_id = meta.allocate()
            task = Task.new(task_id, title)
            if mutator is not None:
                mutator(task)
            # The mutator may not reassign the id
            task.id = task_id
            record = TaskRecord(task=task, note="")
            self._write(record)
            meta.save(self.data_dir)
        logger.debug("Created task #%s", task_id)
        return record

    def read(self, task_id: int) -> TaskRecord:
        path = self._resolve_path(task_id)
        if not path.exists():
            raise TaskNotFoundError(task_id)
        return TaskFileParser.parse(path)

    def list(self) -> List[TaskRecord]:
        """Every readable task, ascending by id; corrupt files are skipped."""
        records: List[TaskRecord] = []
        for path in self._task_files():
            try:
                records.append(TaskFileParser.parse(path))
            except TaskFileParseError as exc:
                logger.warning("Skipping %s: %s", path, exc.reason)
        records.sort(key=lambda record: record.task.id)
        return records

    def update(self, record: TaskRecord) -> None:
        path = self._resolve_path(record.task.id)
        if not path.exists():
            raise TaskNotFoundError(record.task.id)
        with self._lock():
            self._write(record)

    def delete(self, task_id: int) -> None:
        """Remove the task, then drop its id from every other task's depends_on.

        The cascade rewrites each dependent file separately; there is no
        cross-file atomicity.
        """
        path = self._resolve_path(task_id)
        if not path.exists():
            raise TaskNotFoundError(task_id)
        with self._lock():
            try:
                path.unlink()
            except FileNotFoundError:
                raise TaskNotFoundError(task_id) from None
            except OSError as exc:
                raise PersistenceError(f"Unable to delete task #{task_id}: {exc}", path) from exc
            for record in self.list():
                if task_id not in record.task.depends_on:
                    continue
                record.task.depends_on = [dep for dep in record.task.depends_on if dep != task_id]
                self._write(record)
                logger.debug("Removed #%s from depends_on of #%s", task_id, record.task.id)
        logger.debug("Deleted task #%s", task_id)


__all__ = ["FileTaskRepository", "TASK_FILE_SUFFIX"]
