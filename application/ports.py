from typing import Callable, List, Optional, Protocol

from core import Task, TaskRecord

TaskMutator = Callable[[Task], None]


class TaskRepository(Protocol):
    def create(self, title: str, mutator: Optional[TaskMutator] = None) -> TaskRecord:
        ...

    def read(self, task_id: int) -> TaskRecord:
        ...

    def list(self) -> List[TaskRecord]:
        ...

    def update(self, record: TaskRecord) -> None:
        ...

    def delete(self, task_id: int) -> None:
        ...
