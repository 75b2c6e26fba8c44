from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .errors import InvalidEstimateError
from .status import Status

SCHEMA_VERSION = 1

ESTIMATE_UNITS = ("m", "h", "p")


def now_local() -> datetime:
    """Timezone-aware current time in the local zone."""
    return datetime.now().astimezone()


@dataclass
class Task:
    id: int
    title: str
    status: Status = Status.PENDING
    created_at: datetime = field(default_factory=now_local)
    updated_at: datetime = field(default_factory=now_local)
    due: Optional[date] = None
    tags: List[str] = field(default_factory=list)
    estimate: Optional[str] = None
    depends_on: List[int] = field(default_factory=list)  # Task IDs this task depends on
    pinned: bool = False
    pinned_at: Optional[datetime] = None  # Set exactly when pinned becomes true
    schema_version: int = SCHEMA_VERSION

    @classmethod
    def new(cls, task_id: int, title: str) -> "Task":
        now = now_local()
        return cls(id=task_id, title=title, created_at=now, updated_at=now)

    def touch(self) -> None:
        self.updated_at = now_local()

    def pin(self) -> bool:
        """Pin the task; returns False when it was already pinned."""
        if self.pinned:
            return False
        now = now_local()
        self.pinned = True
        self.pinned_at = now
        self.updated_at = now
        return True

    def unpin(self) -> bool:
        if not self.pinned:
            return False
        self.pinned = False
        self.pinned_at = None
        self.touch()
        return True

    def to_metadata(self) -> Dict[str, Any]:
        """Structured block of the task file, in on-disk field order."""
        metadata: Dict[str, Any] = {
            "id": int(self.id),
            "title": self.title,
            "status": self.status.token,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.due is not None:
            metadata["due"] = self.due.isoformat()
        if self.tags:
            metadata["tags"] = list(self.tags)
        if self.estimate is not None:
            metadata["estimate"] = self.estimate
        if self.depends_on:
            metadata["depends_on"] = [int(dep) for dep in self.depends_on]
        metadata["pinned"] = bool(self.pinned)
        if self.pinned_at is not None:
            metadata["pinned_at"] = self.pinned_at.isoformat()
        metadata["schema_version"] = int(self.schema_version)
        return metadata


@dataclass
class TaskRecord:
    """A task together with its freeform note (the markdown body)."""

    task: Task
    note: str = ""

    @property
    def id(self) -> int:
        return self.task.id


@dataclass(frozen=True)
class Estimate:
    magnitude: float
    unit: str  # "m", "h" or "p"

    @classmethod
    def parse(cls, value: str) -> "Estimate":
        """Parse an estimate such as "30m", "2h", "1.5h" or "3p"."""
        text = (value or "").strip().lower()
        if not text:
            raise InvalidEstimateError(value, "Empty estimate")
        number, unit = text[:-1], text[-1]
        if unit not in ESTIMATE_UNITS:
            raise InvalidEstimateError(value, f"Unknown estimate unit: {unit} (expected m/h/p)")
        try:
            magnitude = float(number)
        except ValueError:
            raise InvalidEstimateError(value) from None
        if magnitude != magnitude or magnitude in (float("inf"), float("-inf")):
            raise InvalidEstimateError(value)
        return cls(magnitude, unit)

    def to_hours(self, point_to_hours: float) -> float:
        if self.unit == "m":
            return self.magnitude / 60.0
        if self.unit == "h":
            return self.magnitude
        return self.magnitude * point_to_hours


__all__ = ["SCHEMA_VERSION", "Task", "TaskRecord", "Estimate", "now_local"]
