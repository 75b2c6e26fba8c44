"""Error taxonomy for taskctl.

Every error carries a message plus a details mapping and knows the process exit
code of its category (input=1, data=2, lock=3, config=4).
"""

from pathlib import Path
from typing import Any, Dict, List, Optional


class TaskCtlError(Exception):
    """Base class for all taskctl errors."""

    exit_code = 1

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class TaskNotFoundError(TaskCtlError):
    """Referenced task id does not exist."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task #{task_id} does not exist", {"task_id": task_id})
        self.task_id = task_id


class TaskValidationError(TaskCtlError, ValueError):
    """Input rejected before anything was written."""


class SelfDependencyError(TaskValidationError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"A task cannot depend on itself (#{task_id})", {"task_id": task_id})
        self.task_id = task_id


class CyclicDependencyError(TaskValidationError):
    """Adding the edge would close a cycle; `path` is one offending cycle."""

    def __init__(self, path: List[int]) -> None:
        rendered = " -> ".join(f"#{tid}" for tid in path)
        super().__init__(f"Cyclic dependency detected ({rendered})", {"path": list(path)})
        self.path = list(path)


class InvalidEstimateError(TaskValidationError):
    def __init__(self, value: str, reason: str = "") -> None:
        message = reason or f"Invalid estimate: {value!r}"
        super().__init__(message, {"value": value})
        self.value = value


class InvalidStatusError(TaskValidationError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown status: {value!r}", {"value": value})
        self.value = value


class InvalidTransitionError(TaskValidationError):
    def __init__(self, current: Any, target: Any) -> None:
        super().__init__(
            f"Cannot transition from {current} to {target}",
            {"current": str(current), "target": str(target)},
        )
        self.current = current
        self.target = target


class InvalidDateError(TaskValidationError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Cannot parse date: {value!r}", {"value": value})
        self.value = value


class LockTimeoutError(TaskCtlError):
    """The data directory lock could not be acquired in time."""

    exit_code = 3

    def __init__(self, lock_path: Path, timeout: float) -> None:
        super().__init__(
            f"Failed to acquire lock file {lock_path} within {timeout:g}s",
            {"path": str(lock_path), "timeout": timeout},
        )
        self.lock_path = lock_path
        self.timeout = timeout


class PersistenceError(TaskCtlError):
    """Stored data is unreadable or the filesystem refused an operation."""

    exit_code = 2

    def __init__(self, message: str, path: Optional[Path] = None, details: Optional[Dict[str, Any]] = None) -> None:
        details = details or {}
        if path is not None:
            details["path"] = str(path)
        super().__init__(message, details)
        self.path = path


class TaskFileParseError(PersistenceError):
    """A task or metadata file could not be decoded."""

    def __init__(self, path: Optional[Path], reason: str) -> None:
        where = str(path) if path is not None else "<memory>"
        super().__init__(f"Failed to parse file {where}: {reason}", path, {"reason": reason})
        self.reason = reason


class ConfigurationError(TaskCtlError):
    exit_code = 4

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message, {"path": str(path)} if path is not None else None)
        self.path = path


__all__ = [
    "TaskCtlError",
    "TaskNotFoundError",
    "TaskValidationError",
    "SelfDependencyError",
    "CyclicDependencyError",
    "InvalidEstimateError",
    "InvalidStatusError",
    "InvalidTransitionError",
    "InvalidDateError",
    "LockTimeoutError",
    "PersistenceError",
    "TaskFileParseError",
    "ConfigurationError",
]
