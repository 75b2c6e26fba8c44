from .errors import (
    TaskCtlError,
    TaskNotFoundError,
    TaskValidationError,
    SelfDependencyError,
    CyclicDependencyError,
    InvalidEstimateError,
    InvalidStatusError,
    InvalidTransitionError,
    InvalidDateError,
    LockTimeoutError,
    PersistenceError,
    TaskFileParseError,
    ConfigurationError,
)
from .status import Status, transition
from .task_detail import SCHEMA_VERSION, Estimate, Task, TaskRecord, now_local
from .dependency_validator import (
    TreeNode,
    add_dependency,
    remove_dependency,
    build_dependency_graph,
    get_blocked_by,
    get_blocking_tasks,
    get_dependency_tree,
    is_blocked,
)

__all__ = [
    "Status",
    "transition",
    "SCHEMA_VERSION",
    "Estimate",
    "Task",
    "TaskRecord",
    "now_local",
    # Dependencies
    "TreeNode",
    "add_dependency",
    "remove_dependency",
    "build_dependency_graph",
    "get_blocked_by",
    "get_blocking_tasks",
    "get_dependency_tree",
    "is_blocked",
    # Errors
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
