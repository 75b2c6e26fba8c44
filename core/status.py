from enum import Enum
from typing import Dict, Final, FrozenSet

from .errors import InvalidStatusError, InvalidTransitionError


class Status(Enum):
    PENDING = ("pending", "○")
    IN_PROGRESS = ("in_progress", "●")
    DONE = ("done", "✓")

    @property
    def token(self) -> str:
        return self.value[0]

    @property
    def symbol(self) -> str:
        return self.value[1]

    def __str__(self) -> str:
        return self.token

    @classmethod
    def from_string(cls, value: str) -> "Status":
        token = normalize_task_status(value)
        for status in cls:
            if status.token == token:
                return status
        raise InvalidStatusError(value)


_ALIASES: Final[Dict[str, str]] = {
    "inprogress": "in_progress",
    "in-progress": "in_progress",
}

_CANONICAL_CODES: Final[FrozenSet[str]] = frozenset({"pending", "in_progress", "done"})

# Same-state moves are handled separately and always succeed.
_ALLOWED: Final[Dict[Status, FrozenSet[Status]]] = {
    Status.PENDING: frozenset({Status.IN_PROGRESS, Status.DONE}),
    Status.IN_PROGRESS: frozenset({Status.PENDING, Status.DONE}),
    Status.DONE: frozenset({Status.PENDING}),
}


def normalize_task_status(value: str) -> str:
    """Normalize status input to a canonical token (pending/in_progress/done)."""
    token = (value or "").strip().lower().replace(" ", "_")
    token = _ALIASES.get(token, token)
    if token in _CANONICAL_CODES:
        return token
    raise InvalidStatusError(value)


def can_transition(current: Status, target: Status) -> bool:
    return current == target or target in _ALLOWED[current]


def transition(current: Status, target: Status) -> Status:
    """Return the target status or raise when the move is not allowed.

    Transitioning a status to itself is an idempotent no-op.
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)
    return target


__all__ = ["Status", "normalize_task_status", "can_transition", "transition"]
