"""Persisted id counter (`.meta.json`) for task id allocation."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from core.errors import PersistenceError, TaskFileParseError
from infrastructure.atomic_write import atomic_write_text

META_FILENAME = ".meta.json"


@dataclass
class MetaStore:
    next_id: int = 1

    @staticmethod
    def path_for(data_dir: Path) -> Path:
        return Path(data_dir) / META_FILENAME

    @classmethod
    def load(cls, data_dir: Path) -> "MetaStore":
        """Read the counter, or the default when no metadata file exists yet."""
        path = cls.path_for(data_dir)
        if not path.exists():
            return cls()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise TaskFileParseError(path, f"invalid JSON: {exc}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read {path}: {exc}", path) from exc
        next_id = raw.get("next_id") if isinstance(raw, dict) else None
        if isinstance(next_id, bool) or not isinstance(next_id, int) or next_id < 1:
            raise TaskFileParseError(path, f"'next_id' must be a positive integer, got {next_id!r}")
        return cls(next_id=next_id)

    def save(self, data_dir: Path) -> None:
        path = self.path_for(data_dir)
        atomic_write_text(path, json.dumps({"next_id": self.next_id}, indent=2) + "\n")

    def allocate(self) -> int:
        """Return the current id and advance the counter (caller persists)."""
        allocated = self.next_id
        self.next_id += 1
        return allocated


__all__ = ["MetaStore", "META_FILENAME"]
