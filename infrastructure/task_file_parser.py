from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from core import SCHEMA_VERSION, Status, Task, TaskRecord
from core.errors import InvalidStatusError, TaskFileParseError

FRONT_MATTER_DELIMITER = "---"
REQUIRED_FIELDS = ("id", "title", "status", "created_at", "updated_at")


class TaskFileParser:
    """Codec between a TaskRecord and its file text.

    Layout: a `---` line, the YAML structured block, a closing `---` line, then
    the freeform note (separated by one blank line when present).
    """

    @staticmethod
    def serialize(task: Task, note: str = "") -> str:
        header = yaml.safe_dump(
            task.to_metadata(),
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
        parts = [FRONT_MATTER_DELIMITER, "\n", header, FRONT_MATTER_DELIMITER, "\n"]
        if note:
            parts.append("\n")
            parts.append(note)
            if not note.endswith("\n"):
                parts.append("\n")
        return "".join(parts)

    @classmethod
    def parse(cls, filepath: Path) -> TaskRecord:
        try:
            content = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TaskFileParseError(filepath, f"unable to read file: {exc}") from exc
        return cls.parse_text(content, filepath)

    @classmethod
    def parse_text(cls, content: str, path: Optional[Path] = None) -> TaskRecord:
        block, note = cls.split_front_matter(content, path)
        try:
            metadata = yaml.safe_load(block)
        except yaml.YAMLError as exc:
            raise TaskFileParseError(path, f"invalid YAML: {exc}") from exc
        if not isinstance(metadata, dict):
            raise TaskFileParseError(path, "front matter is not a mapping")
        return TaskRecord(task=cls._build_task(metadata, path), note=note)

    @staticmethod
    def split_front_matter(content: str, path: Optional[Path] = None) -> Tuple[str, str]:
        """Split file text into (structured block, note)."""
        lines = content.lstrip().splitlines(keepends=True)
        if not lines or lines[0].rstrip("\r\n") != FRONT_MATTER_DELIMITER:
            raise TaskFileParseError(path, "missing front matter delimiter")
        for idx in range(1, len(lines)):
            if lines[idx].rstrip("\r\n") == FRONT_MATTER_DELIMITER:
                block = "".join(lines[1:idx])
                note = "".join(lines[idx + 1:])
                # Exactly one separator line; further blank lines belong to the note
                if note.startswith("\r\n"):
                    note = note[2:]
                elif note.startswith("\n"):
                    note = note[1:]
                return block, note
        raise TaskFileParseError(path, "missing closing front matter delimiter")

    @classmethod
    def _build_task(cls, metadata: Dict[str, Any], path: Optional[Path]) -> Task:
        missing = [key for key in REQUIRED_FIELDS if metadata.get(key) is None]
        if missing:
            raise TaskFileParseError(path, f"missing required fields: {', '.join(missing)}")
        try:
            status = Status.from_string(str(metadata["status"]))
        except InvalidStatusError as exc:
            raise TaskFileParseError(path, str(exc)) from exc
        pinned_at = metadata.get("pinned_at")
        return Task(
            id=cls._coerce_int(metadata["id"], "id", path),
            title=str(metadata["title"]),
            status=status,
            created_at=cls._coerce_timestamp(metadata["created_at"], "created_at", path),
            updated_at=cls._coerce_timestamp(metadata["updated_at"], "updated_at", path),
            due=cls._coerce_date(metadata.get("due"), path),
            tags=[str(tag) for tag in cls._coerce_list(metadata.get("tags"), "tags", path)],
            estimate=None if metadata.get("estimate") is None else str(metadata["estimate"]),
            depends_on=[
                cls._coerce_int(dep, "depends_on", path)
                for dep in cls._coerce_list(metadata.get("depends_on"), "depends_on", path)
            ],
            pinned=bool(metadata.get("pinned", False)),
            pinned_at=None if pinned_at is None else cls._coerce_timestamp(pinned_at, "pinned_at", path),
            schema_version=cls._coerce_int(metadata.get("schema_version", SCHEMA_VERSION), "schema_version", path),
        )

    @staticmethod
    def _coerce_int(value: Any, name: str, path: Optional[Path]) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise TaskFileParseError(path, f"'{name}' must be a non-negative integer, got {value!r}")
        return value

    @staticmethod
    def _coerce_list(value: Any, name: str, path: Optional[Path]) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise TaskFileParseError(path, f"'{name}' must be a list")
        return value

    @staticmethod
    def _coerce_timestamp(value: Any, name: str, path: Optional[Path]) -> datetime:
        """Accept ISO strings as well as datetimes YAML decoded on its own.

        Naive values are taken as local time.
        """
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.strip())
            except ValueError as exc:
                raise TaskFileParseError(path, f"invalid timestamp in '{name}': {value!r}") from exc
        else:
            raise TaskFileParseError(path, f"invalid timestamp in '{name}': {value!r}")
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
        return parsed

    @staticmethod
    def _coerce_date(value: Any, path: Optional[Path]) -> Optional[date]:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value).strip())
        except ValueError as exc:
            raise TaskFileParseError(path, f"invalid due date: {value!r}") from exc


__all__ = ["TaskFileParser", "FRONT_MATTER_DELIMITER"]
