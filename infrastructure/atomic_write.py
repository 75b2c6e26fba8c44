from __future__ import annotations

import os
import tempfile
from pathlib import Path

from core.errors import PersistenceError


def atomic_write_text(target: Path, content: str) -> None:
    """Replace `target` with `content` via a synced temp file in the same directory.

    Readers see either the old file or the new one, never a partial write.
    """
    target = Path(target)
    tmp_path: Path | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            delete=False,
            dir=str(target.parent),
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(str(tmp_path), str(target))
    except OSError as exc:
        raise PersistenceError(f"Unable to write {target}: {exc}", target) from exc
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


__all__ = ["atomic_write_text"]
