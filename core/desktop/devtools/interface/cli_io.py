import json
from datetime import datetime, timezone
from typing import Dict, Optional

from core.errors import TaskCtlError


def iso_timestamp() -> str:
    """UTC timestamp for structured CLI output."""
    return datetime.now(timezone.utc).isoformat()


def structured_response(
    command: str,
    *,
    status: str = "OK",
    message: str = "",
    payload: Optional[Dict] = None,
    summary: Optional[str] = None,
    exit_code: int = 0,
) -> int:
    """Unified JSON response printed to stdout; returns the exit code."""
    body: Dict[str, object] = {
        "command": command,
        "status": status,
        "message": message,
        "timestamp": iso_timestamp(),
        "payload": payload or {},
    }
    if summary:
        body["summary"] = summary
    print(json.dumps(body, ensure_ascii=False, indent=2))
    return exit_code


def structured_error(
    command: str,
    message: str,
    *,
    payload: Optional[Dict] = None,
    status: str = "ERROR",
    exit_code: int = 1,
) -> int:
    """Short-hand for structured error responses."""
    return structured_response(command, status=status, message=message, payload=payload, exit_code=exit_code)


def error_from_exception(command: str, exc: TaskCtlError) -> int:
    """Render a domain error; the exit code follows the error category."""
    payload: Dict[str, object] = {"error": type(exc).__name__}
    if exc.details:
        payload["details"] = exc.details
    return structured_error(command, exc.message, payload=payload, exit_code=exc.exit_code)


__all__ = ["iso_timestamp", "structured_response", "structured_error", "error_from_exception"]
