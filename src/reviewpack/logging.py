from __future__ import annotations

import json
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}
SENSITIVE_KEY_PARTS = ("token_value", "secret", "password", "api_key", "apikey")


def _escape_annotation(text: str) -> str:
    # Workflow command data must not contain raw %, CR or LF.
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class PackLogger:
    """
    JSON-lines logger for the resolve/compose/score commands.

    Every record goes to stderr so stdout stays free for plans, artifacts
    and reports. Records below ``level`` are discarded. Fields passed to
    ``bind`` are repeated on every record of the child logger. Under GitHub
    Actions, warnings and errors are also written as workflow annotations.
    """

    def __init__(
        self,
        run_id: str,
        annotations: Optional[bool] = None,
        level: str = "info",
        context: Optional[Dict[str, Any]] = None,
    ):
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self.run_id = run_id
        if annotations is None:
            annotations = os.environ.get("GITHUB_ACTIONS", "").lower() == "true"
        self.annotations = annotations
        self.level = level
        self.context: Dict[str, Any] = dict(context or {})

    def bind(self, **fields: Any) -> "PackLogger":
        return PackLogger(
            self.run_id,
            annotations=self.annotations,
            level=self.level,
            context={**self.context, **fields},
        )

    def enabled_for(self, level: str) -> bool:
        return LEVELS[level] >= LEVELS[self.level]

    def debug(self, message: str, **kwargs: Any) -> None:
        self._emit("debug", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("error", message, **kwargs)

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Log start, end and duration of a command stage; errors propagate."""
        start = datetime.now(timezone.utc)
        self.debug("stage_start", stage=name)
        status = "ok"
        try:
            yield
        except Exception as exc:
            status = "error"
            self.error("stage_error", stage=name, error=str(exc), error_type=type(exc).__name__)
            raise
        finally:
            duration_ms = int((datetime.now(timezone.utc) - start).total_seconds() * 1000)
            self.info("stage_end", stage=name, duration_ms=duration_ms, status=status)

    def _emit(self, level: str, message: str, **kwargs: Any) -> None:
        if not self.enabled_for(level):
            return
        record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "run_id": self.run_id,
            "message": message,
        }
        record.update(self._sanitize({**self.context, **kwargs}))
        sys.stderr.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")

        if self.annotations and level in ("warning", "error"):
            detail = kwargs.get("detail")
            text = f"{message}: {detail}" if detail else message
            sys.stderr.write(f"::{level}::{_escape_annotation(text)}\n")
        sys.stderr.flush()

    @staticmethod
    def _sanitize(fields: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: "***" if any(part in key.lower() for part in SENSITIVE_KEY_PARTS) else value
            for key, value in fields.items()
        }
