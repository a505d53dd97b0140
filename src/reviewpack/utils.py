from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def json_dumps(obj: Any) -> str:
    return json.dumps(obj, indent=2, sort_keys=True)

def safe_read_text(path: Path, max_bytes: int = 5_000_000) -> str:
    data = path.read_bytes()
    if len(data) > max_bytes:
        raise ValueError(f"File too large: {path} ({len(data)} bytes)")
    return data.decode("utf-8", errors="replace")

def write_text_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
