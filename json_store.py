from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    """
    Read and parse JSON from disk.

    Unlike a cache file, the backing file is required: missing files and
    invalid JSON propagate as OSError / json.JSONDecodeError.
    """
    raw = path.read_text(encoding="utf-8")
    return json.loads(raw)


def dump_json(payload: Any, *, indent: int = 2, sort_keys: bool = True) -> str:
    """
    Deterministic encoding: same payload, same text.
    """
    return json.dumps(payload, indent=indent, sort_keys=sort_keys, ensure_ascii=False) + "\n"


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2, sort_keys: bool = True) -> None:
    """
    Atomically write JSON to disk by writing to a temp file then replacing.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    text = dump_json(payload, indent=indent, sort_keys=sort_keys)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(text)
    tmp_path.replace(path)
