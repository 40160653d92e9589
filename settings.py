from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    # Backing file
    source_path: Path
    id_key: str

    # Server
    host: str
    port: int

    # Debug
    debug_log_requests: bool
    log_level: str

    # Persistence (tests and dry runs can turn writes off)
    persist_to_disk: bool

    def with_overrides(self, **changes) -> "Settings":
        # None means "not given on the command line"
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def get_settings() -> Settings:
    source_path = Path(os.getenv("JSML_SOURCE", "db.json"))
    id_key = os.getenv("JSML_ID_KEY", "id").strip() or "id"

    host = os.getenv("JSML_HOST", "127.0.0.1")
    port = _env_int("JSML_PORT", 4242)

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", True)
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    persist_to_disk = _env_bool("PERSIST_TO_DISK", True)

    return Settings(
        source_path=source_path,
        id_key=id_key,
        host=host,
        port=port,
        debug_log_requests=debug_log_requests,
        log_level=log_level,
        persist_to_disk=persist_to_disk,
    )
