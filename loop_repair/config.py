from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from loop_repair.repair import RepairSettings


def _dotenv_path() -> str | None:
    explicit = (os.getenv("LOOP_REPAIR_ENV_FILE") or "").strip()
    if explicit:
        return explicit
    local = Path(__file__).resolve().parents[1] / ".env"
    if local.is_file():
        return str(local)
    return find_dotenv(usecwd=True) or None


def load_env() -> bool:
    """Load `LOOP_REPAIR_*` defaults from a .env file. Set variables win."""
    path = _dotenv_path()
    if path is None:
        return False
    return load_dotenv(path)


@dataclass(frozen=True)
class LoopRepairSettings:
    max_workers: int = 1
    chunk_size: int = 64
    log_level: str = "WARNING"

    def repair_settings(self) -> RepairSettings:
        return RepairSettings(max_workers=self.max_workers, chunk_size=self.chunk_size)


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def load_settings() -> LoopRepairSettings:
    load_env()
    return LoopRepairSettings(
        max_workers=_env_int("LOOP_REPAIR_MAX_WORKERS", 1),
        chunk_size=_env_int("LOOP_REPAIR_CHUNK_SIZE", 64),
        log_level=(os.getenv("LOOP_REPAIR_LOG_LEVEL") or "WARNING").strip().upper(),
    )
