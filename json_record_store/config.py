"""
Settings for json_record_store.

Values come from JSON_RECORD_STORE_* environment variables; arguments passed
to RecordStore explicitly take precedence.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class StoreSettings:
    indent: int = 2
    encoding: str = "utf-8"
    id_field: str = "id"
    hardened: bool = False
    lock_timeout: float = 10.0


def _int(value: str | None, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _float(value: str | None, default: float) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache
def get_settings() -> StoreSettings:
    """Read the current environment and build a StoreSettings instance."""
    return StoreSettings(
        indent=_int(os.getenv("JSON_RECORD_STORE_INDENT"), 2),
        encoding=os.getenv("JSON_RECORD_STORE_ENCODING") or "utf-8",
        id_field=os.getenv("JSON_RECORD_STORE_ID_FIELD") or "id",
        hardened=_bool(os.getenv("JSON_RECORD_STORE_HARDENED"), False),
        lock_timeout=_float(os.getenv("JSON_RECORD_STORE_LOCK_TIMEOUT"), 10.0),
    )
