from __future__ import annotations
from typing import Any


class RecordStoreError(Exception):
    pass


class NotFoundError(RecordStoreError):
    """
    Raised by find_one/update/delete when no record is stored under the id.
    """
    def __init__(self, record_id: Any) -> None:
        super().__init__(f"record not found: {record_id}")
        self.record_id = record_id


class LockTimeoutError(RecordStoreError):
    def __init__(self, path: str, timeout: float) -> None:
        super().__init__(f"could not lock {path} within {timeout}s")
        self.path = path
        self.timeout = timeout
