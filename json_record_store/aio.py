from __future__ import annotations
from typing import Any, Dict, List, Mapping

from .database import RecordStore


class AsyncRecordStore:
    """
    Awaitable facade over RecordStore. Each coroutine runs the blocking
    operation inline and never suspends, so calls do not interleave.
    """
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @classmethod
    def open(cls, path: str, schema: Mapping[str, Any], **kwargs: Any) -> "AsyncRecordStore":
        return cls(RecordStore(path, schema, **kwargs))

    async def create(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        return self.store.create(fields)

    async def find_many(self) -> List[Dict[str, Any]]:
        return self.store.find_many()

    async def find_one(self, record_id: Any) -> Dict[str, Any]:
        return self.store.find_one(record_id)

    async def update(self, record_id: Any, partial: Mapping[str, Any]) -> Dict[str, Any]:
        return self.store.update(record_id, partial)

    async def delete(self, record_id: Any) -> None:
        self.store.delete(record_id)
