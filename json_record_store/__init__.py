from .aio import AsyncRecordStore
from .config import StoreSettings, get_settings
from .database import RecordStore
from .errors import LockTimeoutError, NotFoundError, RecordStoreError
from .schema import ID_FIELD, SchemaMap
from .storage import FileStorage

__all__ = [
    "AsyncRecordStore",
    "FileStorage",
    "ID_FIELD",
    "LockTimeoutError",
    "NotFoundError",
    "RecordStore",
    "RecordStoreError",
    "SchemaMap",
    "StoreSettings",
    "get_settings",
]
