from __future__ import annotations
import logging
from contextlib import contextmanager, nullcontext
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .config import StoreSettings, get_settings
from .errors import NotFoundError
from .schema import SchemaMap, in_key_order, ordered_keys
from .storage import FileStorage

logger = logging.getLogger(__name__)

# Top-level members of the store file.
NEXT_ID_KEY = "idNum"
SCHEMA_KEY = "metadata"
RECORDS_KEY = "data"


class RecordStore:
    """
    CRUD over a single JSON file holding {"idNum", "metadata", "data"}.

    Nothing is cached between calls: every operation reads the whole file,
    changes the parsed document and writes all of it back. Field names are
    translated through the schema stored in the file, not the one passed to
    the constructor.

    create() and update() return the stored raw record (internal keys);
    find_many() and find_one() return records keyed by field name.
    """
    def __init__(
        self,
        path: str,
        schema: Mapping[str, Any],
        *,
        settings: Optional[StoreSettings] = None,
        hardened: Optional[bool] = None,
        id_field: Optional[str] = None,
    ) -> None:
        s = settings or get_settings()
        self.hardened = s.hardened if hardened is None else bool(hardened)
        self.id_field = id_field or s.id_field
        self._schema = SchemaMap(schema, self.id_field)
        self._schema_checked = False
        self._fs = FileStorage(
            path,
            encoding=s.encoding,
            indent=s.indent,
            atomic=self.hardened,
            lock_timeout=s.lock_timeout,
        )
        if self.id_field not in self._schema:
            logger.warning("schema for %s has no %r field", self._fs.path, self.id_field)
        self._open()

    def _open(self) -> None:
        """
        Create the store file when missing. An existing file is left as is.
        """
        with self._guard():
            self._fs.initialize({
                NEXT_ID_KEY: 0,
                SCHEMA_KEY: self._schema.to_dict(),
                RECORDS_KEY: {},
            })

    @property
    def path(self) -> str:
        return self._fs.path

    @property
    def schema(self) -> SchemaMap:
        return self._schema

    def __repr__(self) -> str:
        return f"RecordStore({self.path!r}, hardened={self.hardened})"

    @contextmanager
    def _guard(self) -> Iterator[None]:
        cm = self._fs.exclusive() if self.hardened else nullcontext()
        with cm:
            yield

    def _load(self) -> Dict[str, Any]:
        state = self._fs.read()
        if not self._schema_checked:
            self._schema_checked = True
            if self._schema != state[SCHEMA_KEY]:
                logger.warning("on-disk schema of %s differs from the schema passed in; using on-disk schema", self.path)
        return state

    def _stored_schema(self, state: Dict[str, Any]) -> SchemaMap:
        return SchemaMap(state[SCHEMA_KEY], self.id_field)

    @staticmethod
    def _lookup(state: Dict[str, Any], record_id: Any) -> tuple[str, Dict[str, Any]]:
        key = str(record_id)
        raw = state[RECORDS_KEY].get(key)
        if raw is None:
            raise NotFoundError(key)
        return key, raw

    def load(self) -> Dict[str, Any]:
        """Return the whole store document as currently on disk."""
        with self._guard():
            return self._load()

    def create(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        with self._guard():
            state = self._load()
            next_id = state[NEXT_ID_KEY]
            entry = self._stored_schema(state).build_entry(fields, next_id)
            state[RECORDS_KEY][str(next_id)] = entry
            state[NEXT_ID_KEY] = next_id + 1
            self._fs.write(state)
        logger.debug("created record %s in %s (%d fields)", next_id, self.path, len(entry))
        return entry

    def find_many(self) -> List[Dict[str, Any]]:
        with self._guard():
            state = self._load()
        schema = self._stored_schema(state)
        records = state[RECORDS_KEY]
        return [schema.project_for_read(records[key]) for key in ordered_keys(records)]

    def find_one(self, record_id: Any) -> Dict[str, Any]:
        with self._guard():
            state = self._load()
        _, raw = self._lookup(state, record_id)
        return self._stored_schema(state).project_for_read(raw)

    def update(self, record_id: Any, partial: Mapping[str, Any]) -> Dict[str, Any]:
        with self._guard():
            state = self._load()
            key, raw = self._lookup(state, record_id)
            patch = self._stored_schema(state).project_for_write(partial)
            merged = dict(raw)
            merged.update(patch)
            merged = in_key_order(merged)
            state[RECORDS_KEY][key] = merged
            self._fs.write(state)
        logger.debug("updated record %s in %s (%d fields)", key, self.path, len(patch))
        return merged

    def delete(self, record_id: Any) -> None:
        with self._guard():
            state = self._load()
            key, _ = self._lookup(state, record_id)
            del state[RECORDS_KEY][key]
            self._fs.write(state)
        logger.debug("deleted record %s from %s", key, self.path)
