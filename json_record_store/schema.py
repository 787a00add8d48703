from __future__ import annotations
from typing import Any, Dict, Iterator, List, Mapping, Tuple

ID_FIELD = "id"

# Largest canonical array index; such keys iterate before all other keys.
_MAX_INDEX = 2 ** 32 - 2


def slot_key(internal: Any) -> str:
    """
    Name of the JSON object member that holds an internal key.
    Numbers, booleans and null are rendered the way JSON renders them, so a
    slot written before a save is the same slot after a reload.
    """
    if isinstance(internal, str):
        return internal
    if isinstance(internal, bool):
        return "true" if internal else "false"
    if internal is None:
        return "null"
    if isinstance(internal, float) and internal.is_integer():
        return str(int(internal))
    return str(internal)


def _index_of(key: str) -> int | None:
    if not (key.isascii() and key.isdigit()) or str(int(key)) != key:
        return None
    n = int(key)
    return n if n <= _MAX_INDEX else None


def ordered_keys(obj: Mapping[str, Any]) -> List[str]:
    """
    Object key iteration order: integer keys ascending, then the remaining
    keys in insertion order.
    """
    numeric: List[Tuple[int, str]] = []
    other: List[str] = []
    for key in obj:
        idx = _index_of(key)
        if idx is None:
            other.append(key)
        else:
            numeric.append((idx, key))
    numeric.sort()
    return [k for _, k in numeric] + other


def in_key_order(obj: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: obj[key] for key in ordered_keys(obj)}


def js_truthy(value: Any) -> bool:
    """
    Truthiness as JSON values have it in JavaScript: empty lists and objects
    count as true, NaN as false.
    """
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value == value and value != 0
    if isinstance(value, str):
        return value != ""
    return True


class SchemaMap:
    """
    Field name -> internal key mapping persisted under "metadata".

    The mapping only renames keys. No value is validated or coerced.
    """
    def __init__(self, fields: Mapping[str, Any], id_field: str = ID_FIELD) -> None:
        self._fields: Dict[str, Any] = dict(fields)
        self.id_field = id_field

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        for name in ordered_keys(self._fields):
            yield name, self._fields[name]

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SchemaMap):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._fields)

    def slot(self, name: str) -> str:
        return slot_key(self._fields[name])

    def build_entry(self, fields: Mapping[str, Any], next_id: int) -> Dict[str, Any]:
        """
        Build the raw record for create().

        A truthy caller-supplied id is looked up again under the internal
        slot name, not under the field name. Fields the caller left out are
        omitted from the record.
        """
        entry: Dict[str, Any] = {}
        for name, internal in self:
            slot = slot_key(internal)
            if name == self.id_field:
                if js_truthy(fields.get(name)):
                    if slot in fields:
                        entry[slot] = fields[slot]
                else:
                    entry[slot] = next_id
            elif name in fields:
                entry[slot] = fields[name]
        return in_key_order(entry)

    def project_for_write(self, partial: Mapping[str, Any]) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for name, internal in self:
            if name == self.id_field or name not in partial:
                continue
            out[slot_key(internal)] = partial[name]
        return out

    def project_for_read(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        return {name: raw.get(slot_key(internal)) for name, internal in self}
