import json

import pytest
from json_record_store import NotFoundError, RecordStore

def make_schema():
    return {
        "id":    0,
        "name":  1,
        "email": 2,
        "age":   3,
    }

@pytest.fixture()
def db(tmp_path):
    return RecordStore(str(tmp_path / "users.json"), make_schema())

def test_ids_follow_creation_order(db):
    for i in range(5):
        rec = db.create({"name": f"U{i}", "email": f"u{i}@x.com", "age": str(i)})
        assert rec["0"] == i
    assert db.load()["idNum"] == 5
    assert [r["id"] for r in db.find_many()] == [0, 1, 2, 3, 4]

def test_ids_not_reused_after_delete(db):
    a = db.create({"name": "A", "email": "a@x.com", "age": "1"})
    b = db.create({"name": "B", "email": "b@x.com", "age": "2"})
    assert (a["0"], b["0"]) == (0, 1)

    db.delete("0")
    c = db.create({"name": "C", "email": "c@x.com", "age": "3"})
    assert c["0"] == 2

    rows = db.find_many()
    assert [r["name"] for r in rows] == ["B", "C"]
    assert rows == [
        {"id": 1, "name": "B", "email": "b@x.com", "age": "2"},
        {"id": 2, "name": "C", "email": "c@x.com", "age": "3"},
    ]

def test_create_returns_internal_keys(db):
    # create() hands back the stored raw record, unlike find_one()
    rec = db.create({"name": "A", "email": "a@x.com", "age": "1"})
    assert rec == {"0": 0, "1": "A", "2": "a@x.com", "3": "1"}
    assert db.find_one("0") == {"id": 0, "name": "A", "email": "a@x.com", "age": "1"}
    assert db.load()["data"] == {"0": rec}

def test_create_omits_missing_fields(db):
    rec = db.create({"name": "OnlyName"})
    assert rec == {"0": 0, "1": "OnlyName"}
    assert db.find_one("0") == {"id": 0, "name": "OnlyName", "email": None, "age": None}

def test_create_supplied_id_looked_up_by_internal_key(db):
    # A truthy "id" is re-read under the internal slot "0"
    rec = db.create({"id": 7, "name": "X"})
    assert rec == {"1": "X"}
    assert db.find_one("0") == {"id": None, "name": "X", "email": None, "age": None}

    rec2 = db.create({"id": 7, "0": 99, "name": "Y"})
    assert rec2 == {"0": 99, "1": "Y"}
    # Still stored under the counter, not under the supplied id
    assert db.find_one("1")["id"] == 99
    with pytest.raises(NotFoundError):
        db.find_one("99")

def test_create_falsy_id_uses_counter(db):
    db.create({"name": "A"})
    rec = db.create({"id": 0, "name": "B"})
    assert rec["0"] == 1

def test_duplicate_values_allowed(db):
    db.create({"name": "John", "email": "email1@gmail.com", "age": "30"})
    db.create({"name": "Bob", "email": "email1@gmail.com", "age": "35"})
    assert [r["email"] for r in db.find_many()] == ["email1@gmail.com", "email1@gmail.com"]

def test_find_one(db):
    db.create({"name": "A", "email": "a@x.com", "age": "1"})
    assert db.find_one("0")["name"] == "A"
    assert db.find_one(0)["name"] == "A"
    with pytest.raises(NotFoundError) as exc:
        db.find_one("5")
    assert exc.value.record_id == "5"
    assert "record not found" in str(exc.value)

def test_update_changes_only_given_fields(db):
    db.create({"name": "Jane", "email": "jane@x.com", "age": "25"})
    merged = db.update("0", {"name": "John Smith", "email": "test@gmail.com"})

    assert merged == {"0": 0, "1": "John Smith", "2": "test@gmail.com", "3": "25"}
    assert db.find_one("0") == {"id": 0, "name": "John Smith", "email": "test@gmail.com", "age": "25"}

def test_update_ignores_id_and_unknown_fields(db):
    db.create({"name": "A", "email": "a@x.com", "age": "1"})
    merged = db.update("0", {"id": 42, "nickname": "ace", "age": "2"})
    assert merged == {"0": 0, "1": "A", "2": "a@x.com", "3": "2"}
    assert db.find_one("0")["id"] == 0

def test_update_writes_none_as_null(db):
    db.create({"name": "A", "email": "a@x.com", "age": "1"})
    db.update("0", {"age": None})
    raw = db.load()["data"]["0"]
    assert "3" in raw and raw["3"] is None

def test_update_fills_field_missing_at_create(db):
    db.create({"name": "A"})
    db.update("0", {"email": "late@x.com"})
    assert db.find_one("0")["email"] == "late@x.com"

def test_update_missing_leaves_file_unchanged(db, tmp_path):
    db.create({"name": "A"})
    before = (tmp_path / "users.json").read_bytes()
    with pytest.raises(NotFoundError):
        db.update("3", {"name": "B"})
    assert (tmp_path / "users.json").read_bytes() == before

def test_delete(db, tmp_path):
    db.create({"name": "A"})
    db.create({"name": "B"})
    assert db.delete("0") is None

    with pytest.raises(NotFoundError):
        db.find_one("0")
    assert [r["name"] for r in db.find_many()] == ["B"]

    before = (tmp_path / "users.json").read_bytes()
    with pytest.raises(NotFoundError):
        db.delete("0")
    assert (tmp_path / "users.json").read_bytes() == before

def test_string_internal_keys(tmp_path):
    db_path = tmp_path / "notes.json"
    db = RecordStore(str(db_path), {"id": "i", "title": "t"})
    rec = db.create({"title": "hello"})
    assert rec == {"i": 0, "t": "hello"}

    doc = json.loads(db_path.read_text(encoding="utf-8"))
    assert doc["data"] == {"0": {"i": 0, "t": "hello"}}
    assert db.find_one("0") == {"id": 0, "title": "hello"}

def test_custom_id_field(tmp_path):
    db = RecordStore(str(tmp_path / "keyed.json"), {"key": 0, "value": 1}, id_field="key")
    db.create({"value": "v"})
    assert db.find_one("0") == {"key": 0, "value": "v"}
    db.update("0", {"key": 9, "value": "w"})
    assert db.find_one("0") == {"key": 0, "value": "w"}

@pytest.mark.parametrize("supplied", [[], {}, "x", 1, True])
def test_create_truthy_ids_like_json_values(db, supplied):
    # Empty lists and objects are truthy ids: slot "0" is then looked up and missing
    rec = db.create({"id": supplied, "name": "X"})
    assert rec == {"1": "X"}

@pytest.mark.parametrize("supplied", [None, 0, 0.0, float("nan"), "", False])
def test_create_falsy_ids_like_json_values(db, supplied):
    rec = db.create({"id": supplied, "name": "X"})
    assert rec == {"0": 0, "1": "X"}

def test_raw_record_slots_in_integer_order(tmp_path):
    db_path = tmp_path / "users.json"
    db = RecordStore(str(db_path), {"id": 3, "name": 1, "tag": "t", "email": 2})
    rec = db.create({"name": "A", "tag": "x"})
    assert list(rec) == ["1", "3", "t"]

    merged = db.update("0", {"email": "a@x.com"})
    assert list(merged) == ["1", "2", "3", "t"]
    stored = json.loads(db_path.read_text(encoding="utf-8"))["data"]["0"]
    assert list(stored) == ["1", "2", "3", "t"]
