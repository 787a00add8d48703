#!/usr/bin/env python3
# Example usage of json_record_store
# Every call rereads and rewrites the whole file; nothing is cached.

import os
from json_record_store import NotFoundError, RecordStore

# Field name -> internal key stored inside each record
SCHEMA = {
    "id": 0,
    "title": 1,
    "done": 2,
}

def main() -> None:
    base_dir = os.path.join(os.path.dirname(__file__), "data")
    os.makedirs(base_dir, exist_ok=True)
    path = os.path.join(base_dir, "todos.json")

    # Creates the file on first run, reuses it afterwards
    db = RecordStore(path, SCHEMA)

    rec = db.create({"title": "write docs", "done": False})
    print("Stored raw record:", rec)
    rid = rec["0"]

    print("Loaded:", db.find_one(str(rid)))

    db.update(str(rid), {"done": True})
    for r in db.find_many():
        print("Todo:", r["id"], r["title"], "done" if r["done"] else "open")

    db.delete(str(rid))
    try:
        db.find_one(str(rid))
    except NotFoundError as e:
        print("Gone:", e)

if __name__ == "__main__":
    main()
