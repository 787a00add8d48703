"""
Demo: seed a users store and walk through create/find/update/delete.

    python -m json_record_store [PATH]
"""
from __future__ import annotations
import argparse
import os
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .database import RecordStore

USER_SCHEMA = {
    "id": 0,
    "name": 1,
    "email": 2,
    "age": 3,
}

SAMPLE_USERS = [
    {"name": "John Doe", "email": "email1@gmail.com", "age": "30"},
    {"name": "Jane Smith", "email": "email2@gmail.com", "age": "25"},
    {"name": "Alice Johnson", "email": "email3@gmail.com", "age": "28"},
    {"name": "Bob Brown", "email": "email1@gmail.com", "age": "35"},
]


def users_table(title: str, rows: List[Dict[str, Any]]) -> Table:
    table = Table(title=title)
    for name in USER_SCHEMA:
        table.add_column(name)
    for row in rows:
        table.add_row(*("" if row.get(name) is None else str(row.get(name)) for name in USER_SCHEMA))
    return table


def run_demo(path: str, console: Optional[Console] = None) -> RecordStore:
    console = console or Console()
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

    db = RecordStore(path, USER_SCHEMA)
    for user in SAMPLE_USERS:
        db.create(user)

    console.print(users_table("All Users", db.find_many()))
    console.print("User with ID 1:", db.find_one("1"))

    updated = db.update("1", {"name": "John Smith", "email": "test@gmail.com"})
    console.print("Updated user:", updated)
    console.print(users_table("All Users", db.find_many()))

    db.delete("2")
    console.print("Deleted user with ID 2")
    console.print(users_table("All Users", db.find_many()))
    return db


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="json_record_store", description="Seed a users store and walk through create/find/update/delete.")
    parser.add_argument("path", nargs="?", default=os.path.join("data", "data.json"),
                        help="store file to create or extend (default: data/data.json)")
    args = parser.parse_args(argv)
    run_demo(args.path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
