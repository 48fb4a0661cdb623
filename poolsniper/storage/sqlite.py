"""Connection handling shared by the SQLite stores."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class SqliteStore:
    """Opens a short-lived connection per operation and ensures the schema."""

    schema: str = ""

    def __init__(self, database_path: str | Path) -> None:
        self._database_path = str(database_path)
        Path(self._database_path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as con:
            con.executescript(self.schema)
            con.commit()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        con = sqlite3.connect(self._database_path)
        con.row_factory = sqlite3.Row
        try:
            yield con
        finally:
            con.close()
