"""Append-only record of every token name/creator the risk engine has seen."""
from __future__ import annotations

from ..models import TokenSeenRecord
from .sqlite import SqliteStore


class SeenTokenStore(SqliteStore):
    schema = """
    CREATE TABLE IF NOT EXISTS seen_tokens (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        mint TEXT NOT NULL,
        name TEXT NOT NULL,
        creator TEXT NOT NULL,
        first_seen INTEGER NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_seen_tokens_name ON seen_tokens(name);
    CREATE INDEX IF NOT EXISTS idx_seen_tokens_creator ON seen_tokens(creator);
    CREATE INDEX IF NOT EXISTS idx_seen_tokens_mint ON seen_tokens(mint);
    """

    def append(self, record: TokenSeenRecord) -> None:
        with self._connect() as con:
            con.execute(
                "INSERT INTO seen_tokens (mint, name, creator, first_seen) VALUES (?, ?, ?, ?)",
                (record.mint, record.name, record.creator, record.first_seen),
            )
            con.commit()

    def find_by_name_or_creator(self, name: str, creator: str) -> list[TokenSeenRecord]:
        with self._connect() as con:
            rows = con.execute(
                "SELECT mint, name, creator, first_seen FROM seen_tokens "
                "WHERE name = ? OR creator = ? ORDER BY id ASC",
                (name, creator),
            ).fetchall()
        return [
            TokenSeenRecord(
                mint=row["mint"],
                name=row["name"],
                creator=row["creator"],
                first_seen=row["first_seen"],
            )
            for row in rows
        ]

    def find_by_mint(self, mint: str) -> TokenSeenRecord | None:
        with self._connect() as con:
            row = con.execute(
                "SELECT mint, name, creator, first_seen FROM seen_tokens "
                "WHERE mint = ? ORDER BY id ASC LIMIT 1",
                (mint,),
            ).fetchone()
        if row is None:
            return None
        return TokenSeenRecord(
            mint=row["mint"], name=row["name"], creator=row["creator"], first_seen=row["first_seen"]
        )
