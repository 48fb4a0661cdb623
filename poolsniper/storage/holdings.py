"""Holdings table — one row per open position, keyed by mint."""
from __future__ import annotations

import sqlite3

from ..models import Holding
from .sqlite import SqliteStore

_COLUMNS = (
    "mint, name, entry_time, units, sol_spent, sol_fee_spent, "
    "sol_spent_usd, sol_fee_usd, per_unit_usd, slot, program"
)


def _row_to_holding(row: sqlite3.Row) -> Holding:
    return Holding(
        mint=row["mint"],
        name=row["name"],
        entry_time=row["entry_time"],
        units=row["units"],
        sol_spent=row["sol_spent"],
        sol_fee_spent=row["sol_fee_spent"],
        sol_spent_usd=row["sol_spent_usd"],
        sol_fee_usd=row["sol_fee_usd"],
        per_unit_usd=row["per_unit_usd"],
        slot=row["slot"],
        program=row["program"],
    )


class HoldingsStore(SqliteStore):
    schema = """
    CREATE TABLE IF NOT EXISTS holdings (
        mint TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        entry_time INTEGER NOT NULL,
        units REAL NOT NULL,
        sol_spent REAL NOT NULL,
        sol_fee_spent REAL NOT NULL,
        sol_spent_usd REAL NOT NULL,
        sol_fee_usd REAL NOT NULL,
        per_unit_usd REAL NOT NULL,
        slot INTEGER NOT NULL,
        program TEXT NOT NULL
    );
    """

    def upsert(self, holding: Holding) -> None:
        with self._connect() as con:
            con.execute(
                f"""
                INSERT INTO holdings ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(mint) DO UPDATE SET
                    name = excluded.name,
                    entry_time = excluded.entry_time,
                    units = excluded.units,
                    sol_spent = excluded.sol_spent,
                    sol_fee_spent = excluded.sol_fee_spent,
                    sol_spent_usd = excluded.sol_spent_usd,
                    sol_fee_usd = excluded.sol_fee_usd,
                    per_unit_usd = excluded.per_unit_usd,
                    slot = excluded.slot,
                    program = excluded.program
                """,
                (
                    holding.mint,
                    holding.name,
                    holding.entry_time,
                    holding.units,
                    holding.sol_spent,
                    holding.sol_fee_spent,
                    holding.sol_spent_usd,
                    holding.sol_fee_usd,
                    holding.per_unit_usd,
                    holding.slot,
                    holding.program,
                ),
            )
            con.commit()

    def delete(self, mint: str) -> bool:
        """Delete the row for ``mint``; True when a row was removed."""
        with self._connect() as con:
            cur = con.execute("DELETE FROM holdings WHERE mint = ?", (mint,))
            con.commit()
            return cur.rowcount > 0

    def get(self, mint: str) -> Holding | None:
        with self._connect() as con:
            row = con.execute(
                f"SELECT {_COLUMNS} FROM holdings WHERE mint = ?", (mint,)
            ).fetchone()
        return _row_to_holding(row) if row is not None else None

    def select_all(self) -> list[Holding]:
        with self._connect() as con:
            rows = con.execute(
                f"SELECT {_COLUMNS} FROM holdings ORDER BY entry_time ASC"
            ).fetchall()
        return [_row_to_holding(row) for row in rows]
