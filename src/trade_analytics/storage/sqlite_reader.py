from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from trade_analytics.ingest.journal import IngestResult, normalize_records

JOURNALS_TABLE = "journals"


def connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def load_trades(
    conn: sqlite3.Connection,
    *,
    user_id: str | None = None,
    account_id: str | None = None,
) -> IngestResult:
    """Read journal rows and normalize them like a file export."""
    columns = _table_columns(conn, JOURNALS_TABLE)
    if not columns:
        return IngestResult(trades=[], skipped=0)
    query = f"SELECT * FROM {JOURNALS_TABLE}"
    clauses = []
    params: list[Any] = []
    if user_id is not None and "user_id" in columns:
        clauses.append("user_id = ?")
        params.append(user_id)
    if account_id is not None and "account_id" in columns:
        clauses.append("account_id = ?")
        params.append(account_id)
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    rows = conn.execute(query, params).fetchall()
    trades, skipped = normalize_records(_row_to_mapping(row) for row in rows)
    return IngestResult(trades=trades, skipped=skipped)


def _table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return {row["name"] for row in rows}


def _row_to_mapping(row: sqlite3.Row) -> dict[str, Any]:
    data = {key: row[key] for key in row.keys()}
    setup = data.get("setup")
    if isinstance(setup, str) and setup.startswith("["):
        data["setup"] = _maybe_json(setup)
    return data


def _maybe_json(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value
