from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from canonical_attributes.errors import CanonicalAttributesError, RecordNotFound
from canonical_attributes.utils.json_safe import to_jsonable

log = logging.getLogger("canonical_attributes.storage")

PRIMARY_KEY = "id"


def _json_dumps(obj: Any) -> Optional[str]:
    """Deterministic JSON encoding for one column value (SQL NULL for None)."""

    if obj is None:
        return None
    return json.dumps(to_jsonable(obj), sort_keys=True, separators=(",", ":"))


def _json_loads(text: Optional[str]) -> Any:
    if text is None:
        return None
    return json.loads(text)


def _ident(name: str) -> str:
    """Quote a table or column name. Only plain identifiers are accepted."""

    if not isinstance(name, str) or not name.isidentifier():
        raise CanonicalAttributesError(f"invalid SQL identifier: {name!r}")
    return f'"{name}"'


@dataclass(slots=True)
class SQLiteRecordStore:
    """SQLite persistence for model records.

    Every field is stored as a JSON text column so values keep their JSON
    type on the way back; None is stored as SQL NULL.

    Notes:
    - Table and column names are restricted to identifiers; values are
      always bound parameters.
    - A connection is opened per operation.
    """

    db_path: Path

    def __post_init__(self) -> None:
        self.db_path = Path(self.db_path)

    def connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def init_schema(self, table: str, fields: Sequence[str]) -> None:
        """Create the table if missing and add any missing field columns."""

        with self.connect() as con:
            con.execute(
                f"CREATE TABLE IF NOT EXISTS {_ident(table)} ({_ident(PRIMARY_KEY)} INTEGER PRIMARY KEY AUTOINCREMENT)"
            )
            existing = {row[1] for row in con.execute(f"PRAGMA table_info({_ident(table)})").fetchall()}
            for f in fields:
                if f not in existing:
                    con.execute(f"ALTER TABLE {_ident(table)} ADD COLUMN {_ident(f)} TEXT")
            con.commit()

    def insert(self, table: str, values: Mapping[str, Any]) -> int:
        """Insert one row and return its id."""

        cols = list(values)
        with self.connect() as con:
            if cols:
                cur = con.execute(
                    f"INSERT INTO {_ident(table)}({', '.join(_ident(c) for c in cols)}) "
                    f"VALUES({', '.join('?' for _ in cols)})",
                    tuple(_json_dumps(values[c]) for c in cols),
                )
            else:
                cur = con.execute(f"INSERT INTO {_ident(table)} DEFAULT VALUES")
            con.commit()
            record_id = int(cur.lastrowid)

        log.debug("inserted %s id=%s", table, record_id)
        return record_id

    def update(self, table: str, record_id: int, values: Mapping[str, Any]) -> bool:
        """Update columns of one row. Returns False when no row matched."""

        cols = list(values)
        if not cols:
            return self.exists(table, record_id)

        assignments = ", ".join(f"{_ident(c)} = ?" for c in cols)
        params = tuple(_json_dumps(values[c]) for c in cols) + (int(record_id),)
        with self.connect() as con:
            cur = con.execute(
                f"UPDATE {_ident(table)} SET {assignments} WHERE {_ident(PRIMARY_KEY)} = ?",
                params,
            )
            con.commit()
            return cur.rowcount == 1

    def update_attribute(self, table: str, record_id: int, name: str, value: Any) -> bool:
        """Persist a single attribute of one row."""

        return self.update(table, record_id, {name: value})

    def exists(self, table: str, record_id: int) -> bool:
        with self.connect() as con:
            row = con.execute(
                f"SELECT 1 FROM {_ident(table)} WHERE {_ident(PRIMARY_KEY)} = ?",
                (int(record_id),),
            ).fetchone()
        return row is not None

    def find(self, table: str, record_id: int, *, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Load one row as a dict (id included). Raises RecordNotFound."""

        rows = self._select(table, {PRIMARY_KEY: int(record_id)}, fields=fields, limit=1)
        if not rows:
            raise RecordNotFound(f"{table} id not found: {record_id}")
        return rows[0]

    def where(
        self,
        table: str,
        criteria: Mapping[str, Any],
        *,
        fields: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Rows whose columns equal the given values (None matches NULL), ordered by id."""

        return self._select(table, criteria, fields=fields, limit=limit)

    def _select(
        self,
        table: str,
        criteria: Mapping[str, Any],
        *,
        fields: Optional[Iterable[str]],
        limit: Optional[int],
    ) -> List[Dict[str, Any]]:
        where: List[str] = []
        params: List[Any] = []
        for col, value in criteria.items():
            if col == PRIMARY_KEY:
                where.append(f"{_ident(col)} = ?")
                params.append(int(value))
            elif value is None:
                where.append(f"{_ident(col)} IS NULL")
            else:
                where.append(f"{_ident(col)} = ?")
                params.append(_json_dumps(value))

        where_sql = ("WHERE " + " AND ".join(where)) if where else ""
        select_sql = "*"
        if fields is not None:
            wanted = [PRIMARY_KEY] + [f for f in fields if f != PRIMARY_KEY]
            select_sql = ", ".join(_ident(f) for f in wanted)

        query = f"SELECT {select_sql} FROM {_ident(table)} {where_sql} ORDER BY {_ident(PRIMARY_KEY)}"
        if limit is not None:
            query += " LIMIT ?"
            params.append(max(1, int(limit)))

        with self.connect() as con:
            cur = con.execute(query, tuple(params))
            names = [d[0] for d in cur.description]
            rows = cur.fetchall()

        out: List[Dict[str, Any]] = []
        for r in rows:
            item: Dict[str, Any] = {}
            for name, raw in zip(names, r):
                item[name] = int(raw) if name == PRIMARY_KEY else _json_loads(raw)
            out.append(item)
        return out
