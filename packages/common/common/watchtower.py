from __future__ import annotations

import json
import logging
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path


_CREATE_TABLE = """\
CREATE TABLE IF NOT EXISTS logs (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp  REAL    NOT NULL,
    level      TEXT    NOT NULL,
    source     TEXT    NOT NULL,
    message    TEXT    NOT NULL,
    data_json  TEXT,
    run_id     TEXT
)
"""

_CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_logs_ts_level ON logs (timestamp, level)",
    "CREATE INDEX IF NOT EXISTS idx_logs_run ON logs (run_id, timestamp)",
]


@dataclass
class LogEntry:
    timestamp: float
    level: str
    source: str
    message: str
    data: dict | None = None
    run_id: str | None = None
    id: int | None = None


def get_connection(db_path: str | Path) -> sqlite3.Connection:
    """Open (or create) a SQLite database with WAL mode."""
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.row_factory = sqlite3.Row
    return conn


class Watchtower:
    """Structured log sink backed by SQLite.

    Each digest run tags its records with a run id (the run date), so a
    failed weekly run can be inspected after the fact with :meth:`query`,
    :meth:`errors_since` or :meth:`runs`.
    """

    def __init__(self, db_path: str | Path = "~/.gazette/watchtower.db") -> None:
        self._conn = get_connection(db_path)
        self._conn.execute(_CREATE_TABLE)
        for stmt in _CREATE_INDEXES:
            self._conn.execute(stmt)
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    # -- write -----------------------------------------------------------------

    def log(
        self,
        level: str,
        source: str,
        message: str,
        data: dict | None = None,
        run_id: str | None = None,
    ) -> None:
        self._conn.execute(
            "INSERT INTO logs (timestamp, level, source, message, data_json, run_id) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                time.time(),
                level,
                source,
                message,
                json.dumps(data, ensure_ascii=False) if data else None,
                run_id,
            ),
        )
        self._conn.commit()

    # -- read ------------------------------------------------------------------

    def query(
        self,
        since: float | None = None,
        level: str | None = None,
        source: str | None = None,
        run_id: str | None = None,
        search: str | None = None,
        limit: int = 100,
    ) -> list[LogEntry]:
        clauses: list[str] = []
        params: list = []

        if since is not None:
            clauses.append("timestamp >= ?")
            params.append(since)
        if level is not None:
            clauses.append("level = ?")
            params.append(level)
        if source is not None:
            clauses.append("source LIKE ?")
            params.append(f"{source}%")
        if run_id is not None:
            clauses.append("run_id = ?")
            params.append(run_id)
        if search is not None:
            clauses.append("message LIKE ?")
            params.append(f"%{search}%")

        where = " AND ".join(clauses) if clauses else "1=1"
        sql = f"SELECT * FROM logs WHERE {where} ORDER BY timestamp DESC, id DESC LIMIT ?"
        params.append(limit)

        rows = self._conn.execute(sql, params).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def errors_since(self, hours: float = 24 * 7) -> list[LogEntry]:
        since = time.time() - hours * 3600
        return self.query(since=since, level="ERROR")

    def runs(self, limit: int = 20) -> list[dict]:
        """Most recent runs with their record and error counts."""
        rows = self._conn.execute(
            "SELECT run_id, MIN(timestamp) AS started_at, COUNT(*) AS records, "
            "SUM(CASE WHEN level = 'ERROR' THEN 1 ELSE 0 END) AS errors "
            "FROM logs WHERE run_id IS NOT NULL "
            "GROUP BY run_id ORDER BY started_at DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [dict(r) for r in rows]

    # -- helpers ---------------------------------------------------------------

    @staticmethod
    def _row_to_entry(row) -> LogEntry:
        return LogEntry(
            id=row["id"],
            timestamp=row["timestamp"],
            level=row["level"],
            source=row["source"],
            message=row["message"],
            data=json.loads(row["data_json"]) if row["data_json"] else None,
            run_id=row["run_id"],
        )


class WatchtowerHandler(logging.Handler):
    """Logging handler that writes every record to a :class:`Watchtower`.

    ``run_id`` can be set after construction once the run date is known.
    """

    def __init__(self, watchtower: Watchtower, source: str, run_id: str | None = None) -> None:
        super().__init__()
        self._wt = watchtower
        self._source = source
        self.run_id = run_id

    def close(self) -> None:
        self._wt.close()
        super().close()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            data = getattr(record, "data", None)
            if record.exc_info:
                data = dict(data or {})
                data["exception"] = self.format(record).splitlines()[-1]
            self._wt.log(
                level=record.levelname,
                source=f"{self._source}.{record.name}",
                message=record.getMessage(),
                data=data,
                run_id=self.run_id,
            )
        except Exception:
            self.handleError(record)
