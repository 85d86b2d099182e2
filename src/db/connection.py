from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any


DEFAULT_DB_PATH = "data/app.db"


def db_path() -> Path:
    return Path(os.getenv("APP_DB_PATH", DEFAULT_DB_PATH))


def database_url() -> str:
    return os.getenv("DATABASE_URL", "").strip()


def ensure_db_dir() -> None:
    db_path().parent.mkdir(parents=True, exist_ok=True)


def is_postgres() -> bool:
    url = database_url()
    return url.startswith("postgres://") or url.startswith("postgresql://")


def _convert_qmark_to_pyformat(sql: str) -> str:
    # Repository queries use sqlite-style placeholders.
    # For psycopg, convert '?' to '%s'.
    return sql.replace("?", "%s")


class PostgresAdapter:
    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Any:
        cur = self._conn.cursor()
        cur.execute(_convert_qmark_to_pyformat(sql), params)
        return cur

    def executescript(self, sql: str) -> None:
        cur = self._conn.cursor()
        cur.execute(sql)

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


@contextmanager
def get_conn() -> Any:
    if is_postgres():
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError as exc:
            raise RuntimeError(
                "DATABASE_URL is set to postgres but psycopg is not installed. "
                "Install the 'postgres' extra (pip install .[postgres])."
            ) from exc

        conn = psycopg.connect(database_url(), row_factory=dict_row)
        adapter = PostgresAdapter(conn)
        try:
            yield adapter
            adapter.commit()
        except Exception:
            adapter.rollback()
            raise
        finally:
            adapter.close()
        return

    ensure_db_dir()
    conn = sqlite3.connect(db_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
