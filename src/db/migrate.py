from __future__ import annotations

import logging
from pathlib import Path

from src.db.connection import get_conn, is_postgres

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def run_migrations() -> list[str]:
    if is_postgres():
        migration_files = sorted((MIGRATIONS_DIR / "postgres").glob("*.sql"))
    else:
        migration_files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    applied: list[str] = []
    with get_conn() as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
              name TEXT PRIMARY KEY,
              applied_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        for migration_file in migration_files:
            already_applied = conn.execute(
                "SELECT 1 FROM schema_migrations WHERE name = ? LIMIT 1",
                (migration_file.name,),
            ).fetchone()
            if already_applied is not None:
                continue
            sql = migration_file.read_text(encoding="utf-8")
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_migrations (name) VALUES (?)",
                (migration_file.name,),
            )
            applied.append(migration_file.name)
    if applied:
        logger.info("applied migrations: %s", ", ".join(applied))
    return applied


if __name__ == "__main__":
    from src.logging_config import configure_logging

    configure_logging()
    run_migrations()
    logger.info("Migrations applied.")
