import pytest

from src.db.migrate import run_migrations


@pytest.fixture
def sqlite_db(tmp_path, monkeypatch):
    db_file = tmp_path / "app.db"
    monkeypatch.setenv("APP_DB_PATH", str(db_file))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    run_migrations()
    return db_file
