import os


def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from tickoff.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./tickoff.db")
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_reads_pool_settings(monkeypatch):
    from tickoff.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "8")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "2")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "15")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/tickoff")
    assert "connect_args" not in kwargs
    assert (kwargs["pool_size"], kwargs["max_overflow"], kwargs["pool_timeout"]) == (8, 2, 15)


def test_debug_turns_on_sql_echo(monkeypatch):
    from tickoff.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite://")["echo"] is True

    monkeypatch.delenv("DEBUG", raising=False)
    assert db.get_engine_kwargs("sqlite://")["echo"] is False


def test_sqlite_url_detection():
    from tickoff.database import database as db

    assert db._is_sqlite_url("sqlite:///./tickoff.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False
    assert db._is_sqlite_url(os.getenv("UNSET_URL_FOR_TEST", "")) is False


def test_init_db_creates_tables_on_sqlite(tmp_path, monkeypatch):
    from sqlalchemy import create_engine, inspect
    from tickoff.database import database as db

    url = f"sqlite:///{tmp_path / 'fresh.db'}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "DATABASE_URL", url)

    db.init_db()

    assert {"users", "todos"} <= set(inspect(engine).get_table_names())
