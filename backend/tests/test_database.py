"""
Tests for engine construction and schema creation.
"""
from sqlalchemy import inspect

from bracketeer.database import build_engine, init_db


def test_file_database_gets_parent_directory(tmp_path):
    db_file = tmp_path / "nested" / "data" / "bracketeer.db"
    engine = build_engine(f"sqlite:///{db_file}")
    try:
        assert db_file.parent.is_dir()
        init_db(engine)
        assert {"event", "eventregistration", "eventmatch"} <= set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_memory_database_creates_no_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    engine = build_engine("sqlite:///:memory:", echo=True)
    try:
        assert engine.echo is True
        assert list(tmp_path.iterdir()) == []
    finally:
        engine.dispose()
