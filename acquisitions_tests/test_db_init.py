"""Tests for database initialization."""
from sqlalchemy import create_engine, inspect

from acquisitions.db import check_db_connection, create_db_engine, init_db


def test_init_db_creates_users_table(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'init.db'}")
    init_db(engine)

    inspector = inspect(engine)
    assert "users" in inspector.get_table_names()

    columns = {col["name"]: col for col in inspector.get_columns("users")}
    for name in ("id", "name", "email", "password", "role", "created_at", "updated_at"):
        assert name in columns, f"Column {name} should exist in users table"

    for name in ("name", "email", "password", "role", "created_at", "updated_at"):
        assert columns[name]["nullable"] is False, f"{name} should not be nullable"

    unique = inspector.get_unique_constraints("users")
    indexes = inspector.get_indexes("users")
    unique_columns = [c["column_names"] for c in unique] + [i["column_names"] for i in indexes if i.get("unique")]
    assert ["email"] in unique_columns

    engine.dispose()


def test_init_db_is_idempotent(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'twice.db'}")
    init_db(engine)
    init_db(engine)
    assert "users" in inspect(engine).get_table_names()
    engine.dispose()


def test_in_memory_engine_shares_connection(settings):
    settings.DATABASE_URL = "sqlite://"
    engine = create_db_engine(settings)
    init_db(engine)
    assert "users" in inspect(engine).get_table_names()
    assert check_db_connection(engine) is True
    engine.dispose()


def test_check_db_connection_failure():
    engine = create_engine("sqlite:////nonexistent-dir/impossible/path.db")
    assert check_db_connection(engine) is False
