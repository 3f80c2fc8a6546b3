import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import build_conninfo, close_pool, get_connection, init_pool

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "app" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "privacy_core_test")
    os.environ.setdefault("APP_ENV", "test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session", autouse=True)
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    # The pool retries in the background, so connect once with a short timeout first.
    try:
        with psycopg.connect(build_conninfo(test_settings), connect_timeout=3) as conn:
            conn.execute(SCHEMA_PATH.read_text())
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    init_pool(test_settings)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn() -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def seed_user(db_conn: psycopg.Connection[Any]) -> Generator[int, None, None]:
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO users (username, password_hash)
            VALUES (%s, %s)
            RETURNING id
            """,
            (f"user-{uuid.uuid4()}", "not-a-real-hash"),
        )
        row = cur.fetchone()
        assert row is not None
        user_id = int(row[0])
    db_conn.commit()
    try:
        yield user_id
    finally:
        with db_conn.cursor() as cur:
            cur.execute("DELETE FROM users WHERE id = %s", (user_id,))
        db_conn.commit()


@pytest.fixture
def seed_session(db_conn: psycopg.Connection[Any], seed_user: int) -> str:
    token = uuid.uuid4().hex
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO sessions (user_id, token, expires_at)
            VALUES (%s, %s, NOW() + INTERVAL '1 day')
            """,
            (seed_user, token),
        )
    db_conn.commit()
    return token

