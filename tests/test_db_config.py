"""
tests/test_db_config.py

Database URL resolution and engine construction guards.
"""

from __future__ import annotations

import os

import pytest

from db import config as db_config
from db.config import load_env_files, normalize_postgres_url, resolve_database_url
from db.session import create_db_engine

URL_VARS = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL", "ENVIRONMENT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in URL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(db_config, "load_env_files", lambda root=None: None)


def test_normalize_postgres_url() -> None:
    assert normalize_postgres_url("postgres://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    assert normalize_postgres_url("postgresql://h/db") == "postgresql+psycopg://h/db"
    assert normalize_postgres_url("postgresql+psycopg://h/db") == "postgresql+psycopg://h/db"


def test_direct_url_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://direct/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/db")
    assert resolve_database_url() == "postgresql+psycopg://direct/db"


def test_cloud_url_only_in_cloud_environments(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://cloud/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/db")
    assert resolve_database_url() == "postgresql+psycopg://local/db"

    monkeypatch.setenv("ENVIRONMENT", "production")
    assert resolve_database_url() == "postgresql+psycopg://cloud/db"


def test_missing_url_raises() -> None:
    with pytest.raises(RuntimeError, match="No database URL configured"):
        resolve_database_url()


def test_load_env_files_keeps_process_values(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text(
        '# local settings\nSCRAPE_TEST_A="from-file"\nSCRAPE_TEST_B=from-file\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("SCRAPE_TEST_B", "from-process")
    monkeypatch.delenv("SCRAPE_TEST_A", raising=False)

    load_env_files(tmp_path)

    assert os.environ["SCRAPE_TEST_A"] == "from-file"
    assert os.environ["SCRAPE_TEST_B"] == "from-process"
    monkeypatch.delenv("SCRAPE_TEST_A")


def test_engine_requires_postgres() -> None:
    with pytest.raises(RuntimeError, match="Only PostgreSQL"):
        create_db_engine("sqlite:///:memory:")
