import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from adinvoice.config.settings import Settings
from adinvoice.database.connection import apply_schema, close_pool, get_connection, init_pool
from adinvoice.database.repositories.invoice_repository import PostgresInvoiceRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "adinvoice_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings, max_size=4)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def invoice_cleanup(integration_pool: None) -> Generator[list[int], None, None]:
    cleanup: list[int] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        conn.execute("DELETE FROM invoices WHERE id = ANY(%s)", (cleanup,))
        conn.commit()


@pytest.fixture
def repository(integration_pool: None) -> PostgresInvoiceRepository:
    return PostgresInvoiceRepository()
