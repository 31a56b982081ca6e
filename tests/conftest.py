"""
Global pytest fixtures for the Keylink test suite.

Responsibilities:
    - Provide isolated mapping stores (in-memory and sqlite on tmp_path)
    - Provide a LinkManager wired to a fresh store
    - Provide a FastAPI TestClient built by the app factory around an injected store

Why inject the store?
    `create_app(storage=...)` keeps every test on its own table, so nothing
    ever touches the default database file in the working directory.

LLM Prompt Example:
    "Show how to structure pytest fixtures to isolate service state and
    support both integration and unit tests without external dependencies."
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from keylink.manager.link_manager import LinkManager
from keylink.storage.sqlite_storage import SqliteStorage
from keylink.storage.storage import Storage


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory store."""
    return Storage()


@pytest.fixture
def sqlite_storage(tmp_path) -> SqliteStorage:
    """
    Fresh sqlite store in a per-test temporary directory.

    LLM Prompt Example:
        "Explain how tmp_path gives each test its own on-disk database."
    """
    return SqliteStorage(tmp_path / "keylink.db")


@pytest.fixture
def manager(storage: Storage) -> LinkManager:
    return LinkManager(storage=storage)


@pytest.fixture
def client(sqlite_storage: SqliteStorage) -> TestClient:
    """
    Provide a TestClient around a new app bound to a temporary sqlite table.

    Notes:
        - Redirects are not followed so tests can assert on the 303 itself.
    """
    app = create_app(storage=sqlite_storage)
    return TestClient(app, follow_redirects=False)
