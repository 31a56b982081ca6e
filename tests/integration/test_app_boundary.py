"""
Boundary tests for the Keylink HTTP API: missing fields, malformed bodies,
store failures, corrupted records and startup errors.
"""

import sqlite3

import pytest
from fastapi.testclient import TestClient

from main import SET_URL_FAILURE, create_app
from keylink.errors import StartupError, StoreIOError
from keylink.storage.storage import Storage


class BrokenStorage(Storage):
    """Every operation fails the way a full or unreadable disk would."""

    def get(self, key):
        raise StoreIOError("read failed")

    def put(self, key, value):
        raise StoreIOError("disk full")

    def delete(self, key):
        raise StoreIOError("disk full")

    def iterate(self):
        yield b"a", b"https://a.example"
        raise StoreIOError("unreadable record")


@pytest.fixture
def broken_client():
    return TestClient(create_app(storage=BrokenStorage()), follow_redirects=False)


def test_get_url_without_key_is_404(client):
    assert client.get("/get_url").status_code == 404


def test_get_url_with_empty_key_is_404(client):
    assert client.get("/get_url", params={"key": ""}).status_code == 404


def test_set_url_missing_key_is_400(client):
    resp = client.post("/set_url", json={"url": "https://example.com"})
    assert resp.status_code == 400


def test_set_url_not_json_is_400(client):
    resp = client.post("/set_url", content=b"key=abc", headers={"content-type": "text/plain"})
    assert resp.status_code == 400


def test_set_url_wrong_type_is_400(client):
    resp = client.post("/set_url", json={"key": "abc", "url": 42})
    assert resp.status_code == 400


def test_set_url_empty_key_is_400_with_message(client):
    resp = client.post("/set_url", json={"key": "", "url": "https://example.com"})
    assert resp.status_code == 400
    assert resp.text == SET_URL_FAILURE


def test_set_url_store_failure_is_400_with_message(broken_client):
    resp = broken_client.post("/set_url", json={"key": "abc", "url": "https://example.com"})
    assert resp.status_code == 400
    assert resp.text == SET_URL_FAILURE

    resp = broken_client.post("/set_url", json={"key": "abc"})
    assert resp.status_code == 400
    assert resp.text == SET_URL_FAILURE


def test_get_url_store_failure_is_500(broken_client):
    assert broken_client.get("/get_url", params={"key": "abc"}).status_code == 500


def test_list_urls_store_failure_is_500_without_partial_result(broken_client):
    resp = broken_client.get("/list_urls")
    assert resp.status_code == 500
    assert "https://a.example" not in resp.text


def test_undecodable_url_is_500(sqlite_storage):
    sqlite_storage.put(b"bad", b"\xff\xfe")
    client = TestClient(create_app(storage=sqlite_storage), follow_redirects=False)
    assert client.get("/get_url", params={"key": "bad"}).status_code == 500
    assert client.get("/list_urls").status_code == 500
    # the app keeps serving other requests
    assert client.get("/health").status_code == 200


def test_corrupted_record_makes_list_500(sqlite_storage):
    sqlite_storage.put(b"good", b"https://good.example")
    con = sqlite3.connect(sqlite_storage.path)
    con.execute("INSERT INTO mappings (key, value) VALUES (?, ?)", (b"torn", "text-not-blob"))
    con.commit()
    con.close()

    client = TestClient(create_app(storage=sqlite_storage), follow_redirects=False)
    assert client.get("/list_urls").status_code == 500
    assert client.get("/get_url", params={"key": "good"}).status_code == 303


def test_unknown_backend_is_startup_error(monkeypatch):
    monkeypatch.setenv("KEYLINK_STORAGE_BACKEND", "nosuch")
    with pytest.raises(StartupError, match="Unknown storage backend"):
        create_app()


def test_unopenable_storage_path_is_startup_error(monkeypatch, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    monkeypatch.setenv("KEYLINK_STORAGE_BACKEND", "sqlite")
    monkeypatch.setenv("KEYLINK_DB_PATH", str(blocker / "t.db"))
    with pytest.raises(StartupError):
        create_app()
