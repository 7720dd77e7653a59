"""
Integration tests for the practice API
"""
import logging

import pytest
from fastapi.testclient import TestClient

from vokabel import database
from vokabel.app import create_app
from vokabel.config import settings
from vokabel.errors import FetchError
from vokabel.log_handler import SQLiteHandler
from vokabel.models import DatasetKind
from vokabel.router import get_dataset_loader, get_session_store
from vokabel.sessions import SessionStore


class FakeLoader:
    def __init__(self, records_by_kind=None, error=None):
        self.records_by_kind = records_by_kind or {}
        self.error = error
        self.calls = 0

    async def load(self, kind):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.records_by_kind.get(kind, []))


@pytest.fixture
def loader(nouns, verbs):
    return FakeLoader(
        {DatasetKind.NOUNS: nouns, DatasetKind.VERBS_CONJUGATION: verbs}
    )


@pytest.fixture
def client(loader):
    app = create_app()
    store = SessionStore(seed=3)
    app.dependency_overrides[get_dataset_loader] = lambda: loader
    app.dependency_overrides[get_session_store] = lambda: store
    return TestClient(app)


class TestModes:
    def test_list_modes(self, client):
        response = client.get("/api/modes")
        assert response.status_code == 200
        ids = {mode["id"] for mode in response.json()}
        assert {"noun_gender", "noun_translation"} <= ids


class TestSessionFlow:
    def test_start_session(self, client, nouns):
        response = client.post("/api/sessions", data={"mode": "noun_gender"})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "in_progress"
        assert data["pool_size"] == len(nouns)
        assert data["remaining"] == len(nouns) - 1
        assert data["question"]["options"] == ["Masculine", "Feminine", "Neutral"]
        assert "expected" not in data["question"]

    def test_unknown_mode(self, client):
        response = client.post("/api/sessions", data={"mode": "adjectives"})
        assert response.status_code == 400

    def test_no_session(self, client):
        assert client.get("/api/session").status_code == 401
        assert client.post("/api/session/advance").status_code == 401

    def test_answer_then_double_submit(self, client):
        client.post("/api/sessions", data={"mode": "noun_gender"})
        first = client.post("/api/session/answer", data={"option_index": 0})
        assert first.status_code == 200
        assert set(first.json()) == {"correct", "expected", "given", "detail"}
        assert first.json()["detail"].endswith(("Masculine", "Feminine", "Neutral"))

        second = client.post("/api/session/answer", data={"option_index": 1})
        assert second.status_code == 400
        assert client.get("/api/session").json()["total_answered"] == 1

    def test_invalid_option(self, client):
        client.post("/api/sessions", data={"mode": "noun_gender"})
        response = client.post("/api/session/answer", data={"option_index": 9})
        assert response.status_code == 400

    def test_full_session_and_restart(self, client, nouns):
        client.post("/api/sessions", data={"mode": "noun_translation"})
        for _ in range(len(nouns)):
            outcome = client.post("/api/session/answer", data={"option_index": 0}).json()
            assert "expected" in outcome
            view = client.post("/api/session/advance").json()

        assert view["status"] == "complete"
        assert view["question"] is None
        assert view["total_answered"] == len(nouns)

        restarted = client.post("/api/session/restart").json()
        assert restarted["status"] == "in_progress"
        assert restarted["score"] == 0
        assert restarted["total_answered"] == 0
        assert restarted["remaining"] == len(nouns) - 1

    def test_free_text_answer(self, client):
        client.post("/api/sessions", data={"mode": "verb_typing"})
        view = client.get("/api/session").json()
        assert view["question"]["free_text"] is True
        assert view["question"]["hint"] in {"gehen", "machen"}

        response = client.post("/api/session/answer", data={"answer": "  falsch "})
        assert response.status_code == 200
        assert response.json()["correct"] is False
        assert client.get("/api/session").json()["accuracy"] == 0

    def test_blank_free_text_answer_is_rejected(self, client):
        client.post("/api/sessions", data={"mode": "verb_typing"})
        response = client.post("/api/session/answer", data={"answer": "   "})
        assert response.status_code == 400
        assert response.json() == {"error": "Empty answer"}
        view = client.get("/api/session").json()
        assert view["total_answered"] == 0
        assert view["status"] == "in_progress"

    def test_reload_fetches_again(self, client, loader):
        client.post("/api/sessions", data={"mode": "noun_gender"})
        client.post("/api/session/answer", data={"option_index": 0})
        view = client.post("/api/session/reload").json()
        assert loader.calls == 2
        assert view["total_answered"] == 0
        assert view["status"] == "in_progress"

    def test_reset(self, client):
        client.post("/api/sessions", data={"mode": "noun_gender"})
        assert client.post("/api/reset").json() == {"status": "success"}
        assert client.get("/api/session").status_code == 401


class TestDatasetProblems:
    def test_empty_dataset_is_a_state(self, client, loader):
        loader.records_by_kind[DatasetKind.NOUNS] = []
        data = client.post("/api/sessions", data={"mode": "noun_gender"}).json()
        assert data["status"] == "empty"
        assert data["question"] is None

    def test_fetch_error_is_reported(self, client, loader):
        loader.error = FetchError("https://sheet.test/nouns", status=503, reason="Service Unavailable")
        response = client.post("/api/sessions", data={"mode": "noun_gender"})
        assert response.status_code == 502
        assert response.json()["status"] == 503


class TestLogs:
    def test_disabled_without_database_logging(self, client, monkeypatch):
        monkeypatch.setattr(settings, "LOG_TO_DB", False)
        response = client.get("/api/logs")
        assert response.status_code == 404
        assert response.json() == {"error": "Database logging is disabled"}

    def test_recent_entries(self, client, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "DB_DIR", str(tmp_path / "db"))
        monkeypatch.setattr(settings, "DB_FILE", "test.db")
        monkeypatch.setattr(settings, "LOG_TO_DB", True)
        database.init_db()
        SQLiteHandler().emit(
            logging.makeLogRecord(
                {"name": "vokabel.ingest", "levelname": "WARNING", "msg": "No records decoded for 'nouns'"}
            )
        )

        response = client.get("/api/logs", params={"limit": 5})
        assert response.status_code == 200
        [entry] = response.json()
        assert entry["level"] == "WARNING"
        assert entry["message"] == "No records decoded for 'nouns'"
