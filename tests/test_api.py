"""HTTP endpoints over a single orchestrator instance."""

from __future__ import annotations

import threading

import pytest
from fastapi.testclient import TestClient

from citycast.main import app
from citycast.services.orchestrator import SearchOrchestrator


@pytest.fixture
def orch(gateway, store) -> SearchOrchestrator:
    return SearchOrchestrator(gateway, store)


@pytest.fixture
def client(monkeypatch, orch):
    monkeypatch.setenv("CITYCAST_DATABASE_URL", "sqlite://")
    with TestClient(app) as c:
        app.state.orchestrator = orch
        yield c


def test_initial_state_is_idle(client):
    body = client.get("/api/state").json()
    assert body == {"query": "", "state": {"status": "idle"}, "history": []}


def test_search_success(client):
    r = client.post("/api/search", json={"q": " Paris "})
    assert r.status_code == 200
    body = r.json()
    assert body["query"] == "Paris"
    assert body["state"] == {
        "status": "success",
        "query": "Paris",
        "result": {"name": "Paris", "temperature_c": 21.5},
    }
    assert body["history"] == ["Paris"]


def test_blank_search_is_rejected(client):
    r = client.post("/api/search", json={"q": "   "})
    assert r.status_code == 400
    assert r.json()["detail"] == "empty query"
    assert client.get("/api/state").json()["state"] == {"status": "idle"}


def test_failed_search_returns_502_and_keeps_history(client):
    client.post("/api/search", json={"q": "Paris"})
    r = client.post("/api/search", json={"q": "Atlantis"})
    assert r.status_code == 502
    body = r.json()
    assert body["state"]["status"] == "failed"
    assert body["state"]["query"] == "Atlantis"
    assert body["history"] == ["Paris"]


def test_replay_promotes_entry(client):
    client.post("/api/search", json={"q": "Lyon"})
    client.post("/api/search", json={"q": "Paris"})
    r = client.post("/api/history/replay", json={"city": "Lyon"})
    assert r.status_code == 200
    assert r.json()["history"] == ["Lyon", "Paris"]


def test_refresh_when_idle_returns_snapshot(client, gateway):
    r = client.post("/api/refresh")
    assert r.status_code == 200
    assert r.json()["state"] == {"status": "idle"}
    assert gateway.calls == []


def test_refresh_after_search(client, gateway):
    client.post("/api/search", json={"q": "Paris"})
    r = client.post("/api/refresh")
    assert r.status_code == 200
    assert gateway.calls == ["Paris", "Paris"]


def test_clear_result(client):
    client.post("/api/search", json={"q": "Paris"})
    body = client.delete("/api/result").json()
    assert body["state"] == {"status": "idle"}
    assert body["history"] == ["Paris"]


def test_clear_and_forget_history(client):
    client.post("/api/search", json={"q": "Lyon"})
    client.post("/api/search", json={"q": "Paris"})

    assert client.delete("/api/history/lyon").json() == {"history": ["Paris"]}
    assert client.delete("/api/history/Nice").status_code == 404
    assert client.delete("/api/history").json() == {"history": []}
    assert client.get("/api/history").json() == {"history": []}


def test_popular_cities(client):
    names = [c["name"] for c in client.get("/api/popular").json()["cities"]]
    assert names == ["Paris", "London", "New York", "Tokyo", "Sydney"]


def test_export_csv(client):
    client.post("/api/search", json={"q": "Lyon"})
    client.post("/api/search", json={"q": "Paris"})
    r = client.get("/export/csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert r.text.splitlines() == ["position,city", "0,Paris", "1,Lyon"]


def test_export_json(client):
    client.post("/api/search", json={"q": "Paris"})
    r = client.get("/export/json")
    assert r.json() == [{"position": 0, "city": "Paris"}]
    assert "recent_searches.json" in r.headers["content-disposition"]


def test_forget_city_containing_slash(client):
    client.post("/api/search", json={"q": "Ivano/Frankivsk"})
    client.post("/api/search", json={"q": "Paris"})

    r = client.delete("/api/history/Ivano/Frankivsk")

    assert r.status_code == 200
    assert r.json() == {"history": ["Paris"]}


@pytest.mark.parametrize(
    "method, path",
    [
        ("delete", "/api/result"),
        ("get", "/api/state"),
        ("get", "/api/history"),
        ("get", "/export/json"),
        ("get", "/export/csv"),
    ],
)
def test_handlers_run_on_event_loop_thread(client, orch, monkeypatch, method, path):
    threads: list[str] = []
    real_clear = orch.clear_result

    def spy_clear():
        threads.append(threading.current_thread().name)
        real_clear()

    def spy_history(self):
        threads.append(threading.current_thread().name)
        return ()

    monkeypatch.setattr(orch, "clear_result", spy_clear)
    monkeypatch.setattr(SearchOrchestrator, "history", property(spy_history))

    getattr(client, method)(path)

    assert threads
    assert all("worker" not in name.lower() for name in threads)
