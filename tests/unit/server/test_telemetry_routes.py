"""Tests for the live telemetry endpoints."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from selfpark.server import create_app
from selfpark.server.sse import SSEManager
from selfpark.server.telemetry_store import TelemetryStore, telemetry_store


@pytest.fixture
def app_client():
    telemetry_store.clear()
    yield TestClient(create_app())
    telemetry_store.clear()


def _payload(**overrides):
    payload = {"episode_id": 1, "step_count": 10, "cumulative_reward": -0.01, "phase": "running"}
    payload.update(overrides)
    return payload


def test_health(app_client):
    response = app_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_latest_before_any_push(app_client):
    response = app_client.get("/api/telemetry/latest")
    assert response.status_code == 200
    assert response.json() == {"active": False}


def test_push_then_read_latest(app_client):
    response = app_client.post("/api/telemetry", json=_payload())
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["clients_notified"] == 0

    data = app_client.get("/api/telemetry/latest").json()
    assert data["active"] is True
    assert data["episode_id"] == 1
    assert data["step_count"] == 10
    assert data["cumulative_reward"] == pytest.approx(-0.01)


def test_terminated_episodes_are_listed_once(app_client):
    app_client.post("/api/telemetry", json=_payload(step_count=11, cumulative_reward=-1.011, phase="terminated"))
    app_client.post("/api/telemetry", json=_payload(step_count=11, cumulative_reward=-1.011, phase="terminated"))
    app_client.post("/api/telemetry", json=_payload(episode_id=2, step_count=0, cumulative_reward=0.0))

    episodes = app_client.get("/api/telemetry/episodes").json()
    assert len(episodes) == 1
    assert episodes[0]["episode_id"] == 1
    assert episodes[0]["cumulative_reward"] == pytest.approx(-1.011)


def test_runs_are_separate(app_client):
    app_client.post("/api/telemetry", json=_payload(run_id="a", episode_id=4))
    app_client.post("/api/telemetry", json=_payload(run_id="b", episode_id=1))
    assert app_client.get("/api/telemetry/latest", params={"run_id": "a"}).json()["episode_id"] == 4
    assert app_client.get("/api/telemetry/latest", params={"run_id": "b"}).json()["episode_id"] == 1


def test_stale_episode_rejected(app_client):
    app_client.post("/api/telemetry", json=_payload(episode_id=3))
    response = app_client.post("/api/telemetry", json=_payload(episode_id=2))
    assert response.status_code == 409


def test_episode_one_restarts_run(app_client):
    app_client.post("/api/telemetry", json=_payload(episode_id=40, step_count=3))
    response = app_client.post("/api/telemetry", json=_payload(episode_id=1, step_count=0))
    assert response.status_code == 200

    latest = app_client.get("/api/telemetry/latest").json()
    assert (latest["episode_id"], latest["step_count"]) == (1, 0)
    assert app_client.post("/api/telemetry", json=_payload(episode_id=2)).status_code == 200


def test_invalid_payload_rejected(app_client):
    response = app_client.post("/api/telemetry", json=_payload(episode_id=0))
    assert response.status_code == 422
    response = app_client.post("/api/telemetry", json=_payload(step_count=-1))
    assert response.status_code == 422


def test_clear(app_client):
    app_client.post("/api/telemetry", json=_payload())
    assert app_client.delete("/api/telemetry").status_code == 200
    assert app_client.get("/api/telemetry/latest").json() == {"active": False}


def test_store_history_is_bounded():
    from selfpark.server.models import TelemetryPayload

    store = TelemetryStore(history_max=2)
    for i in range(1, 5):
        store.put(TelemetryPayload(episode_id=i, step_count=1, cumulative_reward=2.0, phase="terminated"))
    assert [p.episode_id for p in store.finished()] == [3, 4]


class TestSSEManager:
    def test_broadcast_reaches_clients(self):
        async def scenario():
            manager = SSEManager()
            client = await manager.register()
            notified = await manager.broadcast("tick", json.dumps({"step_count": 1}))
            item = client.queue.get_nowait()
            await manager.shutdown()
            return notified, item

        notified, (_, event_type, data) = asyncio.run(scenario())
        assert notified == 1
        assert event_type == "tick"
        assert json.loads(data) == {"step_count": 1}

    def test_late_client_gets_last_snapshot(self):
        async def scenario():
            manager = SSEManager()
            await manager.broadcast("episode_end", "{}")
            client = await manager.register()
            return client.queue.get_nowait()

        _, event_type, _ = asyncio.run(scenario())
        assert event_type == "episode_end"

    def test_unregister(self):
        async def scenario():
            manager = SSEManager()
            client = await manager.register()
            await manager.unregister(client)
            return manager.client_count

        assert asyncio.run(scenario()) == 0

    def test_viewer_following_one_run(self):
        async def scenario():
            manager = SSEManager()
            await manager.broadcast("tick", '{"n": 1}', run_id="a")
            await manager.broadcast("tick", '{"n": 2}', run_id="b")
            viewer = await manager.register("b")
            replayed = viewer.queue.get_nowait()
            notified_a = await manager.broadcast("tick", '{"n": 3}', run_id="a")
            notified_b = await manager.broadcast("episode_end", '{"n": 4}', run_id="b")
            return replayed, notified_a, notified_b, viewer.queue.get_nowait()

        replayed, notified_a, notified_b, frame = asyncio.run(scenario())
        assert json.loads(replayed.data) == {"n": 2}
        assert (notified_a, notified_b) == (0, 1)
        assert frame.event_type == "episode_end"
        assert frame.encode().startswith(f"id: {frame.event_id}\nevent: episode_end\n")
