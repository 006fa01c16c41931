"""HTTP surface: status codes and payloads for nodes, readings, alarms, health."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from api.deps import get_alarm_manager, get_monitoring
from fakes import make_node
from main import app
from models import Base
from services.alarm_lifecycle import AlarmLifecycleManager
from services.monitoring import GridMonitoringService
from services.repository import GridRepository
from services.threshold_evaluator import ThresholdEvaluator

HOT_READING = {
    "voltage": 231,
    "current": 120,
    "power": 95,
    "frequency": 50.01,
    "temperature": 85,
    "power_factor": 0.97,
}


@pytest.fixture
def client(repo):
    node = repo.add_node(make_node("GRID-NODE-001"))
    assert node.id == 1
    monitoring = GridMonitoringService(repo, ThresholdEvaluator(repo))
    manager = AlarmLifecycleManager(repo)
    app.dependency_overrides[get_monitoring] = lambda: monitoring
    app.dependency_overrides[get_alarm_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_list_and_get_nodes(client):
    response = client.get("/api/gridnodes")
    assert response.status_code == 200
    nodes = response.json()
    assert [n["node_id"] for n in nodes] == ["GRID-NODE-001"]
    assert nodes[0]["active_alarms"] == []

    detail = client.get("/api/gridnodes/1")
    assert detail.status_code == 200
    assert detail.json()["status"] == "Online"
    assert detail.json()["maintenance_events"] == []


def test_unknown_node_is_404(client):
    assert client.get("/api/gridnodes/999").status_code == 404
    assert client.get("/api/gridnodes/999/readings").status_code == 404
    assert client.post("/api/gridnodes/999/readings", json=HOT_READING).status_code == 404


def test_provision_node(client):
    response = client.post("/api/gridnodes", json={
        "node_id": "GRID-NODE-010",
        "name": "Riverside substation",
        "location": "Riverside",
        "node_type": "Substation",
        "capacity": 150,
        "installation_date": "2021-03-04T00:00:00Z",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "Online"
    assert body["installation_date"].startswith("2021-03-04T00:00:00")


def test_hot_reading_raises_alarm_visible_in_active_list(client):
    created = client.post("/api/gridnodes/1/readings", json=HOT_READING)
    assert created.status_code == 201
    assert created.json()["temperature"] == 85
    assert created.json()["grid_node_id"] == 1

    alarms = client.get("/api/alarms").json()
    assert len(alarms) == 1
    assert alarms[0]["alarm_code"] == "TEMP_HIGH"
    assert alarms[0]["severity"] == "High"
    assert alarms[0]["status"] == "Active"

    nodes = client.get("/api/gridnodes").json()
    assert len(nodes[0]["active_alarms"]) == 1


def test_acknowledge_then_resolve_flow(client):
    client.post("/api/gridnodes/1/readings", json=HOT_READING)
    alarm_id = client.get("/api/alarms").json()[0]["id"]

    acked = client.post(f"/api/alarms/{alarm_id}/acknowledge", json="operator1")
    assert acked.status_code == 200
    assert acked.json()["status"] == "Acknowledged"
    assert acked.json()["acknowledged_by"] == "operator1"
    assert acked.json()["acknowledged_at"] is not None

    still_listed = client.get("/api/alarms").json()
    assert [a["id"] for a in still_listed] == [alarm_id]

    resolved = client.post(f"/api/alarms/{alarm_id}/resolve", json="breaker replaced")
    assert resolved.status_code == 200
    body = resolved.json()
    assert body["status"] == "Resolved"
    assert body["resolution"] == "breaker replaced"
    assert body["resolved_at"] is not None
    assert body["acknowledged_by"] == "operator1"

    assert client.get("/api/alarms").json() == []


def test_lifecycle_on_unknown_alarm_is_404(client):
    assert client.post("/api/alarms/77/acknowledge", json="operator1").status_code == 404
    assert client.post("/api/alarms/77/resolve", json="done").status_code == 404


def test_cool_reading_raises_nothing(client):
    reading = dict(HOT_READING, temperature=80)
    assert client.post("/api/gridnodes/1/readings", json=reading).status_code == 201
    assert client.get("/api/alarms").json() == []


@pytest.mark.parametrize("field", ["voltage", "current", "power", "frequency"])
def test_negative_reading_is_400(client, field):
    response = client.post("/api/gridnodes/1/readings", json=dict(HOT_READING, **{field: -1}))
    assert response.status_code == 400


def test_readings_limit(client):
    for temperature in (50, 51, 52, 53):
        client.post("/api/gridnodes/1/readings", json=dict(HOT_READING, temperature=temperature))

    response = client.get("/api/gridnodes/1/readings", params={"limit": 2})
    assert response.status_code == 200
    assert [r["temperature"] for r in response.json()] == [53, 52]

    assert client.get("/api/gridnodes/1/readings", params={"limit": 0}).status_code == 400


def test_stats_with_and_without_data(client):
    empty = client.get("/api/gridnodes/1/stats")
    assert empty.status_code == 200
    assert empty.json()["has_data"] is False
    assert empty.json()["message"] == "No data available for the specified period"

    client.post("/api/gridnodes/1/readings", json=dict(HOT_READING, voltage=230, temperature=60))
    client.post("/api/gridnodes/1/readings", json=dict(HOT_READING, voltage=240, temperature=70))

    stats = client.get("/api/gridnodes/1/stats").json()
    assert stats["has_data"] is True
    assert stats["data_points"] == 2
    assert stats["voltage"] == {"avg": 235.0, "min": 230.0, "max": 240.0}
    assert stats["temperature"]["max"] == 70.0


def test_stats_inverted_range_is_400(client):
    response = client.get("/api/gridnodes/1/stats", params={
        "from": "2026-10-02T00:00:00",
        "to": "2026-10-01T00:00:00",
    })
    assert response.status_code == 400


def test_storage_outage_is_503(client, repo):
    repo.fail_on.add("list_nodes")
    assert client.get("/api/gridnodes").status_code == 503


def test_health_endpoints(client, repo):
    healthy = client.get("/health")
    assert healthy.status_code == 200
    check = healthy.json()["checks"][0]
    assert check["data"]["grid_nodes_count"] == 1
    assert client.get("/health/live").status_code == 200
    assert client.get("/health/ready").status_code == 200

    repo.fail_on.add("ping")
    assert client.get("/health").status_code == 503
    assert client.get("/health/ready").status_code == 503
    assert client.get("/health/live").status_code == 200


def test_external_alarm_is_created_active(client):
    response = client.post("/api/alarms", json={
        "grid_node_id": 1,
        "alarm_code": "VOLT_LOW",
        "severity": "Medium",
        "message": "Voltage below band",
    })
    assert response.status_code == 201
    assert response.json()["status"] == "Active"

    unknown = client.post("/api/alarms", json={
        "grid_node_id": 999,
        "alarm_code": "VOLT_LOW",
        "severity": "Medium",
        "message": "Voltage below band",
    })
    assert unknown.status_code == 404


def test_strict_mode_rejects_re_resolve_with_409(client, repo):
    app.dependency_overrides[get_alarm_manager] = lambda: AlarmLifecycleManager(repo, strict=True)
    client.post("/api/gridnodes/1/readings", json=HOT_READING)
    alarm_id = client.get("/api/alarms").json()[0]["id"]

    assert client.post(f"/api/alarms/{alarm_id}/resolve", json="fixed").status_code == 200
    again = client.post(f"/api/alarms/{alarm_id}/resolve", json="fixed twice")
    assert again.status_code == 409
    assert repo.alarms[alarm_id].resolution == "fixed"


def test_duplicate_node_id_is_400(client):
    response = client.post("/api/gridnodes", json={
        "node_id": "GRID-NODE-001",
        "name": "Second registration",
        "node_type": "Distribution",
        "capacity": 10,
        "installation_date": "2021-03-04T00:00:00",
    })
    assert response.status_code == 400


@pytest.mark.parametrize("field, value", [
    ("temperature", 1000),
    ("frequency", 10_000),
    ("voltage", 100_000_000),
])
def test_reading_beyond_column_range_is_400(client, repo, field, value):
    response = client.post("/api/gridnodes/1/readings", json=dict(HOT_READING, **{field: value}))
    assert response.status_code == 400
    assert repo.readings == []


def test_duplicate_node_id_on_sql_storage_is_400(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'gridos_api.db'}", poolclass=NullPool
    )

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_tables())
    repository = GridRepository(
        async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    )
    monitoring = GridMonitoringService(repository, ThresholdEvaluator(repository))
    app.dependency_overrides[get_monitoring] = lambda: monitoring
    body = {
        "node_id": "GRID-NODE-001",
        "name": "Oslo Central Substation",
        "node_type": "Substation",
        "capacity": 150.5,
        "installation_date": "2020-01-15T00:00:00",
    }
    try:
        client = TestClient(app)
        assert client.post("/api/gridnodes", json=body).status_code == 201
        second = client.post("/api/gridnodes", json=body)
        assert second.status_code == 400
        assert "node_id" in second.json()["detail"]
    finally:
        app.dependency_overrides.clear()
        asyncio.run(engine.dispose())
