"""HTTP-level tests: FastAPI TestClient with the store and providers swapped out."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import MidpointRandom
from rockwatch.database import get_db
from rockwatch.dependencies import get_dispatcher, get_scorer, get_weather_service
from rockwatch.main import app
from rockwatch.models.sensor_data import SensorData
from rockwatch.services.notification_channels import DeliveryOutcome
from rockwatch.services.persistence_gateway import AlertRecord
from rockwatch.services.risk_scorer import RiskScorer
from rockwatch.services.weather_service import WeatherService

DANGEROUS = {"displacement": 12, "strain": 400, "pore_pressure": 95, "rainfall": 70,
             "temperature": 35, "dem_slope": 60, "crack_score": 9}


@pytest.fixture
def dispatcher():
    d = MagicMock()
    d.dispatch = AsyncMock(return_value=DeliveryOutcome(provider="resend", channel="email", success=True))
    d.acknowledge = AsyncMock(return_value=None)
    return d


@pytest.fixture
def client(db, dispatcher):
    def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_scorer] = lambda: RiskScorer(rng=MidpointRandom())
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


class TestPredict:
    def test_reading_without_mine(self, client, dispatcher):
        r = client.post("/predict", json={"displacement": 20})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["risk_probability"] == pytest.approx(0.125)
        assert data["risk_level"] == "low"
        assert data["confidence"] == pytest.approx(0.95)
        assert data["alert_triggered"] is False
        assert data["parameter_alerts"][0]["parameter"] == "Displacement"
        dispatcher.dispatch.assert_not_awaited()

    def test_malformed_field_falls_back(self, client):
        r = client.post("/predict", json={"displacement": "abc"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is False
        assert data["risk_probability"] == 0.5
        assert data["risk_level"] == "medium"
        assert data["confidence"] == 0.5

    def test_non_json_body_falls_back(self, client):
        r = client.post("/predict", content="not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 200
        assert r.json()["risk_level"] == "medium"

    def test_unknown_mine(self, client):
        r = client.post("/predict", json={"mine_id": "nowhere", **DANGEROUS})
        assert r.status_code == 404
        assert r.json()["success"] is False

    def test_escalation_updates_mine(self, client, dispatcher, mine):
        r = client.post("/predict", json={"mine_id": mine.id, **DANGEROUS})
        assert r.status_code == 200
        data = r.json()
        assert data["alert_triggered"] is True
        assert data["alert_state"] == "high"
        assert data["delivery"] == {"provider": "resend", "success": True}
        dispatcher.dispatch.assert_awaited_once()

        stored = client.get(f"/mines/{mine.id}").json()
        assert stored["alert_level"] == "high"
        assert stored["current_risk_level"] == data["risk_level"]

        again = client.post("/predict", json={"mine_id": mine.id, **DANGEROUS}).json()
        assert again["alert_triggered"] is False

    @pytest.mark.parametrize("body", ['{"displacement": 1e400}', '{"strain": -Infinity}'])
    def test_non_finite_value_falls_back(self, client, body):
        r = client.post("/predict", content=body, headers={"Content-Type": "application/json"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is False
        assert data["risk_level"] == "medium"

    def test_non_finite_value_leaves_mine_untouched(self, client, db, dispatcher, mine):
        body = '{"mine_id": "%s", "displacement": 1e400}' % mine.id
        r = client.post("/predict", content=body, headers={"Content-Type": "application/json"})
        assert r.status_code == 200
        assert r.json()["success"] is False
        assert db.query(SensorData).count() == 0
        assert client.get(f"/mines/{mine.id}").json()["alert_level"] == "low"
        dispatcher.dispatch.assert_not_awaited()

    def test_negative_value_falls_back(self, client):
        r = client.post("/predict", json={"displacement": -50, "strain": -1000})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is False
        assert "non-negative" in data["error"]


class TestSendAlert:
    def test_missing_fields(self, client, dispatcher):
        r = client.post("/send-alert", json={"mine_id": "m1"})
        assert r.status_code == 400
        assert r.json()["success"] is False
        dispatcher.dispatch.assert_not_awaited()

    def test_invalid_json(self, client):
        r = client.post("/send-alert", content="{", headers={"Content-Type": "application/json"})
        assert r.status_code == 400

    def test_sends_and_records(self, client, dispatcher, mine):
        r = client.post("/send-alert", json={
            "mine_id": mine.id, "mine_name": mine.name, "location": mine.location,
            "risk_probability": 0.85, "user_email": "ops@rockwatch.example",
        })
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Alert notifications sent",
                            "provider": "resend", "delivered": True, "error": None}
        message = dispatcher.dispatch.await_args.args[0]
        assert message.email_to == "ops@rockwatch.example"
        assert message.subject.startswith("📊 CRITICAL RISK")

        alerts = client.get("/alerts", params={"mine_id": mine.id}).json()
        assert len(alerts) == 1
        assert alerts[0]["alert_level"] == "critical"

    def test_unexpected_error_is_500(self, client, dispatcher, mine):
        dispatcher.dispatch.side_effect = RuntimeError("boom")
        r = client.post("/send-alert", json={
            "mine_id": mine.id, "mine_name": mine.name, "location": mine.location, "risk_probability": 0.5,
        })
        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Internal server error"}
        assert r.headers["access-control-allow-origin"] == "*"


class TestImportSensorData:
    def test_plain_array(self, client, db, mine):
        rows = [
            {"mine_id": mine.id, "displacement": 4.2, "strain": 180, "timestamp": "2024-06-01T10:00:00"},
            {"mine_id": mine.id, "rainfall": 12.5},
        ]
        r = client.post("/import-sensor-data", json=rows)
        assert r.status_code == 200
        assert r.json()["imported_count"] == 2
        assert db.query(SensorData).count() == 2

    def test_csv_wrapper(self, client, mine):
        r = client.post("/import-sensor-data", json={"csvData": [{"mine_id": mine.id, "crack_score": 3}]})
        assert r.status_code == 200
        assert r.json()["success"] is True
        assert len(client.get("/sensor-data", params={"mine_id": mine.id}).json()) == 1

    def test_invalid_row_rejects_whole_batch(self, client, db, mine):
        r = client.post("/import-sensor-data", json=[
            {"mine_id": mine.id, "displacement": 1},
            {"mine_id": mine.id, "displacement": "abc"},
        ])
        assert r.status_code == 400
        assert db.query(SensorData).count() == 0

    def test_non_array_body(self, client):
        assert client.post("/import-sensor-data", json={"rows": []}).status_code == 400

    def test_non_finite_row_rejected(self, client, db, mine):
        body = '[{"mine_id": "%s", "displacement": 1e400}]' % mine.id
        r = client.post("/import-sensor-data", content=body, headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert "finite" in r.json()["error"]
        assert db.query(SensorData).count() == 0
        assert client.get("/sensor-data").status_code == 200

    def test_negative_row_rejected(self, client, db, mine):
        r = client.post("/import-sensor-data", json=[{"mine_id": mine.id, "rainfall": -3.5}])
        assert r.status_code == 400
        assert "non-negative" in r.json()["error"]
        assert db.query(SensorData).count() == 0


class TestAlertsAndMines:
    def test_resolve_alert(self, client, gateway, mine):
        alert = gateway.append_alert_record(AlertRecord(mine.id, "high", 0.8, "High Rockfall Risk"))
        r = client.put(f"/alerts/{alert.id}/resolve")
        assert r.status_code == 200
        assert r.json() == {"id": alert.id, "status": "resolved"}
        assert client.get("/alerts", params={"is_resolved": "false"}).json() == []

    def test_resolve_unknown_alert(self, client):
        assert client.put("/alerts/999/resolve").status_code == 404

    def test_list_mines(self, client, mine):
        mines = client.get("/mines").json()
        assert [m["id"] for m in mines] == [mine.id]

    def test_unknown_mine(self, client):
        assert client.get("/mines/nowhere").status_code == 404


class TestPlumbing:
    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "ok"
        assert data["service"] == "rockwatch-alerts"
        assert data["database"] == "ok"

    def test_preflight_with_origin(self, client):
        r = client.options("/predict", headers={
            "Origin": "https://dashboard.example",
            "Access-Control-Request-Method": "POST",
        })
        assert r.status_code == 200
        assert r.headers["access-control-allow-origin"] == "*"

    def test_preflight_without_origin(self, client):
        r = client.options("/send-alert")
        assert r.status_code == 200
        assert r.headers["access-control-allow-origin"] == "*"
        assert "content-type" in r.headers["access-control-allow-headers"]


class TestWeather:
    def test_fetch(self, client):
        def handler(request):
            assert request.url.params["appid"] == "owm-key"
            return httpx.Response(200, json={"main": {"temp": 31.5}, "rain": {"1h": 2.4}})

        service = WeatherService("owm-key", "https://weather.test/data",
                                 client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        app.dependency_overrides[get_weather_service] = lambda: service

        r = client.post("/fetch-weather-data", json={"latitude": 23.74, "longitude": 86.41})
        assert r.status_code == 200
        assert r.json() == {"temperature": 31.5, "rainfall": pytest.approx(24.0)}

    def test_missing_key(self, client):
        app.dependency_overrides[get_weather_service] = lambda: WeatherService(None, "https://weather.test/data")
        r = client.post("/fetch-weather-data", json={"latitude": 23.74, "longitude": 86.41})
        assert r.status_code == 500
        assert r.json()["error"] == "Weather API key not configured"
