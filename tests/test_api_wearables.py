# tests/test_api_wearables.py

from fitcoach.models.wearable import HealthData, WearableIntegration


def _connect(client, provider="fitbit"):
    return client.post("/api/wearables/connect", json={"provider": provider, "authCode": "abc"})


def test_proveedores(auth_client):
    ids = [p["id"] for p in auth_client.get("/api/wearables/providers").get_json()]
    assert ids == ["fitbit", "garmin", "apple_health", "google_fit"]


def test_conectar_cifra_tokens_y_sincroniza(auth_client):
    resp = _connect(auth_client)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["provider"] == "fitbit"
    assert body["isActive"] is True
    assert body["lastSync"] is not None
    assert "accessToken" not in body and "access_token" not in body

    integration = WearableIntegration.query.one()
    plain = integration.get_access_token()
    assert plain and integration.access_token != plain

    types = {h.data_type for h in HealthData.query.all()}
    assert types == {"heart_rate", "steps", "sleep", "calories_burned", "active_minutes"}


def test_reconectar_no_duplica(auth_client):
    _connect(auth_client)
    _connect(auth_client)
    assert WearableIntegration.query.count() == 1
    assert len(auth_client.get("/api/wearables/integrations").get_json()) == 1


def test_proveedor_desconocido(auth_client):
    resp = _connect(auth_client, "polar")
    assert resp.status_code == 400
    assert "provider" in resp.get_json()["fields"]


def test_sincronizar(auth_client):
    assert auth_client.post("/api/wearables/sync").get_json() == {"synced": 0, "newDataPoints": []}
    _connect(auth_client)
    _connect(auth_client, "garmin")
    out = auth_client.post("/api/wearables/sync").get_json()
    assert out["synced"] == 10
    assert {p["source"] for p in out["newDataPoints"]} == {"fitbit", "garmin"}


def test_desconectar(auth_client):
    _connect(auth_client)
    assert auth_client.delete("/api/wearables/fitbit").status_code == 200
    resp = auth_client.delete("/api/wearables/fitbit")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "IntegrationNotFound"


def test_datos_de_salud_manual(auth_client):
    resp = auth_client.post("/api/health-data", json={
        "dataType": "weight", "value": 72.5, "unit": "kg", "recordedAt": "2026-10-01T08:00:00Z",
    })
    assert resp.status_code == 201
    point = resp.get_json()
    assert point["source"] == "manual"
    assert point["recordedAt"] == "2026-10-01T08:00:00"

    rows = auth_client.get("/api/health-data?type=weight").get_json()
    assert [r["value"] for r in rows] == [72.5]


def test_datos_de_salud_invalidos(auth_client):
    resp = auth_client.post("/api/health-data", json={"dataType": "steps", "value": "muchos"})
    assert resp.status_code == 400
    assert set(resp.get_json()["fields"]) == {"value", "unit"}

    resp = auth_client.post("/api/health-data", json={
        "dataType": "steps", "value": 10, "unit": "steps", "recordedAt": "ayer",
    })
    assert resp.status_code == 400
    assert "recordedAt" in resp.get_json()["fields"]


def test_resumen(auth_client):
    for value in (60, 80):
        auth_client.post("/api/health-data", json={"dataType": "heart_rate", "value": value, "unit": "bpm"})
    summary = auth_client.get("/api/health-data/summary?timeframe=day").get_json()
    assert summary["heart_rate"] == {
        "average": 70.0, "latest": 80.0, "count": 2, "min": 60.0, "max": 80.0, "unit": "bpm",
    }
