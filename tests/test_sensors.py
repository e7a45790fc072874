# tests/test_sensors.py
from datetime import datetime

from datapresenter.models import Measurement, db


def test_create_returns_unmasked_key(client, sensor, series_id):
    assert sensor["seriesId"] == series_id
    assert len(sensor["apiKey"]) >= 40
    assert "..." not in sensor["apiKey"]
    assert "cannot be retrieved later" in sensor["message"]


def test_get_masks_key(client, auth_headers, sensor):
    body = client.get(f"/api/sensors/{sensor['id']}", headers=auth_headers).get_json()
    key = sensor["apiKey"]
    assert body["apiKey"] == f"{key[:4]}...{key[-4:]}"
    assert body["seriesName"] == "Room temperature"
    assert body["isActive"] is True
    assert body["lastDataReceived"] is None
    assert body["measurementCount"] == 0


def test_list_masks_keys(client, auth_headers, sensor):
    body = client.get("/api/sensors", headers=auth_headers).get_json()
    assert [s["id"] for s in body] == [sensor["id"]]
    assert body[0]["apiKey"] != sensor["apiKey"]


def test_sensors_require_token(client, sensor):
    assert client.get("/api/sensors").status_code == 401
    assert client.get(f"/api/sensors/{sensor['id']}").status_code == 401
    assert client.post("/api/sensors", json={"name": "x", "seriesId": 1}).status_code == 401


def test_create_with_unknown_series(client, auth_headers):
    response = client.post("/api/sensors", headers=auth_headers,
                           json={"name": "Orphan sensor", "seriesId": 42})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Series not found"


def test_create_validates_payload(client, auth_headers, series_id):
    response = client.post("/api/sensors", headers=auth_headers,
                           json={"name": "ab", "seriesId": series_id})
    assert response.status_code == 400
    response = client.post("/api/sensors", headers=auth_headers,
                           json={"name": "Valid name", "seriesId": 0})
    assert response.status_code == 400


def test_keys_are_unique(client, auth_headers, series_id, sensor):
    other = client.post("/api/sensors", headers=auth_headers,
                        json={"name": "Second sensor", "seriesId": series_id}).get_json()
    assert other["apiKey"] != sensor["apiKey"]


def test_get_missing_sensor(client, auth_headers):
    assert client.get("/api/sensors/999", headers=auth_headers).status_code == 404


def test_update_sensor(client, auth_headers, sensor):
    response = client.put(f"/api/sensors/{sensor['id']}", headers=auth_headers, json={
        "name": "Renamed sensor",
        "description": "moved to the kitchen",
        "isActive": False,
    })
    assert response.status_code == 204

    body = client.get(f"/api/sensors/{sensor['id']}", headers=auth_headers).get_json()
    assert body["name"] == "Renamed sensor"
    assert body["description"] == "moved to the kitchen"
    assert body["isActive"] is False


def test_update_missing_sensor(client, auth_headers):
    response = client.put("/api/sensors/999", headers=auth_headers, json={"name": "Whatever"})
    assert response.status_code == 404


def test_regenerate_key_invalidates_old_one(client, auth_headers, sensor):
    response = client.post(f"/api/sensors/{sensor['id']}/regenerate-key", headers=auth_headers)
    assert response.status_code == 200
    new_key = response.get_json()["apiKey"]
    assert new_key != sensor["apiKey"]

    old = client.post("/api/measurements/sensor", json={"value": 21.5},
                      headers={"X-API-Key": sensor["apiKey"]})
    assert old.status_code == 401
    new = client.post("/api/measurements/sensor", json={"value": 21.5},
                      headers={"X-API-Key": new_key})
    assert new.status_code == 201


def test_regenerate_key_missing_sensor(client, auth_headers):
    assert client.post("/api/sensors/999/regenerate-key", headers=auth_headers).status_code == 404


def test_delete_sensor_keeps_measurements(app, client, auth_headers, sensor):
    reading = client.post("/api/measurements/sensor", json={"value": 20.0},
                          headers={"X-API-Key": sensor["apiKey"]}).get_json()

    response = client.delete(f"/api/sensors/{sensor['id']}", headers=auth_headers)
    assert response.status_code == 204
    assert client.get(f"/api/sensors/{sensor['id']}", headers=auth_headers).status_code == 404

    body = client.get(f"/api/measurements/{reading['id']}").get_json()
    assert body["sensorId"] is None
    assert body["sensorName"] is None


def test_delete_missing_sensor(client, auth_headers):
    assert client.delete("/api/sensors/999", headers=auth_headers).status_code == 404


def test_stats_without_measurements(client, auth_headers, sensor):
    body = client.get(f"/api/sensors/{sensor['id']}/stats", headers=auth_headers).get_json()
    assert body["totalMeasurements"] == 0
    assert body["averageValue"] == 0
    assert body["minValue"] == 0
    assert body["maxValue"] == 0
    assert body["firstMeasurement"] is None
    assert body["lastMeasurement"] is None


def test_stats_with_measurements(app, client, auth_headers, sensor, series_id):
    with app.app_context():
        for day, value in ((1, 20.0), (2, 22.0), (3, 27.0)):
            db.session.add(Measurement(value=value, timestamp=datetime(2024, 11, day),
                                       series_id=series_id, sensor_id=sensor["id"]))
        db.session.commit()

    body = client.get(f"/api/sensors/{sensor['id']}/stats", headers=auth_headers).get_json()
    assert body["totalMeasurements"] == 3
    assert body["averageValue"] == 23.0
    assert body["minValue"] == 20.0
    assert body["maxValue"] == 27.0
    assert body["firstMeasurement"] == "2024-11-01T00:00:00Z"
    assert body["lastMeasurement"] == "2024-11-03T00:00:00Z"
    assert body["seriesName"] == "Room temperature"


def test_stats_missing_sensor(client, auth_headers):
    assert client.get("/api/sensors/999/stats", headers=auth_headers).status_code == 404
