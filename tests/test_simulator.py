# tests/test_simulator.py
import json

import httpx

from datapresenter import simulator


def make_client(handler):
    return httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(handler))


def test_make_reading_within_bounds():
    for _ in range(50):
        value = simulator.make_reading(20, 25)["value"]
        assert 20 <= value <= 25


def test_send_reading_posts_with_api_key():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["key"] = request.headers["X-API-Key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": 7, "value": seen["body"]["value"]})

    with make_client(handler) as client:
        stored = simulator.send_reading(client, "SECRET", {"value": 21.0})

    assert stored["id"] == 7
    assert seen == {"path": "/api/measurements/sensor", "key": "SECRET",
                    "body": {"value": 21.0}}


def test_run_keeps_going_after_rejections(monkeypatch):
    monkeypatch.setattr(simulator.time, "sleep", lambda _: None)
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(401, json={"message": "Invalid or inactive API Key"})
        return httpx.Response(201, json={"id": len(calls)})

    with make_client(handler) as client:
        sent = simulator.run(client, api_key="KEY", interval=0, count=3)

    assert sent == 3
    assert len(calls) == 3
