from fastapi.testclient import TestClient

from gamefilm.api.server import create_app
from gamefilm.config import PlaybackSettings


class _Clock:
    def __init__(self, now: float = 10_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class _Ticker:
    def start(self, interval_ms: float, callback) -> None:
        pass

    def stop(self) -> None:
        pass


_LANES = {
    "lanes": [
        {"lane": 1, "label": "Sideline", "clips": [{"asset_id": "sideline", "lane_position_ms": 0, "duration_ms": 600000}]},
        {"lane": 2, "clips": [{"asset_id": "endzone", "lane_position_ms": 120000, "duration_ms": 60000}]},
    ]
}

_CATALOG = {
    "assets": [
        {"asset_id": "sideline", "label": "Sideline", "order": 0},
        {"asset_id": "endzone", "label": "End Zone", "order": 1, "duration_seconds": 60},
    ]
}


def _client() -> TestClient:
    app = create_app(
        settings=PlaybackSettings(),
        clock=_Clock(),
        ticker=_Ticker(),
        url_resolver=lambda asset_id: f"https://cdn.example/{asset_id}.mp4",
    )
    client = TestClient(app)
    assert client.put("/v1/timeline/lanes", json=_LANES).status_code == 200
    assert client.put("/v1/catalog", json=_CATALOG).status_code == 200
    return client


def test_root_and_favicon_endpoints() -> None:
    client = _client()

    root_response = client.get("/")
    assert root_response.status_code == 200
    assert root_response.json()["status"] == "ok"
    assert root_response.json()["docs"] == "/docs"

    favicon_response = client.get("/favicon.ico")
    assert favicon_response.status_code == 204


def test_timeline_endpoint_reports_lanes_and_duration() -> None:
    client = _client()

    body = client.get("/v1/timeline").json()

    assert body["duration_ms"] == 600000
    assert [lane["label"] for lane in body["lanes"]] == ["Sideline", "Camera 2"]
    assert [asset["asset_id"] for asset in body["assets"]] == ["sideline", "endzone"]


def test_switch_then_metadata_event_settles_and_queues_seek() -> None:
    client = _client()

    switched = client.post("/v1/playback/switch", json={"asset_id": "endzone", "target_ms": 150000})
    assert switched.status_code == 200
    assert switched.json()["coverage"]["kind"] == "switching"
    assert switched.json()["overlay"]["title"] == "Switching camera..."

    load = client.get("/v1/playback/commands").json()["commands"]
    assert load[0]["kind"] == "load"
    assert load[0]["url"] == "https://cdn.example/endzone.mp4"

    settled = client.post(
        "/v1/playback/events",
        json={"type": "metadata_loaded", "asset_id": "endzone", "duration": 60.0, "ready_state": 1},
    )
    body = settled.json()
    assert body["game_time_ms"] == 150000
    assert body["active_lane"] == 2
    assert body["coverage"]["kind"] == "covered"
    assert body["overlay"] is None

    seek = client.get("/v1/playback/commands").json()["commands"]
    assert [(item["kind"], item["seconds"]) for item in seek] == [("seek", 30.0)]


def test_play_pause_and_retry_endpoints() -> None:
    client = _client()
    client.post("/v1/playback/switch", json={"asset_id": "sideline", "target_ms": 5000})
    client.post("/v1/playback/events", json={"type": "metadata_loaded", "asset_id": "sideline", "duration": 600})

    assert client.post("/v1/playback/play").json()["playing"] is True
    assert client.post("/v1/playback/pause").json()["playing"] is False

    client.post("/v1/playback/events", json={"type": "error", "asset_id": "sideline", "error_code": 3})
    failed = client.get("/v1/playback/status").json()
    assert failed["retryable"] is True
    assert failed["overlay"]["retryable"] is True

    retried = client.post("/v1/playback/retry").json()
    assert retried["load_error"] is None


def test_invalid_requests_are_rejected() -> None:
    client = _client()

    overlapping = {
        "lanes": [
            {
                "lane": 1,
                "clips": [
                    {"asset_id": "a", "lane_position_ms": 0, "duration_ms": 10000},
                    {"asset_id": "b", "lane_position_ms": 5000, "duration_ms": 10000},
                ],
            }
        ]
    }
    assert client.put("/v1/timeline/lanes", json=overlapping).status_code == 400
    assert client.put("/v1/timeline/lanes", json={"lanes": [{"lane": 1}, {"lane": 1}]}).status_code == 400
    assert client.post("/v1/playback/lane", json={"lane": 9}).status_code == 422
    assert client.post("/v1/playback/events", json={"type": "time_update"}).status_code == 400
    assert client.post("/v1/playback/events", json={"type": "seeked"}).status_code == 422


def test_dismiss_and_lane_endpoints() -> None:
    client = _client()
    client.post("/v1/playback/switch", json={"asset_id": "endzone", "target_ms": 170000})
    denied = client.post(
        "/v1/playback/events", json={"type": "metadata_loaded", "asset_id": "endzone", "duration": 20}
    ).json()
    assert denied["coverage"]["kind"] == "no_coverage"
    assert denied["coverage"]["reason"] == "after_footage"
    assert denied["overlay"]["dismissible"] is True

    dismissed = client.post("/v1/playback/dismiss").json()
    assert dismissed["overlay"] is None
    assert dismissed["coverage"]["kind"] == "covered"

    selected = client.post("/v1/playback/lane", json={"lane": 1})
    assert selected.status_code == 200
    assert selected.json()["active_lane"] == 1
